from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_current_admin, get_db
from app.core.security import Caller
from app.schemas.admin_log import AdminLogResponse
from app.services.admin_log import list_admin_logs


router = APIRouter(prefix="/admin", tags=["admin"])


# 관리자 행위 로그 조회 (최신순)
@router.get("/logs", response_model=list[AdminLogResponse])
def get_admin_logs(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    admin: Caller = Depends(get_current_admin),
):
    return list_admin_logs(db, limit)
