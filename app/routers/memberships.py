"""
memberships.py

체육관 멤버십 관리 API (체육관 운영진용).

- 목록 조회      : 해당 체육관의 MANAGE_MEMBERSHIPS 권한
- 수정 / 삭제    : 대상 멤버십이 속한 체육관의 MANAGE_MEMBERSHIPS 권한
  + 계층 규칙(본인 변경 금지, COACH 는 ATHLETE 상태만 등)은 서비스에서 확인

"""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_gym_permission, require_membership_permission
from app.core.security import Caller
from app.models.membership import MembershipStatus, Permission
from app.schemas.mapping import to_membership_response
from app.schemas.membership import MembershipResponse, MembershipUpdateRequest
from app.services import memberships as membership_service

router = APIRouter(prefix="/memberships", tags=["memberships"])


@router.get("", response_model=list[MembershipResponse])
def list_memberships(
    gym_id: uuid.UUID,
    status_filter: MembershipStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_gym_permission(Permission.MANAGE_MEMBERSHIPS)),
):
    return [
        to_membership_response(m)
        for m in membership_service.list_memberships(db, gym_id, status_filter)
    ]


@router.put("/{membership_id}", response_model=MembershipResponse)
def update_membership(
    membership_id: uuid.UUID,
    data: MembershipUpdateRequest,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_membership_permission(Permission.MANAGE_MEMBERSHIPS)),
):
    membership = membership_service.update_membership(
        db,
        caller,
        membership_id,
        status=data.status,
        gym_role=data.gym_role,
        permissions=data.permissions,
    )
    return to_membership_response(membership)


@router.delete("/{membership_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_membership(
    membership_id: uuid.UUID,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_membership_permission(Permission.MANAGE_MEMBERSHIPS)),
):
    membership_service.delete_membership(db, caller, membership_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
