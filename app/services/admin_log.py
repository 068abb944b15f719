"""
services/admin_log.py

플랫폼 관리자 행위 로그 기록 / 조회 서비스.

이 파일은 관리자(Admin)가 수행한 주요 행위를
AdminActionLog 테이블에 기록하는 역할을 담당한다.

서비스 계층에서 호출되며,
로그 기록 자체는 DB에만 영향을 주고
비즈니스 흐름에는 개입하지 않는다.

설계 원칙:
- 로그는 실제 변경과 같은 트랜잭션에 포함 (commit은 호출 측)
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계

"""

import uuid

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from app.models.admin_log import AdminAction, AdminActionLog


"""
관리자 행위 로그 기록 함수

- actor_id       : 행위를 수행한 관리자 ID
- action         : 수행된 관리자 행위 유형
- target_user_id : 행위 대상 사용자 ID (선택)
- target_gym_id  : 행위 대상 체육관 ID (선택)
- before_status  : 변경 전 상태 (선택)
- after_status   : 변경 후 상태 (선택)

NOTE:
- db.commit()은 호출 측(서비스)에서 수행

"""
def write_admin_log(
    db: Session,
    *,
    actor_id: uuid.UUID,
    action: AdminAction,
    target_user_id: uuid.UUID | None = None,
    target_gym_id: uuid.UUID | None = None,
    before_status: str | None = None,
    after_status: str | None = None,
) -> AdminActionLog:
    log = AdminActionLog(
        actor_id=actor_id,
        action=action,
        target_user_id=target_user_id,
        target_gym_id=target_gym_id,
        before_status=before_status,
        after_status=after_status,
    )
    db.add(log)
    return log


# 최근 로그 조회 (limit 는 1 ~ 200 으로 보정)
def list_admin_logs(db: Session, limit: int = 50) -> list[AdminActionLog]:
    limit = max(1, min(limit, 200))
    return list(
        db.scalars(
            select(AdminActionLog).order_by(desc(AdminActionLog.created_at)).limit(limit)
        ).all()
    )
