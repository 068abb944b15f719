"""
services/gyms.py

체육관(Gym, 테넌트) 생성 / 설정 / 상태 변경 로직.

주요 기능:
- 체육관 생성 (생성 토큰 확인, 생성자에게 OWNER/PROGRAMMER 멤버십 부여)
- 체육관 설정(등록 코드, 자동 가입) 조회 / 수정
- 체육관 목록 조회 (등록 코드 비노출)
- 플랫폼 관리자의 체육관 상태 변경 (승인 / 거절 / 정지 / 재활성화)
- 체육관 삭제

설계 원칙:
- 상태 전이는 ALLOWED_TRANSITIONS 표에 있는 것만 허용
- REJECTED 는 종료 상태 (어떤 상태로도 바뀌지 않음)
- 상태 변경은 AdminActionLog 와 같은 트랜잭션으로 커밋
- 설정 조회/수정 권한(MANAGE_SETTINGS) 확인은 app.core.deps 게이트에서 수행

관련 파일:
- app.models.gym             : Gym / GymStatus
- app.services.memberships   : 생성자 멤버십, 권한 집합
- app.services.admin_log     : 상태 변경 감사 로그

"""

import hmac
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    AuthorizationError,
    ConflictError,
    InsufficientRole,
    InvalidGymTransition,
    NotFoundError,
)
from app.core.security import Caller
from app.db.session import commit_or_conflict
from app.models.admin_log import AdminAction
from app.models.gym import Gym, GymStatus
from app.models.membership import GymRole, Membership, MembershipStatus
from app.schemas.mapping import GYM_CREATE_FIELDS, GYM_SETTINGS_FIELDS, apply_fields
from app.services.admin_log import write_admin_log
from app.services.memberships import FULL_ADMIN_PERMISSIONS

logger = logging.getLogger(__name__)


# (현재 상태, 다음 상태) -> 감사 로그 행위
ALLOWED_TRANSITIONS: dict[tuple[GymStatus, GymStatus], AdminAction] = {
    (GymStatus.PENDING_APPROVAL, GymStatus.ACTIVE): AdminAction.APPROVE_GYM,
    (GymStatus.PENDING_APPROVAL, GymStatus.REJECTED): AdminAction.REJECT_GYM,
    (GymStatus.ACTIVE, GymStatus.SUSPENDED): AdminAction.SUSPEND_GYM,
    (GymStatus.SUSPENDED, GymStatus.ACTIVE): AdminAction.REACTIVATE_GYM,
}

ENROLLMENT_CODE_LENGTH = 8


def generate_enrollment_code() -> str:
    return uuid.uuid4().hex[:ENROLLMENT_CODE_LENGTH].upper()


def get_gym_or_404(db: Session, gym_id: uuid.UUID) -> Gym:
    gym = db.get(Gym, gym_id)
    if gym is None:
        raise NotFoundError("Gym not found")
    return gym


"""
체육관 생성

- creation_token 이 GYM_CREATION_SECRET 과 다르면 AuthorizationError
- 이름 중복 -> ConflictError
- 상태는 PENDING_APPROVAL (플랫폼 관리자 승인 필요)
- 등록 코드는 무작위 8자리
- 생성자는 ACTIVE 멤버십 + 전체 권한
  (is_programming 이면 PROGRAMMER, 아니면 OWNER)
- 체육관과 멤버십은 한 번에 커밋

"""

def create_gym(
    db: Session,
    caller: Caller,
    *,
    name: str,
    description: str | None,
    is_programming: bool,
    creation_token: str,
) -> Gym:
    if not hmac.compare_digest(creation_token.encode(), settings.GYM_CREATION_SECRET.encode()):
        raise AuthorizationError("Invalid gym creation token")

    name = name.strip()
    if db.scalar(select(Gym.id).where(Gym.name == name)) is not None:
        raise ConflictError("Gym name already exists")

    gym = Gym(
        enrollment_code=generate_enrollment_code(),
        is_auto_subscription=False,
        status=GymStatus.PENDING_APPROVAL,
    )
    apply_fields(
        gym,
        {"name": name, "description": description, "is_programming": is_programming},
        GYM_CREATE_FIELDS,
    )
    db.add(gym)
    db.flush()

    owner = Membership(
        user_id=caller.user_id,
        gym_id=gym.id,
        gym_role=GymRole.PROGRAMMER if is_programming else GymRole.OWNER,
        status=MembershipStatus.ACTIVE,
    )
    owner.set_permissions(FULL_ADMIN_PERMISSIONS)
    db.add(owner)

    commit_or_conflict(db, ConflictError("Gym name already exists"))
    db.refresh(gym)

    logger.info("Gym %s created by %s (pending approval)", gym.id, caller.user_id)
    return gym


def get_gym_settings(db: Session, gym_id: uuid.UUID) -> Gym:
    return get_gym_or_404(db, gym_id)


def update_gym_settings(
    db: Session,
    gym_id: uuid.UUID,
    *,
    enrollment_code: str | None = None,
    is_auto_subscription: bool | None = None,
) -> Gym:
    gym = get_gym_or_404(db, gym_id)
    data = {
        "enrollment_code": enrollment_code,
        "is_auto_subscription": is_auto_subscription,
    }
    if apply_fields(gym, data, GYM_SETTINGS_FIELDS):
        db.commit()
        db.refresh(gym)
    return gym


"""
체육관 목록

- 플랫폼 ADMIN : status_filter 로 아무 상태나 조회 (없으면 전체)
- 그 외        : ACTIVE 체육관만 (status_filter 무시)

"""

def list_gyms(db: Session, caller: Caller, status_filter: GymStatus | None = None) -> list[Gym]:
    stmt = select(Gym)
    if caller.is_admin:
        if status_filter is not None:
            stmt = stmt.where(Gym.status == status_filter)
    else:
        stmt = stmt.where(Gym.status == GymStatus.ACTIVE)
    return list(db.scalars(stmt.order_by(Gym.name)).all())


"""
체육관 상태 변경 (플랫폼 ADMIN 전용)

- ALLOWED_TRANSITIONS 에 없는 전이 -> InvalidGymTransition
  (REJECTED 에서 나가는 전이, 같은 상태로의 전이 포함)
- 변경과 감사 로그를 같은 트랜잭션으로 커밋

"""

def update_gym_status(db: Session, caller: Caller, gym_id: uuid.UUID, new_status: GymStatus) -> Gym:
    if not caller.is_admin:
        raise InsufficientRole()

    gym = get_gym_or_404(db, gym_id)
    before = gym.status

    action = ALLOWED_TRANSITIONS.get((before, new_status))
    if action is None:
        raise InvalidGymTransition(
            f"Cannot change gym status from {before.value} to {new_status.value}"
        )

    gym.status = new_status
    write_admin_log(
        db,
        actor_id=caller.user_id,
        action=action,
        target_gym_id=gym.id,
        before_status=before.value,
        after_status=new_status.value,
    )
    db.commit()
    db.refresh(gym)

    logger.info("Gym %s %s -> %s by admin %s", gym.id, before.value, new_status.value, caller.user_id)
    return gym


# 체육관 삭제 (SQLite 는 FK cascade 를 강제하지 않으므로 멤버십을 먼저 직접 삭제)
def delete_gym(db: Session, caller: Caller, gym_id: uuid.UUID) -> None:
    gym = get_gym_or_404(db, gym_id)

    for membership in db.scalars(select(Membership).where(Membership.gym_id == gym.id)).all():
        db.delete(membership)
    db.flush()
    db.delete(gym)
    db.commit()

    logger.info("Gym %s deleted by %s", gym_id, caller.user_id)
