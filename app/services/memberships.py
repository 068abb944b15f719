"""
services/memberships.py

체육관 멤버십(Membership) 권한 판단 및 변경 로직.

"이 사용자가 이 체육관에서 무엇을 할 수 있는가"에 대한 답은
전부 이 파일에서 나온다. 플랫폼 전역 권한(USER/ADMIN)과 달리
체육관 권한은 (user, gym) 쌍의 멤버십에만 묶여 있다.

주요 기능:
- 등록 코드(enrollment code)로 체육관 가입
- 사용자의 체육관별 권한 조회 / 권한 요구(require)
- 멤버십 상태 / 역할 / 권한 변경 (계층형 규칙)
- 멤버십 목록 조회, 삭제, 본인 탈퇴(leave)

설계 원칙:
- 권한은 저장된 부여(grant)가 기준. 역할에서 다시 계산하지 않음
- 역할은 "부여 가능한" 권한의 범위만 정함 (ELIGIBLE_PERMISSIONS)
- ACTIVE 멤버십이 아니면 권한은 없음
- ACTIVE 가 아닌 체육관에서는 OWNER / PROGRAMMER 만 권한 유지
- (user, gym) 멤버십은 하나. 앱 단 사전 확인 + DB 유니크 제약 둘 다 사용
- 다른 체육관의 멤버십은 건드릴 수 없음 (테넌트 격리)

관련 파일:
- app.models.membership   : Membership / GymRole / Permission
- app.core.deps           : require_gym_permission 게이트
- app.services.gyms       : 체육관 생성 시 OWNER 멤버십 생성

"""

import hmac
import logging
import uuid
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import (
    AuthorizationError,
    GymNotJoinable,
    InsufficientPermission,
    InvalidEnrollmentCode,
    MembershipExists,
    NotFoundError,
    StateError,
    ValidationError,
)
from app.core.security import Caller
from app.db.session import commit_or_conflict
from app.models.gym import Gym, GymStatus
from app.models.membership import GymRole, Membership, MembershipStatus, Permission
from app.models.user import PlatformRole, User

logger = logging.getLogger(__name__)


FULL_ADMIN_PERMISSIONS = frozenset(Permission)

# 역할별로 부여 "가능한" 권한
ELIGIBLE_PERMISSIONS: dict[GymRole, frozenset[Permission]] = {
    GymRole.OWNER: FULL_ADMIN_PERMISSIONS,
    GymRole.PROGRAMMER: FULL_ADMIN_PERMISSIONS,
    GymRole.COACH: frozenset(
        {Permission.WOD_WRITE, Permission.SCORE_VERIFY, Permission.MANAGE_MEMBERSHIPS}
    ),
    GymRole.ATHLETE: frozenset(),
}

GYM_ADMIN_ROLES = (GymRole.OWNER, GymRole.PROGRAMMER)


def eligible_permissions(gym_role: GymRole) -> frozenset[Permission]:
    return ELIGIBLE_PERMISSIONS[gym_role]


def get_membership(db: Session, user_id: uuid.UUID, gym_id: uuid.UUID) -> Membership | None:
    return db.scalar(
        select(Membership).where(Membership.user_id == user_id, Membership.gym_id == gym_id)
    )


def get_membership_or_404(db: Session, membership_id: uuid.UUID) -> Membership:
    membership = db.get(Membership, membership_id)
    if membership is None:
        raise NotFoundError("Membership not found")
    return membership


"""
체육관 컨텍스트에서 유효한 멤버십 조회

- 멤버십이 없거나 ACTIVE 가 아니면 None
- 체육관이 ACTIVE 가 아니면 (승인 대기 / 정지 / 거절)
  OWNER / PROGRAMMER 만 유효, 나머지는 None

"""

def active_membership(db: Session, user_id: uuid.UUID, gym_id: uuid.UUID) -> Membership | None:
    membership = get_membership(db, user_id, gym_id)
    if membership is None or membership.status != MembershipStatus.ACTIVE:
        return None

    gym = db.get(Gym, gym_id)
    if gym is None:
        return None
    if gym.status != GymStatus.ACTIVE and membership.gym_role not in GYM_ADMIN_ROLES:
        return None
    return membership


# 유효한 멤버십의 저장된 권한 그대로 (없으면 빈 집합)
def permissions_for(db: Session, user_id: uuid.UUID, gym_id: uuid.UUID) -> set[Permission]:
    membership = active_membership(db, user_id, gym_id)
    if membership is None:
        return set()
    return membership.permissions


def require_permission(
    db: Session, user_id: uuid.UUID, gym_id: uuid.UUID, permission: Permission
) -> None:
    if permission not in permissions_for(db, user_id, gym_id):
        raise InsufficientPermission(f"Missing {permission.value} permission")


def count_gym_admins(db: Session, gym_id: uuid.UUID) -> int:
    return db.scalar(
        select(func.count())
        .select_from(Membership)
        .where(
            Membership.gym_id == gym_id,
            Membership.gym_role.in_(GYM_ADMIN_ROLES),
            Membership.status == MembershipStatus.ACTIVE,
        )
    ) or 0


"""
체육관 가입

- 체육관 없음 -> NotFoundError
- ACTIVE 가 아닌 체육관 -> GymNotJoinable
- 등록 코드 불일치 -> InvalidEnrollmentCode (상수 시간 비교)
- 이미 멤버(BANNED 제외) -> MembershipExists
- BANNED 멤버 -> 재가입 불가 (AuthorizationError)
- 성공 시 ATHLETE, 권한 없음,
  자동 가입(is_auto_subscription)이면 ACTIVE, 아니면 PENDING

"""

def join_gym(db: Session, caller: Caller, gym_id: uuid.UUID, enrollment_code: str) -> Membership:
    gym = db.get(Gym, gym_id)
    if gym is None:
        raise NotFoundError("Gym not found")

    if gym.status != GymStatus.ACTIVE:
        raise GymNotJoinable()

    if not hmac.compare_digest(gym.enrollment_code.encode(), enrollment_code.encode()):
        raise InvalidEnrollmentCode()

    existing = get_membership(db, caller.user_id, gym.id)
    if existing is not None:
        if existing.status == MembershipStatus.BANNED:
            raise AuthorizationError("Banned from this gym")
        raise MembershipExists()

    membership = Membership(
        user_id=caller.user_id,
        gym_id=gym.id,
        gym_role=GymRole.ATHLETE,
        status=MembershipStatus.ACTIVE if gym.is_auto_subscription else MembershipStatus.PENDING,
    )
    db.add(membership)
    commit_or_conflict(db, MembershipExists())
    db.refresh(membership)

    logger.info("User %s joined gym %s (%s)", caller.user_id, gym.id, membership.status.value)
    return membership


def list_memberships(
    db: Session, gym_id: uuid.UUID, status: MembershipStatus | None = None
) -> list[Membership]:
    stmt = select(Membership).where(Membership.gym_id == gym_id)
    if status is not None:
        stmt = stmt.where(Membership.status == status)
    return list(db.scalars(stmt.order_by(Membership.created_at)).all())


# "내 체육관" 목록 (체육관 전환 메뉴용)
def list_my_memberships(db: Session, caller: Caller) -> list[tuple[Membership, Gym]]:
    rows = db.execute(
        select(Membership, Gym)
        .join(Gym, Gym.id == Membership.gym_id)
        .where(Membership.user_id == caller.user_id)
        .order_by(Gym.name)
    ).all()
    return [(m, g) for m, g in rows]


"""
대상 멤버십을 관리할 자격 확인 (수정 / 삭제 공통)

- 플랫폼 ADMIN 은 통과
- 그 외에는 같은 체육관의 유효한 멤버십이 있어야 함 (테넌트 격리, active_membership)
- 본인 멤버십은 이 경로로 변경 불가
- 플랫폼 ADMIN 의 멤버십은 플랫폼 ADMIN 만 변경 가능
- OWNER / PROGRAMMER : 전부 가능
- COACH : MANAGE_MEMBERSHIPS 권한 필요, ATHLETE 만 관리 가능
- ATHLETE : 불가

반환값: 요청자의 멤버십 (플랫폼 ADMIN 이면 None)

"""

def _check_manage_rights(db: Session, caller: Caller, target: Membership) -> Membership | None:
    if caller.is_admin:
        return None

    requester = active_membership(db, caller.user_id, target.gym_id)
    if requester is None:
        raise AuthorizationError("Access denied")

    if requester.id == target.id:
        raise AuthorizationError("Cannot change your own membership")

    target_user = db.get(User, target.user_id)
    if target_user is not None and target_user.platform_role == PlatformRole.ADMIN:
        raise AuthorizationError("Cannot modify a global admin")

    if requester.gym_role in GYM_ADMIN_ROLES:
        return requester

    if requester.gym_role == GymRole.COACH:
        if Permission.MANAGE_MEMBERSHIPS not in requester.permissions:
            raise InsufficientPermission("Missing MANAGE_MEMBERSHIPS permission")
        if target.gym_role != GymRole.ATHLETE:
            raise AuthorizationError("Coaches can only manage athletes")
        return requester

    raise InsufficientPermission()


"""
멤버십 변경 (상태 / 역할 / 권한)

- 관리 자격 확인 (_check_manage_rights)
- COACH 는 상태만 변경 가능 (역할 / 권한은 그대로 보내야 함)
- 권한은 새 역할에서 부여 가능한 범위 안이어야 함
- 세 필드는 한 번에 커밋

"""

def update_membership(
    db: Session,
    caller: Caller,
    membership_id: uuid.UUID,
    *,
    status: MembershipStatus,
    gym_role: GymRole,
    permissions: Iterable[Permission],
) -> Membership:
    target = get_membership_or_404(db, membership_id)
    permissions = set(permissions)

    requester = _check_manage_rights(db, caller, target)

    if requester is not None and requester.gym_role == GymRole.COACH:
        if gym_role != target.gym_role or permissions != target.permissions:
            raise AuthorizationError("Coaches can only update status")

    not_eligible = permissions - eligible_permissions(gym_role)
    if not_eligible:
        names = ", ".join(sorted(p.value for p in not_eligible))
        raise ValidationError(f"Permissions not allowed for {gym_role.value}: {names}")

    before = target.status
    target.status = status
    target.gym_role = gym_role
    target.set_permissions(permissions)
    db.commit()
    db.refresh(target)

    if before != target.status:
        logger.info(
            "Membership %s status %s -> %s by %s",
            target.id, before.value, target.status.value, caller.user_id,
        )
    return target


def delete_membership(db: Session, caller: Caller, membership_id: uuid.UUID) -> None:
    target = get_membership_or_404(db, membership_id)
    _check_manage_rights(db, caller, target)

    db.delete(target)
    db.commit()


"""
본인 탈퇴(leave)

- 멤버십 행 삭제
- BANNED 상태는 탈퇴로 기록을 지울 수 없음 (재가입 우회 방지)
- 체육관의 마지막 OWNER/PROGRAMMER 는 탈퇴 불가

"""

def leave_gym(db: Session, caller: Caller, gym_id: uuid.UUID) -> None:
    membership = get_membership(db, caller.user_id, gym_id)
    if membership is None:
        raise NotFoundError("Membership not found")

    if membership.status == MembershipStatus.BANNED:
        raise StateError("Banned memberships cannot be removed")

    if (
        membership.gym_role in GYM_ADMIN_ROLES
        and membership.status == MembershipStatus.ACTIVE
        and count_gym_admins(db, gym_id) <= 1
    ):
        raise StateError("Cannot leave: last owner of the gym")

    db.delete(membership)
    db.commit()
