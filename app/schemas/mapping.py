"""
mapping.py

DTO <-> 엔티티 필드 복사 규칙.

어떤 요청 필드가 어떤 엔티티 속성으로 복사되는지를
데이터(필드 목록)로 선언하고, apply_fields 하나로 적용한다.
프레임워크 없이 단독으로 테스트 가능하다.

"""

from typing import Any, Iterable, Mapping

from app.models.gym import Gym
from app.models.membership import Membership
from app.schemas.membership import MembershipResponse, MembershipSummary


PROFILE_FIELDS = ("first_name", "last_name", "email")
PREFERENCE_FIELDS = ("locale", "theme")
GYM_CREATE_FIELDS = ("name", "description", "is_programming")
GYM_SETTINGS_FIELDS = ("enrollment_code", "is_auto_subscription")


"""
부분 업데이트 적용

- fields 에 있는 키만 복사 (그 외 키는 무시)
- 값이 None 이면 기존 값 유지
- 실제로 바뀐 필드 이름 목록을 반환

"""

def apply_fields(entity: Any, data: Mapping[str, Any], fields: Iterable[str]) -> list[str]:
    changed = []
    for field in fields:
        value = data.get(field)
        if value is None:
            continue
        if getattr(entity, field) != value:
            setattr(entity, field, value)
            changed.append(field)
    return changed


def to_membership_response(membership: Membership) -> MembershipResponse:
    return MembershipResponse(
        id=membership.id,
        user_id=membership.user_id,
        gym_id=membership.gym_id,
        gym_role=membership.gym_role,
        status=membership.status,
        permissions=sorted(membership.permissions, key=lambda p: p.value),
        created_at=membership.created_at,
    )


def to_membership_summary(membership: Membership, gym: Gym) -> MembershipSummary:
    return MembershipSummary(
        membership_id=membership.id,
        gym_id=gym.id,
        gym_name=gym.name,
        gym_status=gym.status,
        gym_role=membership.gym_role,
        status=membership.status,
    )
