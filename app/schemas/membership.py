import uuid
from datetime import datetime

from pydantic import BaseModel

from app.models.gym import GymStatus
from app.models.membership import GymRole, MembershipStatus, Permission


class MembershipResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    gym_id: uuid.UUID
    gym_role: GymRole
    status: MembershipStatus
    permissions: list[Permission]
    created_at: datetime


# "내 체육관" 목록용 요약
class MembershipSummary(BaseModel):
    membership_id: uuid.UUID
    gym_id: uuid.UUID
    gym_name: str
    gym_status: GymStatus
    gym_role: GymRole
    status: MembershipStatus


class MembershipUpdateRequest(BaseModel):
    status: MembershipStatus
    gym_role: GymRole
    permissions: set[Permission]
