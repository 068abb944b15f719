import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.gym import GymStatus


class GymCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    is_programming: bool
    creation_token: str = Field(..., min_length=1)


# enrollment_code 는 여기 없음 (목록/검색 응답에 노출 금지)
class GymResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    is_programming: bool
    is_auto_subscription: bool
    status: GymStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# 공백은 길이 검사 전에 제거
class GymSettings(BaseModel):
    enrollment_code: str = Field(..., min_length=4, max_length=64)
    is_auto_subscription: bool

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)


class GymStatusUpdate(BaseModel):
    status: GymStatus


class JoinGymRequest(BaseModel):
    gym_id: uuid.UUID
    enrollment_code: str = Field(..., min_length=1, max_length=64)
