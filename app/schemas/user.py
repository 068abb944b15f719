import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.user import PlatformRole


# 🔹 유저 응답용 (비밀번호 해시 / refresh_token_version 은 절대 포함하지 않음)
class UserResponse(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    platform_role: PlatformRole
    enabled: bool
    locale: str
    theme: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# 🔹 프로필 부분 수정 (None 이면 기존 값 유지)
class ProfileUpdateRequest(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    email: EmailStr | None = None


# 🔹 화면 설정 부분 수정
class PreferencesUpdateRequest(BaseModel):
    locale: str | None = Field(default=None, pattern=r"^[a-z]{2}(-[A-Z]{2})?$")
    theme: Literal["light", "dark"] | None = None
