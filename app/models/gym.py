"""
gym.py

체육관(Gym, 테넌트) 모델 정의 파일.

- name 은 유니크
- enrollment_code 는 가입용 공유 비밀값. 목록/검색 응답에 절대 포함하지 않는다
- status 는 생성 시 PENDING_APPROVAL, 이후 플랫폼 관리자만 변경

"""

import uuid
from enum import Enum

from sqlalchemy import Boolean, Enum as SAEnum, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class GymStatus(str, Enum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"


class Gym(TimestampMixin, Base):
    __tablename__ = "gyms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_programming: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_auto_subscription: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    enrollment_code: Mapped[str] = mapped_column(String(64), nullable=False)

    status: Mapped[GymStatus] = mapped_column(
        SAEnum(GymStatus, name="gym_status", native_enum=False, create_constraint=True, length=20),
        nullable=False,
        default=GymStatus.PENDING_APPROVAL,
    )
