"""
membership.py

체육관 멤버십(Membership) 및 체육관 내 역할/권한 모델 정의 파일.

User 와 Gym 을 잇는 조인 엔티티.
사용자의 체육관별 역할(GymRole), 상태(MembershipStatus),
명시적으로 부여된 권한(Permission) 목록을 관리한다.

설계 원칙:
- (user_id, gym_id) 당 멤버십은 최대 1개 (DB 유니크 제약)
- 권한은 역할에서 계산하지 않고 저장된 부여(grant)가 기준
  (역할은 "부여 가능한" 권한의 범위만 결정 -> app.services.memberships)
- User / Gym 과는 FK id 로만 연결 (양방향 relationship 없음)
- 권한 부여 행은 멤버십에 종속되어 멤버십 삭제 시 함께 삭제

"""

import uuid
from enum import Enum
from typing import Iterable

from sqlalchemy import Enum as SAEnum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin


class GymRole(str, Enum):
    OWNER = "OWNER"
    PROGRAMMER = "PROGRAMMER"
    COACH = "COACH"
    ATHLETE = "ATHLETE"


class MembershipStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BANNED = "BANNED"


class Permission(str, Enum):
    WOD_WRITE = "WOD_WRITE"
    SCORE_VERIFY = "SCORE_VERIFY"
    MANAGE_MEMBERSHIPS = "MANAGE_MEMBERSHIPS"
    MANAGE_SETTINGS = "MANAGE_SETTINGS"


class MembershipPermission(Base):
    __tablename__ = "membership_permissions"

    membership_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("memberships.id", ondelete="CASCADE"), primary_key=True
    )
    permission: Mapped[Permission] = mapped_column(
        SAEnum(Permission, name="permission", native_enum=False, create_constraint=True, length=30),
        primary_key=True,
    )


class Membership(TimestampMixin, Base):
    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "gym_id", name="uq_memberships_user_gym"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), index=True, nullable=False
    )
    gym_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("gyms.id", ondelete="CASCADE"), index=True, nullable=False
    )

    gym_role: Mapped[GymRole] = mapped_column(
        SAEnum(GymRole, name="gym_role", native_enum=False, create_constraint=True, length=20),
        nullable=False,
        default=GymRole.ATHLETE,
    )
    status: Mapped[MembershipStatus] = mapped_column(
        SAEnum(MembershipStatus, name="membership_status", native_enum=False, create_constraint=True, length=20),
        nullable=False,
        default=MembershipStatus.PENDING,
    )

    grants: Mapped[list[MembershipPermission]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def permissions(self) -> set[Permission]:
        return {g.permission for g in self.grants}

    def set_permissions(self, permissions: Iterable[Permission]) -> None:
        wanted = set(permissions)
        # 이미 있는 행은 유지하고 차이만 반영 (복합 PK 중복 insert 방지)
        self.grants = [g for g in self.grants if g.permission in wanted] + [
            MembershipPermission(permission=p)
            for p in sorted(wanted - self.permissions, key=lambda p: p.value)
        ]
