"""
user.py

사용자(User) 및 플랫폼 권한(PlatformRole) 모델 정의 파일.

이 파일은 회원의 신원 정보(이메일, 비밀번호 해시)와
플랫폼 전역 권한, 활성 여부, 화면 설정(locale/theme)을 관리한다.

체육관(Gym) 내 역할은 여기에 없다.
체육관별 역할/권한은 app.models.membership 의 Membership 으로만 표현한다.

"""

import uuid
from enum import Enum

from sqlalchemy import Boolean, Enum as SAEnum, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


"""
플랫폼 전역 권한(PlatformRole) 정의

- USER   : 일반 사용자 (가입 시 기본값)
- ADMIN  : 플랫폼 관리자 (체육관 승인/거절, 모든 테넌트 접근)

"""

class PlatformRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


DEFAULT_LOCALE = "en"
DEFAULT_THEME = "light"


"""
사용자(User) 모델

- email 은 소문자로 정규화해서 저장 (대소문자 구분 없는 유니크)
- 물리 삭제하지 않음. 탈퇴 시 enabled=False
- refresh_token_version 으로 Refresh Token 회전/무효화 지원

"""

class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    platform_role: Mapped[PlatformRole] = mapped_column(
        SAEnum(PlatformRole, name="platform_role", native_enum=False, create_constraint=True, length=20),
        nullable=False,
        default=PlatformRole.USER,
    )

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    locale: Mapped[str] = mapped_column(String(10), nullable=False, default=DEFAULT_LOCALE)
    theme: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_THEME)

    refresh_token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.platform_role.value}>"
