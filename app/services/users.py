"""
services/users.py

계정(프로필 / 화면 설정 / 비밀번호 / 탈퇴) 관리 로직.

모든 함수는 인증 게이트를 통과한 호출자(Caller)를 명시적으로 받는다.
여러 필드 변경은 한 번의 커밋으로 반영된다 (전부 반영 또는 전부 롤백).

"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import (
    AuthorizationError,
    EmailTaken,
    InvalidToken,
    PasswordMismatch,
    ValidationError,
    WrongCurrentPassword,
)
from app.core.security import Caller, get_password_hash, verify_password
from app.db.session import commit_or_conflict
from app.models.user import PlatformRole, User
from app.schemas.mapping import PREFERENCE_FIELDS, PROFILE_FIELDS, apply_fields
from app.services.auth import normalize_email

logger = logging.getLogger(__name__)


def get_profile(db: Session, caller: Caller) -> User:
    user = db.get(User, caller.user_id)
    if user is None or not user.enabled:
        raise InvalidToken()
    return user


"""
프로필 부분 수정 (이름 / 이메일)

- None 인 필드는 기존 값 유지
- 이메일이 바뀌는 경우에만 다른 사용자와 중복 확인

"""

def update_profile(
    db: Session,
    caller: Caller,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
) -> User:
    user = get_profile(db, caller)

    data = {
        "first_name": first_name.strip() if first_name else None,
        "last_name": last_name.strip() if last_name else None,
        "email": normalize_email(email) if email else None,
    }

    if data["email"] and data["email"] != user.email:
        taken = db.scalar(select(User.id).where(User.email == data["email"], User.id != user.id))
        if taken is not None:
            raise EmailTaken()

    changed = apply_fields(user, data, PROFILE_FIELDS)
    if changed:
        commit_or_conflict(db, EmailTaken())
        db.refresh(user)
    return user


def update_preferences(
    db: Session,
    caller: Caller,
    *,
    locale: str | None = None,
    theme: str | None = None,
) -> User:
    user = get_profile(db, caller)
    if apply_fields(user, {"locale": locale, "theme": theme}, PREFERENCE_FIELDS):
        db.commit()
        db.refresh(user)
    return user


"""
비밀번호 변경

- 1) 현재 비밀번호 확인 (항상 먼저)
- 2) 새 비밀번호 / 확인 값 일치 확인
- 3) 새 비밀번호가 기존과 같은지 방지
- 검증 실패 시 DB 는 전혀 건드리지 않음
- 변경 시 Refresh Token 무효화 (다시 로그인 필요)

"""

def change_password(
    db: Session,
    caller: Caller,
    current_password: str,
    new_password: str,
    confirmation: str,
) -> None:
    user = get_profile(db, caller)

    if not verify_password(current_password, user.password_hash):
        raise WrongCurrentPassword()

    if new_password != confirmation:
        raise PasswordMismatch()

    if verify_password(new_password, user.password_hash):
        raise ValidationError("New password must be different")

    user.password_hash = get_password_hash(new_password)
    user.refresh_token_version += 1
    db.commit()

    logger.info("Password changed for user %s", user.id)


"""
회원 본인 탈퇴

- 본인 비밀번호 확인 후 처리
- 플랫폼 ADMIN 계정은 탈퇴 불가
- 물리 삭제가 아닌 비활성화(enabled=False)
- 모든 Refresh Token 무효화

"""

def delete_account(db: Session, caller: Caller, password: str) -> None:
    user = get_profile(db, caller)

    if not verify_password(password, user.password_hash):
        raise WrongCurrentPassword("Invalid password")

    if user.platform_role == PlatformRole.ADMIN:
        raise AuthorizationError("Admin users cannot delete their account")

    user.enabled = False
    user.refresh_token_version += 1
    db.commit()

    logger.info("User %s disabled own account", user.id)
