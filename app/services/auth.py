"""
services/auth.py

인증(Authentication) 비즈니스 로직 모음.

라우터(app.routers.auth)는 이 파일의 함수를 호출하고
결과를 응답/쿠키로 옮기는 일만 한다.

주요 기능:
- 회원 가입 (이메일 정규화 -> 중복 확인 -> 해시 -> 저장)
- 로그인 및 토큰 발급 (실패 누적 잠금 포함)
- Refresh Token 기반 Access Token 재발급
- 로그아웃 (Refresh Token 무효화)
- 플랫폼 관리자의 사용자 대리 로그인(impersonate)
- 다른 백엔드를 위한 접근 확인(verify_access): 사용자 / 체육관 역할 / 권한 헤더

설계 원칙:
- HTTP / FastAPI 의존성 없음. 실패는 app.core.errors 예외로 표현
- 로그인 실패는 "이메일 없음" / "비밀번호 틀림" / "비활성 계정" 모두
  같은 예외, 같은 메시지, 비슷한 응답 시간 (계정 존재 여부 노출 방지)
- Refresh Token Version(rtv)을 올려서 이전 Refresh Token 전부 무효화
  (로그인 / 로그아웃 / 비밀번호 변경 / 탈퇴 시)
- 재발급은 Access Token 만 새로 만들고 Refresh Token 수명은 연장하지 않음

관련 파일:
- app.core.security          : 비밀번호 해시 / JWT 생성·검증
- app.services.login_attempts : 로그인 실패 잠금
- app.services.admin_log      : 대리 로그인 감사 로그
- app.services.memberships    : 체육관 컨텍스트 멤버십 (verify_access)

"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    AccountLockedError,
    EmailTaken,
    InsufficientPermission,
    InsufficientRole,
    InvalidCredentials,
    InvalidToken,
    NotFoundError,
    ValidationError,
)
from app.core.security import (
    Caller,
    create_access_token,
    create_refresh_token,
    dummy_verify,
    get_password_hash,
    refresh_access_token,
    validate_token,
    verify_password,
)
from app.db.session import commit_or_conflict
from app.models.admin_log import AdminAction
from app.models.user import DEFAULT_LOCALE, DEFAULT_THEME, PlatformRole, User
from app.services import login_attempts
from app.services import memberships as membership_service
from app.services.admin_log import write_admin_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def _issue_tokens(user: User) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user.id, user.platform_role),
        refresh_token=create_refresh_token(
            user.id,
            user.platform_role,
            refresh_token_version=user.refresh_token_version,
        ),
    )


"""
회원 가입

- 이메일은 소문자로 정규화해서 중복 확인 / 저장
- 기본 권한 USER, 활성 상태, 기본 locale/theme
- 동시 가입 경합으로 유니크 제약이 깨져도 EmailTaken

"""

def register(db: Session, first_name: str, last_name: str, email: str, password: str) -> User:
    email = normalize_email(email)

    if get_user_by_email(db, email) is not None:
        raise EmailTaken()

    user = User(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email,
        password_hash=get_password_hash(password),
        platform_role=PlatformRole.USER,
        enabled=True,
        locale=DEFAULT_LOCALE,
        theme=DEFAULT_THEME,
        refresh_token_version=0,
    )
    db.add(user)
    commit_or_conflict(db, EmailTaken())
    db.refresh(user)

    logger.info("User registered: %s", user.id)
    return user


"""
로그인

- 잠금 상태면 AccountLockedError (남은 시간 포함)
- 사용자 없음 -> 더미 해시 계산 후 InvalidCredentials
- 비밀번호 틀림 / 비활성 계정 -> InvalidCredentials
- 실패는 login_attempts 에 기록
- 성공 시 실패 기록 삭제, rtv 증가(이전 세션 무효화) 후 토큰 발급

"""

def login(db: Session, email: str, password: str) -> TokenPair:
    email = normalize_email(email)

    remaining = login_attempts.seconds_until_unlock(db, email)
    if remaining:
        raise AccountLockedError(remaining)

    user = get_user_by_email(db, email)
    if user is None:
        dummy_verify()
        authenticated = False
    else:
        authenticated = verify_password(password, user.password_hash) and user.enabled

    if not authenticated:
        if login_attempts.record_failure_and_commit(db, email):
            logger.warning("Login locked for %s after %d failed attempts", email, settings.MAX_LOGIN_ATTEMPTS)
        else:
            logger.info("Failed login attempt for %s", email)
        raise InvalidCredentials()

    login_attempts.clear(db, email)
    user.refresh_token_version += 1
    db.commit()
    db.refresh(user)

    return _issue_tokens(user)


"""
Access Token 재발급

- Refresh Token 서명 / 만료 / 종류 검증
- 사용자가 없거나 비활성이면 거부
- rtv 가 DB 값과 다르면(로그아웃/재로그인/비밀번호 변경 이후) 거부
- Refresh Token 은 그대로 두고 Access Token 만 새로 발급

"""

def refresh(db: Session, refresh_token: str) -> str:
    claims = validate_token(refresh_token, "refresh")

    user = db.get(User, claims.user_id)
    if user is None or not user.enabled:
        raise InvalidToken()

    if claims.refresh_token_version != user.refresh_token_version:
        raise InvalidToken("Refresh token revoked")

    return refresh_access_token(refresh_token)


# 로그아웃: rtv 증가로 발급된 Refresh Token 전부 무효화
def logout(db: Session, caller: Caller) -> None:
    user = db.get(User, caller.user_id)
    if user is None:
        raise InvalidToken()
    user.refresh_token_version += 1
    db.commit()


"""
사용자 대리 로그인 (플랫폼 관리자 전용)

- 대상 사용자 명의로 토큰 발급 (대상의 기존 세션은 무효화)
- 비활성 사용자는 대상이 될 수 없음
- 감사 로그(IMPERSONATE_USER) 기록

"""

def impersonate(db: Session, caller: Caller, user_id: uuid.UUID) -> TokenPair:
    if not caller.is_admin:
        raise InsufficientRole()

    user = db.get(User, user_id)
    if user is None or not user.enabled:
        raise NotFoundError("User not found")

    user.refresh_token_version += 1
    write_admin_log(
        db,
        actor_id=caller.user_id,
        action=AdminAction.IMPERSONATE_USER,
        target_user_id=user.id,
    )
    db.commit()
    db.refresh(user)

    logger.warning("Admin %s impersonating user %s", caller.user_id, user.id)
    return _issue_tokens(user)


"""
접근 확인 (다른 백엔드 / 게이트웨이의 forward auth 용)

- 체육관 컨텍스트가 없으면 사용자 id / 플랫폼 역할 / locale 만 반환
- 체육관 컨텍스트가 있으면 그 체육관의 유효한 멤버십 필요
  (ACTIVE 멤버십, 체육관이 ACTIVE 가 아니면 OWNER / PROGRAMMER 만)
- 플랫폼 ADMIN 도 체육관 컨텍스트에서는 멤버십 기준
- 체육관 id 형식 오류 -> ValidationError

반환값: 응답 헤더로 그대로 옮길 dict

"""

def verify_access(db: Session, caller: Caller, gym_id: str | None = None) -> dict[str, str]:
    user = db.get(User, caller.user_id)
    if user is None:
        raise InvalidToken()

    if gym_id is None:
        return {
            "X-Auth-User-Id": str(user.id),
            "X-Auth-User-Role": user.platform_role.value,
            "X-Auth-User-Locale": user.locale,
        }

    try:
        gym_uuid = uuid.UUID(gym_id)
    except ValueError as e:
        logger.warning("Invalid gym id in context header: %r", gym_id)
        raise ValidationError("Invalid gym id") from e

    membership = membership_service.active_membership(db, user.id, gym_uuid)
    if membership is None:
        raise InsufficientPermission("No active membership in this gym")

    return {
        "X-Auth-User-Id": str(user.id),
        "X-Auth-User-Locale": user.locale,
        "X-Auth-Gym-Id": str(gym_uuid),
        "X-Auth-User-Role": membership.gym_role.value,
        "X-Auth-User-Permissions": ",".join(sorted(p.value for p in membership.permissions)),
    }
