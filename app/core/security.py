"""
security.py

비밀번호 해싱 및 JWT 토큰 생성/검증을 담당하는 보안 유틸리티 모음.

이 파일은 인증(auth) 로직에서 사용하는
저수준(low-level) 보안 기능만을 제공하며,
라우터나 비즈니스 로직(DB 조회 등)은 포함하지 않는다.

주요 기능:
- 비밀번호 해싱 및 검증 (bcrypt_sha256, 기존 bcrypt 해시도 검증)
- JWT Access / Refresh Token 발급
- 토큰 검증 및 클레임 추출 (서명, 만료, iss/aud, 토큰 종류)
- Refresh Token 으로 새 Access Token 발급
- 서비스 계층에 넘기는 인증된 호출자(Caller) 값

설계 원칙:
- Access Token과 Refresh Token을 명확히 분리 (서명 키도 분리)
- 토큰 생성 로직을 공통 함수로 통합하여 중복 제거
- Refresh Token에 version(rtv)을 포함하여 강제 로그아웃/토큰 무효화 지원
- 검증은 DB 없이 수행. 비활성 계정 / rtv 불일치 같은 상태 검사는 호출 측 책임
- 시간 기반(exp) 만료는 UTC 기준으로 처리

관련 파일:
- app.core.config        : JWT 시크릿 키 및 만료 설정
- app.core.deps          : 토큰을 실제로 검증하는 인증 의존성
- app.services.auth      : 로그인 / 재발급 / 로그아웃

"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import InvalidToken
from app.models.user import PlatformRole


TokenKind = Literal["access", "refresh"]


# bcrypt 는 72바이트 이후를 버리므로 SHA-256 으로 먼저 줄인 뒤 해싱 (bcrypt_sha256)
# 이전 bcrypt 해시는 검증만 하고 deprecated 처리
pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt_sha256__rounds=settings.BCRYPT_ROUNDS,
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


"""
비밀번호 해싱 함수

- 평문 비밀번호를 bcrypt_sha256 해시로 변환 (매 호출마다 salt가 달라 결과도 다름)
- 72바이트를 넘는 비밀번호도 전체가 해시에 반영됨
- DB에는 해시 값만 저장

"""

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


"""
비밀번호 검증 함수

- 사용자가 입력한 평문 비밀번호와 DB에 저장된 해시 값을 비교
- 비교는 passlib 내부에서 상수 시간으로 수행
- 해시 형식이 깨져 있으면 예외 대신 False

"""

def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


"""
존재하지 않는 사용자 로그인 시 해시 1회 계산

- "이메일 없음"과 "비밀번호 틀림"의 응답 시간을 비슷하게 맞춤

"""

def dummy_verify() -> None:
    pwd_context.dummy_verify()


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    role: PlatformRole
    kind: str
    issued_at: datetime
    expires_at: datetime
    refresh_token_version: int = 0


@dataclass(frozen=True)
class Caller:
    """인증 게이트를 통과한 호출자. 서비스 함수에 명시적으로 전달된다."""

    user_id: uuid.UUID
    email: str
    role: PlatformRole

    @property
    def is_admin(self) -> bool:
        return self.role == PlatformRole.ADMIN


def _secret_for(kind: TokenKind) -> str:
    return settings.SECRET_KEY if kind == "access" else settings.REFRESH_SECRET_KEY


"""
JWT 토큰 생성 공통 함수

- sub  : 사용자 식별자(user_id)
- role : 플랫폼 전역 권한 (USER / ADMIN)
- type : access 또는 refresh
- iat / exp : 발급 / 만료 시각 (UTC timestamp)
- iss / aud : 발급자 / 대상 서비스
- rtv  : Refresh Token 버전 (refresh 토큰에만 포함)

"""

def issue_token(
    user_id: uuid.UUID | str,
    role: PlatformRole,
    kind: TokenKind,
    *,
    refresh_token_version: int = 0,
    expires_delta: Optional[timedelta] = None,
) -> str:
    if expires_delta is None:
        expires_delta = (
            timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
            if kind == "access"
            else timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        )

    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": PlatformRole(role).value,
        "type": kind,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
        "iss": settings.TOKEN_ISSUER,
        "aud": settings.TOKEN_AUDIENCE,
    }
    if kind == "refresh":
        payload["rtv"] = refresh_token_version
    return jwt.encode(payload, _secret_for(kind), algorithm=settings.ALGORITHM)


def create_access_token(user_id: uuid.UUID | str, role: PlatformRole, expires_delta: Optional[timedelta] = None) -> str:
    return issue_token(user_id, role, "access", expires_delta=expires_delta)


def create_refresh_token(
    user_id: uuid.UUID | str,
    role: PlatformRole,
    refresh_token_version: int,
    expires_delta: Optional[timedelta] = None,
) -> str:
    return issue_token(
        user_id,
        role,
        "refresh",
        refresh_token_version=refresh_token_version,
        expires_delta=expires_delta,
    )


"""
토큰 검증 및 클레임 추출

- 서명 / 만료(exp) / 발급자(iss) / 대상(aud) 검증
- 토큰 종류(type)가 기대한 값과 다르면 거부 (refresh 토큰으로 API 호출 차단)
- 어떤 이유로 실패하든 InvalidToken 하나로 통일

"""

def validate_token(token: str, kind: TokenKind = "access") -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            _secret_for(kind),
            algorithms=[settings.ALGORITHM],
            audience=settings.TOKEN_AUDIENCE,
            issuer=settings.TOKEN_ISSUER,
        )
        if payload.get("type") != kind:
            raise JWTError(f"Not an {kind} token")

        return TokenClaims(
            user_id=uuid.UUID(payload["sub"]),
            role=PlatformRole(payload["role"]),
            kind=kind,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            refresh_token_version=int(payload.get("rtv", 0)),
        )
    except (JWTError, KeyError, ValueError, TypeError) as e:
        raise InvalidToken() from e


"""
Refresh Token 으로 새 Access Token 발급 (상태 없는 버전)

- refresh 토큰의 서명 / 만료 / 종류만 검증
- refresh 토큰 자체의 만료 시각은 연장하지 않음
- rtv 일치 여부는 app.services.auth.refresh 에서 DB와 비교

"""

def refresh_access_token(refresh_token: str) -> str:
    claims = validate_token(refresh_token, "refresh")
    return create_access_token(claims.user_id, claims.role)
