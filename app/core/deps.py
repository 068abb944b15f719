"""
deps.py

FastAPI 의존성(Dependency) 모음. 인가 게이트(Authorization Gate) 역할.

주요 기능:
- 요청 단위 DB 세션 (get_db)
- Bearer 토큰 -> 인증된 호출자(Caller) 변환 (get_current_caller)
- 플랫폼 전역 역할 확인 (require_platform_role / get_current_admin)
- 체육관 권한 확인 (require_gym_permission / require_membership_permission)

설계 원칙:
- 토큰 검증은 app.core.security.validate_token 에 위임
- 역할은 토큰 클레임이 아니라 DB 의 현재 값 기준 (권한 회수 즉시 반영)
- 비활성 / 삭제된 사용자의 토큰은 거부
- 플랫폼 ADMIN 은 모든 체육관 권한 검사를 통과
- 실패는 app.core.errors 예외로 발생시키고 app.main 핸들러가 응답으로 변환

관련 파일:
- app.core.security          : JWT 검증, Caller
- app.services.memberships   : permissions_for / require_permission

"""

import uuid
from typing import Generator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.errors import InsufficientRole, InvalidToken, TokenMissing
from app.core.security import Caller, validate_token
from app.db.session import SessionLocal
from app.models.membership import Permission
from app.models.user import PlatformRole, User
from app.services import memberships as membership_service

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_caller(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Caller:
    if cred is None:
        raise TokenMissing()

    # access 토큰만 허용 (refresh 토큰 차단)
    claims = validate_token(cred.credentials, "access")

    user = db.get(User, claims.user_id)
    if user is None or not user.enabled:
        raise InvalidToken()

    return Caller(user_id=user.id, email=user.email, role=user.platform_role)


def require_platform_role(role: PlatformRole):
    def _checker(caller: Caller = Depends(get_current_caller)) -> Caller:
        if role == PlatformRole.ADMIN and not caller.is_admin:
            raise InsufficientRole(f"Requires role {role.value}")
        return caller
    return _checker


get_current_admin = require_platform_role(PlatformRole.ADMIN)


"""
체육관 권한 게이트

- 경로의 gym_id 기준으로 권한 확인
- 플랫폼 ADMIN 은 통과
- 그 외에는 유효한 멤버십(active_membership)의 저장된 권한에 permission 이 있어야 함

"""

def require_gym_permission(permission: Permission):
    def _checker(
        gym_id: uuid.UUID,
        caller: Caller = Depends(get_current_caller),
        db: Session = Depends(get_db),
    ) -> Caller:
        if not caller.is_admin:
            membership_service.require_permission(db, caller.user_id, gym_id, permission)
        return caller
    return _checker


# 대상 멤버십이 속한 체육관 기준 권한 확인 (멤버십 없으면 404)
def require_membership_permission(permission: Permission):
    def _checker(
        membership_id: uuid.UUID,
        caller: Caller = Depends(get_current_caller),
        db: Session = Depends(get_db),
    ) -> Caller:
        target = membership_service.get_membership_or_404(db, membership_id)
        if not caller.is_admin:
            membership_service.require_permission(db, caller.user_id, target.gym_id, permission)
        return caller
    return _checker
