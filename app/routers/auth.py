"""
auth.py

인증(Authentication) API 모음.

회원 가입, 로그인, 토큰 재발급, 로그아웃, 대리 로그인, 접근 확인(verify) 같은
인증 흐름의 HTTP 표면만 담당한다. 실제 판단은 app.services.auth 에서 한다.

설계 원칙:
- Access Token은 응답 바디로 반환, 요청 시 Authorization Header로 전달
- Refresh Token은 HttpOnly Cookie로 관리
- 실패는 서비스가 던진 도메인 예외를 그대로 전파 (app.main 핸들러가 변환)

관련 파일:
- app.services.auth        : 가입 / 로그인 / 재발급 / 로그아웃 / 대리 로그인
- app.core.deps            : 인증 의존성(get_current_caller, get_current_admin)
- app.schemas.auth         : 인증 관련 요청/응답

"""

import uuid

from fastapi import APIRouter, Depends, Header, Request, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_current_admin, get_current_caller, get_db
from app.core.errors import TokenMissing
from app.core.security import Caller
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from app.schemas.user import UserResponse
from app.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_NAME = "refresh_token"


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,        # 로컬 False / HTTPS 운영 True
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        path="/",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path="/", domain=settings.COOKIE_DOMAIN)


"""
회원 가입 API

- 이메일 중복이면 409
- 가입 시 기본 권한은 USER

"""

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    return auth_service.register(
        db,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password=data.password,
    )


"""
로그인 API

- 이메일 / 비밀번호 인증
- Access Token은 응답 바디로 반환
- Refresh Token은 HttpOnly Cookie로 설정
- 실패 누적 시 429 (Retry-After 헤더)

"""

@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    tokens = auth_service.login(db, data.email, data.password)
    set_refresh_cookie(response, tokens.refresh_token)
    return TokenResponse(access_token=tokens.access_token)


"""
Access Token 재발급 API

- Refresh Token 쿠키로 새로운 Access Token 발급
- Refresh Token Version 이 다르면 거부
- Refresh Token 쿠키는 그대로 유지 (만료 시각 연장 없음)

"""

@router.post("/refresh", response_model=TokenResponse)
def refresh(request: Request, db: Session = Depends(get_db)):
    token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise TokenMissing("Missing refresh token")

    return TokenResponse(access_token=auth_service.refresh(db, token))


# 로그아웃: 기존 Refresh Token 무효화 + 쿠키 삭제
@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    auth_service.logout(db, caller)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response)
    return response


"""
사용자 대리 로그인 API (플랫폼 ADMIN 전용)

- 대상 사용자 명의의 Access / Refresh Token 발급
- 감사 로그 기록

"""

@router.post("/impersonate/{user_id}", response_model=TokenResponse)
def impersonate(
    user_id: uuid.UUID,
    response: Response,
    db: Session = Depends(get_db),
    admin: Caller = Depends(get_current_admin),
):
    tokens = auth_service.impersonate(db, admin, user_id)
    set_refresh_cookie(response, tokens.refresh_token)
    return TokenResponse(access_token=tokens.access_token)


"""
접근 확인 API (게이트웨이 forward auth 용)

- Access Token 검증 후 사용자 정보를 응답 헤더(X-Auth-*)로 반환, 바디 없음
- X-Context-Gym-Id 헤더가 있으면 그 체육관의 역할 / 권한을 반환
- 유효한 멤버십이 없으면 403, 체육관 id 형식 오류면 400

"""

@router.get("/verify")
def verify(
    x_context_gym_id: str | None = Header(default=None),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    headers = auth_service.verify_access(db, caller, x_context_gym_id)
    return Response(status_code=status.HTTP_200_OK, headers=headers)


# 관리 도구용: 플랫폼 ADMIN 이면 200, 아니면 401 / 403
@router.get("/verify/admin")
def verify_admin(admin: Caller = Depends(get_current_admin)):
    return Response(status_code=status.HTTP_200_OK)
