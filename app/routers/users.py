"""
users.py

로그인한 사용자 본인의 계정 API 모음.

주요 기능:
- 본인 프로필 조회 / 부분 수정
- 화면 설정(locale / theme) 수정
- 비밀번호 변경
- 본인 탈퇴 (비활성화)
- 내가 속한 체육관 목록

설계 원칙:
- 모든 엔드포인트는 인증된 호출자(Caller) 본인만 대상
- 비밀번호 해시 / refresh_token_version 은 응답에 포함하지 않음

관련 파일:
- app.services.users       : 계정 관리 로직
- app.services.memberships : 내 멤버십 목록
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_caller, get_db
from app.core.security import Caller
from app.routers.auth import clear_refresh_cookie
from app.schemas.auth import ChangePasswordRequest, DeleteMeRequest
from app.schemas.mapping import to_membership_summary
from app.schemas.membership import MembershipSummary
from app.schemas.user import PreferencesUpdateRequest, ProfileUpdateRequest, UserResponse
from app.services import memberships as membership_service
from app.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
def me(
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return user_service.get_profile(db, caller)


"""
프로필 수정 API

- 보낸 필드만 수정 (None 이면 기존 유지)
- 이메일 변경 시 중복이면 409

"""
@router.patch("/me/profile", response_model=UserResponse)
def update_profile(
    data: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return user_service.update_profile(
        db,
        caller,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
    )


@router.patch("/me/preferences", response_model=UserResponse)
def update_preferences(
    data: PreferencesUpdateRequest,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return user_service.update_preferences(db, caller, locale=data.locale, theme=data.theme)


"""
비밀번호 변경 API

- 현재 비밀번호 확인 필수
- 새 비밀번호 / 확인 값이 같아야 함
- 변경 시 Refresh Token 무효화 + 쿠키 삭제 (다시 로그인)

"""
@router.patch("/me/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    user_service.change_password(
        db,
        caller,
        current_password=data.current_password,
        new_password=data.new_password,
        confirmation=data.confirm_password,
    )

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response)
    return response


"""
회원 본인 탈퇴 API

- 본인 비밀번호 확인 후 비활성화
- 플랫폼 ADMIN 계정은 탈퇴 불가
- 모든 Refresh Token 무효화 + 쿠키 삭제

"""
@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    data: DeleteMeRequest,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    user_service.delete_account(db, caller, data.password)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response)
    return response


@router.get("/me/memberships", response_model=list[MembershipSummary])
def my_memberships(
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return [
        to_membership_summary(membership, gym)
        for membership, gym in membership_service.list_my_memberships(db, caller)
    ]
