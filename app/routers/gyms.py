"""
gyms.py

체육관(Gym) API 모음.

주요 기능:
- 체육관 생성 (생성 토큰 필요, 승인 대기 상태로 생성)
- 체육관 목록 조회 (등록 코드는 노출하지 않음)
- 등록 코드로 가입 / 본인 탈퇴
- 체육관 설정 조회 / 수정 / 삭제 (MANAGE_SETTINGS 권한)
- 체육관 상태 변경 (플랫폼 ADMIN)

관련 파일:
- app.services.gyms          : 체육관 생성 / 설정 / 상태 변경
- app.services.memberships   : 가입 / 탈퇴
- app.core.deps              : require_gym_permission 게이트
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_admin, get_current_caller, get_db, require_gym_permission
from app.core.security import Caller
from app.models.gym import GymStatus
from app.models.membership import Permission
from app.schemas.gym import GymCreateRequest, GymResponse, GymSettings, GymStatusUpdate, JoinGymRequest
from app.schemas.mapping import to_membership_response
from app.schemas.membership import MembershipResponse
from app.services import gyms as gym_service
from app.services import memberships as membership_service

router = APIRouter(prefix="/gyms", tags=["gyms"])


@router.post("", response_model=GymResponse, status_code=status.HTTP_201_CREATED)
def create_gym(
    data: GymCreateRequest,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return gym_service.create_gym(
        db,
        caller,
        name=data.name,
        description=data.description,
        is_programming=data.is_programming,
        creation_token=data.creation_token,
    )


"""
체육관 목록 API

- 일반 사용자 : ACTIVE 체육관만
- 플랫폼 ADMIN : status 쿼리로 상태별 조회 (없으면 전체)

"""
@router.get("", response_model=list[GymResponse])
def list_gyms(
    status_filter: GymStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return gym_service.list_gyms(db, caller, status_filter)


@router.post("/join", response_model=MembershipResponse, status_code=status.HTTP_201_CREATED)
def join_gym(
    data: JoinGymRequest,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    membership = membership_service.join_gym(db, caller, data.gym_id, data.enrollment_code)
    return to_membership_response(membership)


@router.delete("/{gym_id}/membership", status_code=status.HTTP_204_NO_CONTENT)
def leave_gym(
    gym_id: uuid.UUID,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    membership_service.leave_gym(db, caller, gym_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


"""
체육관 상태 변경 API (플랫폼 ADMIN)

- PENDING_APPROVAL -> ACTIVE / REJECTED
- ACTIVE <-> SUSPENDED
- 그 외 전이는 409

"""
@router.put("/{gym_id}/status", response_model=GymResponse)
def update_gym_status(
    gym_id: uuid.UUID,
    data: GymStatusUpdate,
    db: Session = Depends(get_db),
    admin: Caller = Depends(get_current_admin),
):
    return gym_service.update_gym_status(db, admin, gym_id, data.status)


@router.get("/{gym_id}/settings", response_model=GymSettings)
def get_gym_settings(
    gym_id: uuid.UUID,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_gym_permission(Permission.MANAGE_SETTINGS)),
):
    return gym_service.get_gym_settings(db, gym_id)


@router.put("/{gym_id}/settings", response_model=GymSettings)
def update_gym_settings(
    gym_id: uuid.UUID,
    data: GymSettings,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_gym_permission(Permission.MANAGE_SETTINGS)),
):
    return gym_service.update_gym_settings(
        db,
        gym_id,
        enrollment_code=data.enrollment_code,
        is_auto_subscription=data.is_auto_subscription,
    )


@router.delete("/{gym_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_gym(
    gym_id: uuid.UUID,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_gym_permission(Permission.MANAGE_SETTINGS)),
):
    gym_service.delete_gym(db, caller, gym_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
