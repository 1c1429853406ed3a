import logging
from typing import Optional

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends

from pointrally.core.auth_middleware import get_current_user
from pointrally.core.exceptions import InvalidInputError
from pointrally.deps import get_profile_service
from pointrally.schemas.auth import AuthUser
from pointrally.schemas.points import MessageResponse
from pointrally.schemas.profile import (
    ProfileCreateRequest,
    ProfileDeleteRequest,
    ProfileDetailResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
)
from pointrally.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileDetailResponse)
@inject
async def get_my_profile(
    current_user: AuthUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """내 프로필 조회 (연결 팀 수 포함)"""
    return profile_service.get_profile(current_user.id)


@router.post("", response_model=ProfileResponse, status_code=201)
@inject
async def create_my_profile(
    request: Optional[ProfileCreateRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """가입 후 프로필 생성 - 토큰의 사용자 ID 를 그대로 사용"""
    request = request or ProfileCreateRequest()
    email = current_user.email or request.email
    if not email:
        raise InvalidInputError("Email is required")
    return profile_service.create_profile(current_user.id, email, request.display_name)


@router.patch("", response_model=ProfileUpdateResponse)
@inject
async def update_my_profile(
    request: ProfileUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileUpdateResponse:
    profile = profile_service.update_profile(
        current_user.id, request.model_dump(exclude_unset=True)
    )
    return ProfileUpdateResponse(profile=profile)


@router.delete("", response_model=MessageResponse)
@inject
async def delete_my_profile(
    request: ProfileDeleteRequest,
    current_user: AuthUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> MessageResponse:
    """계정 삭제 - {"confirmDelete": true} 필요"""
    if not request.confirm_delete:
        raise InvalidInputError("Deletion not confirmed")

    profile_service.delete_profile(current_user.id)
    logger.info(f"Account deleted: {current_user.id}")
    return MessageResponse(message="Account deleted successfully")
