import logging
from typing import List, Optional

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Path, Query

from pointrally.core.auth_middleware import get_current_user, require_service_role
from pointrally.core.exceptions import BaseAPIException, InternalServerError
from pointrally.deps import get_reward_service
from pointrally.models.rewards import (
    RedemptionStatusEnum,
    RewardAvailabilityEnum,
    RewardCategoryEnum,
)
from pointrally.schemas.auth import AuthUser
from pointrally.schemas.rewards import (
    RedemptionItem,
    RedemptionStatusUpdateRequest,
    RedemptionSummary,
    RewardFilters,
    RewardItem,
    RewardRedemptionRequest,
    RewardRedemptionResponse,
)
from pointrally.services.reward_service import RewardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("", response_model=List[RewardItem])
@inject
async def get_rewards(
    team_id: Optional[str] = Query(None, alias="teamId", description="팀 전용 리워드 필터"),
    category: Optional[RewardCategoryEnum] = Query(None, description="카테고리"),
    max_points: Optional[int] = Query(None, alias="maxPoints", ge=0, description="최대 필요 포인트"),
    availability: Optional[RewardAvailabilityEnum] = Query(None, description="판매 상태"),
    current_user: AuthUser = Depends(get_current_user),
    reward_service: RewardService = Depends(get_reward_service),
) -> List[RewardItem]:
    """리워드 카탈로그 조회 (필요 포인트 오름차순)"""
    filters = RewardFilters(
        category=category,
        team_id=team_id,
        max_points=max_points,
        availability=availability,
    )
    return reward_service.get_all_rewards(filters)


@router.get("/affordable", response_model=List[RewardItem])
@inject
async def get_affordable_rewards(
    current_user: AuthUser = Depends(get_current_user),
    reward_service: RewardService = Depends(get_reward_service),
) -> List[RewardItem]:
    """내 포인트로 교환 가능한 리워드 (필요 포인트 내림차순)"""
    return reward_service.get_affordable_rewards(current_user.id)


@router.get("/featured", response_model=List[RewardItem])
@inject
async def get_featured_rewards(
    current_user: AuthUser = Depends(get_current_user),
    reward_service: RewardService = Depends(get_reward_service),
) -> List[RewardItem]:
    return reward_service.get_featured_rewards()


@router.get("/redemptions", response_model=List[RedemptionItem])
@inject
async def get_my_redemptions(
    status: Optional[RedemptionStatusEnum] = Query(None, description="교환 상태 필터"),
    current_user: AuthUser = Depends(get_current_user),
    reward_service: RewardService = Depends(get_reward_service),
) -> List[RedemptionItem]:
    """내 교환 내역 (최신순)"""
    return reward_service.get_user_redemptions(current_user.id, status)


@router.patch("/redemptions/{redemption_id}", response_model=RedemptionItem)
@inject
async def update_redemption_status(
    request: RedemptionStatusUpdateRequest,
    redemption_id: str = Path(..., description="교환 ID"),
    service_user: AuthUser = Depends(require_service_role),
    reward_service: RewardService = Depends(get_reward_service),
) -> RedemptionItem:
    """교환 상태 변경 (service role 전용)"""
    return reward_service.update_redemption_status(
        redemption_id, request.status, request.processed_at
    )


@router.post("/redeem", response_model=RewardRedemptionResponse)
@inject
async def redeem_reward(
    request: RewardRedemptionRequest,
    current_user: AuthUser = Depends(get_current_user),
    reward_service: RewardService = Depends(get_reward_service),
) -> RewardRedemptionResponse:
    """
    리워드 교환

    HTTP Status:
        200: 교환 완료 (pending 상태로 생성)
        400: 품절, 만료, 포인트 부족
        404: 리워드 없음
    """
    try:
        result = reward_service.redeem_reward(
            current_user.id, request.reward_id, request.quantity
        )
        redemption = result.redemption
        return RewardRedemptionResponse(
            success=result.success,
            message=result.message,
            redemption=RedemptionSummary(
                id=redemption.id,
                code=redemption.redemption_code,
                status=redemption.status,
                points_spent=redemption.points_used,
            ),
        )
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to redeem reward for user {current_user.id}: {str(e)}")
        raise InternalServerError("Failed to process redemption")


@router.get("/{reward_id}", response_model=RewardItem)
@inject
async def get_reward(
    reward_id: str = Path(..., description="리워드 ID"),
    current_user: AuthUser = Depends(get_current_user),
    reward_service: RewardService = Depends(get_reward_service),
) -> RewardItem:
    return reward_service.get_reward_by_id(reward_id)
