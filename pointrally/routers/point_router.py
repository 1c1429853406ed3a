"""
포인트 API 라우터

- GET /points: 내 총 포인트, 등급, 최근 거래 내역
- POST /points/transfer: 다른 사용자에게 포인트 이전
- GET /points/integrity: 내 포인트 정합성 검증

모든 엔드포인트는 Bearer 토큰 인증 필요
"""

import logging

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from pointrally.core.auth_middleware import get_current_user
from pointrally.core.exceptions import BaseAPIException, InternalServerError, NotFoundError
from pointrally.core.ledger import next_tier_progress
from pointrally.deps import get_point_service, get_profile_service
from pointrally.schemas.auth import AuthUser
from pointrally.schemas.points import (
    MessageResponse,
    PointsIntegrityCheckResponse,
    PointsSummaryResponse,
    PointsTransferRequest,
)
from pointrally.services.point_service import PointService
from pointrally.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/points", tags=["points"])


@router.get("", response_model=PointsSummaryResponse)
@inject
async def get_my_points(
    limit: int = Query(50, ge=1, le=100, description="페이지 크기"),
    offset: int = Query(0, ge=0, description="오프셋"),
    current_user: AuthUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
    point_service: PointService = Depends(get_point_service),
) -> PointsSummaryResponse:
    """
    내 포인트 요약 조회

    Returns:
        PointsSummaryResponse: 총 포인트, 등급, 다음 등급까지 남은 포인트, 거래 내역(최신순)

    HTTP Status:
        200: 성공
        401: 인증 실패
        404: 프로필 없음
    """
    profile = profile_service.get_profile(current_user.id)
    transactions = point_service.get_transaction_history(
        current_user.id, limit=limit, offset=offset
    )
    next_tier, remaining = next_tier_progress(profile.total_points)

    return PointsSummaryResponse(
        balance=profile.total_points,
        tier=profile.tier,
        next_tier=next_tier,
        points_to_next_tier=remaining,
        transactions=transactions,
    )


@router.post("/transfer", response_model=MessageResponse)
@inject
async def transfer_points(
    request: PointsTransferRequest,
    current_user: AuthUser = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
    point_service: PointService = Depends(get_point_service),
) -> MessageResponse:
    """
    포인트 이전 - 받는 사람은 이메일로 지정

    HTTP Status:
        200: 이전 완료
        400: 잘못된 요청 또는 잔액 부족
        404: 받는 사람 없음
    """
    try:
        recipient = profile_service.get_profile_by_email(request.recipient_email)
        if recipient is None:
            raise NotFoundError("Recipient not found")

        point_service.transfer_points(
            from_user_id=current_user.id,
            to_user_id=recipient.id,
            amount=request.amount,
            description=request.note or f"Transfer to {recipient.email}",
        )
        return MessageResponse(
            message=f"Successfully transferred {request.amount} points to {recipient.email}"
        )
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to transfer points for user {current_user.id}: {str(e)}")
        raise InternalServerError("Failed to transfer points")


@router.get("/integrity", response_model=PointsIntegrityCheckResponse)
@inject
async def verify_my_points(
    current_user: AuthUser = Depends(get_current_user),
    point_service: PointService = Depends(get_point_service),
) -> PointsIntegrityCheckResponse:
    """내 포인트 정합성 검증 - 캐시된 총 포인트, 팀 잔액 합계, 최신 원장 잔액 비교"""
    return point_service.verify_user_integrity(current_user.id)
