import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pointrally.config import settings
from pointrally.core.exceptions import (
    BaseAPIException,
    InsufficientPointsError,
    InternalServerError,
    InvalidInputError,
    NotFoundError,
    RewardExpiredError,
    RewardSoldOutError,
)
from pointrally.core.ledger import generate_redemption_code
from pointrally.database.session import transactional
from pointrally.models.rewards import RedemptionStatusEnum, RewardAvailabilityEnum
from pointrally.repositories.profile_repository import ProfileRepository
from pointrally.repositories.rewards_repository import (
    RedemptionRepository,
    RewardsRepository,
)
from pointrally.schemas.rewards import (
    RedemptionItem,
    RewardFilters,
    RewardItem,
    RewardRedemptionResult,
)
from pointrally.services.point_service import PointService

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite 는 tz 정보 없이 저장하므로 UTC 로 간주
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RewardService:
    """리워드 관련 비즈니스 로직을 담당하는 서비스"""

    def __init__(self, db: Session, point_service: Optional[PointService] = None):
        self.db = db
        self.rewards_repo = RewardsRepository(db)
        self.redemption_repo = RedemptionRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.point_service = point_service or PointService(db)

    def get_all_rewards(self, filters: Optional[RewardFilters] = None) -> List[RewardItem]:
        """리워드 목록 조회 (필요 포인트 오름차순)

        Args:
            filters: category, team_id, max_points, availability 필터

        Returns:
            List[RewardItem]: 조건에 맞는 리워드 목록
        """
        try:
            rewards = self.rewards_repo.find_rewards(filters)
            logger.info(f"Retrieved {len(rewards)} rewards")
            return rewards
        except SQLAlchemyError as e:
            logger.error(f"Failed to get rewards: {str(e)}")
            raise InternalServerError("Failed to retrieve rewards")

    def get_reward_by_id(self, reward_id: str) -> RewardItem:
        reward = self.rewards_repo.get_by_id(reward_id)
        if reward is None:
            raise NotFoundError("Reward not found")
        return reward

    def get_affordable_rewards(self, user_id: str) -> List[RewardItem]:
        """사용자 총 포인트로 교환 가능한 리워드 (필요 포인트 내림차순)"""
        balance = self.point_service.get_current_balance(user_id)
        return self.rewards_repo.find_affordable(balance)

    def get_featured_rewards(self, limit: Optional[int] = None) -> List[RewardItem]:
        return self.rewards_repo.find_featured(limit or settings.FEATURED_REWARDS_LIMIT)

    def redeem_reward(
        self, user_id: str, reward_id: str, quantity: int = 1
    ) -> RewardRedemptionResult:
        """리워드 교환 처리

        교환 내역 생성, 포인트 차감, 재고 차감을 하나의 트랜잭션으로 처리합니다.
        어느 단계에서든 실패하면 전체가 롤백됩니다.

        Args:
            user_id: 사용자 ID
            reward_id: 리워드 ID
            quantity: 수량 (1 이상)

        Returns:
            RewardRedemptionResult: 교환 내역과 처리 결과

        Raises:
            NotFoundError: 리워드가 없는 경우
            RewardSoldOutError: 품절이거나 재고가 수량보다 적은 경우
            RewardExpiredError: 만료된 리워드
            InsufficientPointsError: 총 포인트가 부족한 경우
        """
        if quantity < 1:
            raise InvalidInputError("Quantity must be at least 1")

        try:
            with transactional(self.db):
                self.profile_repo.lock([user_id])
                reward = self.rewards_repo.get_for_update(reward_id)
                if reward is None:
                    raise NotFoundError("Reward not found")

                self._ensure_redeemable(reward, quantity)

                total_cost = reward.points_cost * quantity
                balance = self.point_service.get_current_balance(user_id)
                if balance < total_cost:
                    logger.warning(
                        f"Insufficient points for user {user_id} on reward {reward_id}: "
                        f"required {total_cost}, available {balance}"
                    )
                    raise InsufficientPointsError(
                        details={"required": total_cost, "available": balance}
                    )

                redemption = self.redemption_repo.create(
                    commit=False,
                    user_id=user_id,
                    reward_id=reward.id,
                    points_used=total_cost,
                    quantity=quantity,
                    status=RedemptionStatusEnum.PENDING,
                    redemption_code=generate_redemption_code(),
                )

                self.point_service.redeem_points(
                    user_id=user_id,
                    amount=total_cost,
                    description=f"Redeemed: {reward.name}",
                    team_id=None,
                    metadata={
                        "reward_id": reward.id,
                        "redemption_id": redemption.id,
                        "quantity": quantity,
                    },
                    commit=False,
                )

                if reward.stock is not None:
                    remaining = reward.stock - quantity
                    values = {"stock": remaining}
                    if remaining <= 0:
                        values["availability"] = RewardAvailabilityEnum.SOLDOUT
                    self.rewards_repo.update(reward.id, commit=False, **values)

            logger.info(
                f"User {user_id} redeemed reward {reward_id} x{quantity} "
                f"for {total_cost} points: {redemption.id}"
            )
            return RewardRedemptionResult(
                redemption=redemption,
                success=True,
                message=f"Successfully redeemed {reward.name}",
            )
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to redeem reward {reward_id} for user {user_id}: {str(e)}"
            )
            raise InternalServerError("Failed to redeem reward")

    def get_user_redemptions(
        self, user_id: str, status: Optional[RedemptionStatusEnum] = None
    ) -> List[RedemptionItem]:
        return self.redemption_repo.get_user_redemptions(user_id, status)

    def update_redemption_status(
        self,
        redemption_id: str,
        status: RedemptionStatusEnum,
        processed_at: Optional[datetime] = None,
    ) -> RedemptionItem:
        """교환 상태 변경 (이전 상태 검증 없음)"""
        values = {"status": status}
        if processed_at is not None:
            values["processed_at"] = processed_at

        try:
            redemption = self.redemption_repo.update(redemption_id, **values)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update redemption {redemption_id}: {str(e)}")
            raise InternalServerError("Failed to update redemption")

        if redemption is None:
            raise NotFoundError("Redemption not found")

        logger.info(f"Redemption {redemption_id} status changed to {status.value}")
        return redemption

    def _ensure_redeemable(self, reward: RewardItem, quantity: int) -> None:
        if reward.availability == RewardAvailabilityEnum.SOLDOUT:
            raise RewardSoldOutError()
        if reward.stock is not None and reward.stock < quantity:
            raise RewardSoldOutError(
                details={"stock": reward.stock, "quantity": quantity}
            )
        if reward.expires_at is not None and _as_utc(reward.expires_at) <= datetime.now(
            timezone.utc
        ):
            raise RewardExpiredError()
