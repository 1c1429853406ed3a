from typing import List, Optional

from sqlalchemy import asc, desc
from sqlalchemy.orm import Session

from pointrally.models.rewards import (
    Redemption as RedemptionModel,
    RedemptionStatusEnum,
    Reward as RewardModel,
    RewardAvailabilityEnum,
)
from pointrally.repositories.base import BaseRepository
from pointrally.schemas.rewards import RedemptionItem, RewardFilters, RewardItem


class RewardsRepository(BaseRepository[RewardModel, RewardItem]):
    """리워드 카탈로그 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(RewardModel, RewardItem, db)

    def find_rewards(self, filters: Optional[RewardFilters] = None) -> List[RewardItem]:
        """필터 조건에 맞는 리워드 (필요 포인트 오름차순)"""
        query = self.db.query(self.model_class)

        if filters is not None:
            if filters.category is not None:
                query = query.filter(self.model_class.category == filters.category)
            if filters.team_id:
                query = query.filter(self.model_class.team_id == filters.team_id)
            if filters.max_points is not None:
                query = query.filter(self.model_class.points_cost <= filters.max_points)
            if filters.availability is not None:
                query = query.filter(
                    self.model_class.availability == filters.availability
                )

        return self._to_schemas(query.order_by(asc(self.model_class.points_cost)).all())

    def find_affordable(self, max_points: int) -> List[RewardItem]:
        """교환 가능한 리워드 (필요 포인트 내림차순, 품절 제외)"""
        query = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.points_cost <= max_points,
                self.model_class.availability != RewardAvailabilityEnum.SOLDOUT,
            )
            .order_by(desc(self.model_class.points_cost))
        )
        return self._to_schemas(query.all())

    def find_featured(self, limit: int) -> List[RewardItem]:
        query = (
            self.db.query(self.model_class)
            .filter(self.model_class.availability == RewardAvailabilityEnum.AVAILABLE)
            .order_by(desc(self.model_class.created_at))
            .limit(limit)
        )
        return self._to_schemas(query.all())

    def get_for_update(self, reward_id: str) -> Optional[RewardItem]:
        """재고 차감 전 리워드 행 잠금"""
        return self._to_schema(self._get_model(reward_id, for_update=True))


class RedemptionRepository(BaseRepository[RedemptionModel, RedemptionItem]):
    """리워드 교환 내역 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(RedemptionModel, RedemptionItem, db)

    def get_user_redemptions(
        self, user_id: str, status: Optional[RedemptionStatusEnum] = None
    ) -> List[RedemptionItem]:
        query = self.db.query(self.model_class).filter(
            self.model_class.user_id == user_id
        )
        if status is not None:
            query = query.filter(self.model_class.status == status)
        return self._to_schemas(query.order_by(desc(self.model_class.created_at)).all())
