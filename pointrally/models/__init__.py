# 메타데이터 등록을 위해 모든 모델을 import

from .base import Base
from .profile import Profile
from .team import Team, UserTeam, SportEnum
from .points import PointsTransaction, TransactionTypeEnum
from .rewards import (
    Reward,
    Redemption,
    RewardCategoryEnum,
    RewardAvailabilityEnum,
    RedemptionStatusEnum,
)

__all__ = [
    "Base",
    "Profile",
    "Team",
    "UserTeam",
    "SportEnum",
    "PointsTransaction",
    "TransactionTypeEnum",
    "Reward",
    "Redemption",
    "RewardCategoryEnum",
    "RewardAvailabilityEnum",
    "RedemptionStatusEnum",
]
