# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .profile_repository import ProfileRepository
from .team_repository import TeamRepository, UserTeamRepository
from .points_repository import PointsRepository
from .rewards_repository import RewardsRepository, RedemptionRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
    "TeamRepository",
    "UserTeamRepository",
    "PointsRepository",
    "RewardsRepository",
    "RedemptionRepository",
]
