from .auth import AuthUser
from .profile import ProfileResponse, ProfileDetailResponse
from .team import TeamItem, UserTeamItem
from .points import TransactionEntry, PointsSummaryResponse, PointsTransferResult
from .rewards import RewardItem, RedemptionItem, RewardRedemptionResult
