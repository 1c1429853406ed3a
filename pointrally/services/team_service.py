import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pointrally.config import settings
from pointrally.core.exceptions import (
    BaseAPIException,
    ConflictError,
    InternalServerError,
    InvalidInputError,
    NotFoundError,
)
from pointrally.database.session import transactional
from pointrally.models.points import TransactionTypeEnum
from pointrally.models.team import SportEnum
from pointrally.repositories.points_repository import PointsRepository
from pointrally.repositories.profile_repository import ProfileRepository
from pointrally.repositories.team_repository import TeamRepository, UserTeamRepository
from pointrally.schemas.team import TeamItem, UserTeamItem
from pointrally.services.point_service import PointService

logger = logging.getLogger(__name__)


class TeamService:
    """팀 카탈로그 및 사용자-팀 연결 관리 서비스"""

    def __init__(self, db: Session, point_service: Optional[PointService] = None):
        self.db = db
        self.team_repo = TeamRepository(db)
        self.user_team_repo = UserTeamRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.points_repo = PointsRepository(db)
        self.point_service = point_service or PointService(db)

    def get_all_teams(self, sport: Optional[SportEnum] = None) -> List[TeamItem]:
        return self.team_repo.get_teams(sport)

    def get_team_by_id(self, team_id: str) -> TeamItem:
        team = self.team_repo.get_by_id(team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    def get_user_teams(self, user_id: str) -> List[UserTeamItem]:
        """사용자가 연결한 팀 목록 (최근 연결 순)"""
        return self.user_team_repo.get_user_teams(user_id)

    def get_user_team(self, user_id: str, team_id: str) -> UserTeamItem:
        connection = self.user_team_repo.get_connection(user_id, team_id)
        if connection is None:
            raise NotFoundError("Team not connected")
        return connection

    def get_total_user_points(self, user_id: str) -> int:
        return self.user_team_repo.sum_balances(user_id)

    def connect_team(
        self,
        user_id: str,
        team_id: str,
        credentials: Optional[Dict[str, Any]] = None,
    ) -> UserTeamItem:
        """팀 연결 - 잔액 0 인 연결 생성

        Raises:
            NotFoundError: 프로필이 없거나 존재하지 않는 팀
            ConflictError: 이미 연결된 팀
            InvalidInputError: 최대 연결 수 초과
        """
        if self.profile_repo.get_by_id(user_id) is None:
            raise NotFoundError("Profile not found")
        self.get_team_by_id(team_id)

        if self.user_team_repo.get_connection(user_id, team_id) is not None:
            logger.warning(f"User {user_id} already connected to team {team_id}")
            raise ConflictError("Team already connected")

        if self.user_team_repo.count_connections(user_id) >= settings.MAX_TEAM_CONNECTIONS:
            raise InvalidInputError(
                f"Cannot connect more than {settings.MAX_TEAM_CONNECTIONS} teams"
            )

        try:
            connection = self.user_team_repo.create(
                user_id=user_id,
                team_id=team_id,
                points_balance=0,
                credentials=credentials or None,
            )
        except IntegrityError:
            # 동시에 같은 팀을 연결한 경우 unique 제약으로 감지
            raise ConflictError("Team already connected")
        except SQLAlchemyError as e:
            logger.error(f"Failed to connect team {team_id} for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to connect team")

        logger.info(f"User {user_id} connected team {team_id}")
        return connection

    def disconnect_team(self, user_id: str, team_id: str) -> bool:
        """팀 연결 해제 - 과거 거래 내역은 유지하고 총 포인트/등급만 재계산"""
        try:
            with transactional(self.db):
                self.profile_repo.lock([user_id])
                if not self.user_team_repo.delete_connection(user_id, team_id, commit=False):
                    raise NotFoundError("Team not connected")
                total = self.point_service.recalculate_totals(user_id)
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to disconnect team {team_id} for user {user_id}: {str(e)}"
            )
            raise InternalServerError("Failed to disconnect team")

        logger.info(f"User {user_id} disconnected team {team_id}: total {total}")
        return True

    def sync_team_points(self, user_id: str, team_id: str, new_balance: int) -> UserTeamItem:
        """외부 API 잔액으로 팀 잔액을 덮어쓰기

        Args:
            new_balance: 외부 API 기준 절대 잔액

        Returns:
            UserTeamItem: 갱신된 연결 (last_synced_at 포함)
        """
        if new_balance < 0:
            raise InvalidInputError("Balance cannot be negative")

        try:
            with transactional(self.db):
                self.profile_repo.lock([user_id])

                connection = self.user_team_repo.get_connection(user_id, team_id)
                if connection is None:
                    raise NotFoundError("Team not connected")

                difference = new_balance - connection.points_balance
                updated = self.user_team_repo.set_balance(
                    connection.id,
                    new_balance,
                    synced_at=datetime.now(timezone.utc),
                    commit=False,
                )
                total = self.point_service.recalculate_totals(user_id)

                if difference != 0:
                    team_name = connection.team.name if connection.team else team_id
                    self.points_repo.record(
                        user_id=user_id,
                        team_id=team_id,
                        type=(
                            TransactionTypeEnum.EARNED
                            if difference > 0
                            else TransactionTypeEnum.EXPIRED
                        ),
                        amount=difference,
                        balance_after=total,
                        description=f"Synced points from {team_name}",
                        metadata={
                            "source": "team_sync",
                            "previous_balance": connection.points_balance,
                            "synced_balance": new_balance,
                        },
                    )
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to sync team {team_id} for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to sync team points")

        logger.info(
            f"Synced team {team_id} for user {user_id}: "
            f"{connection.points_balance} -> {new_balance}"
        )
        return updated
