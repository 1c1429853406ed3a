from datetime import datetime
from typing import List, Optional

from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session

from pointrally.models.team import SportEnum, Team as TeamModel, UserTeam as UserTeamModel
from pointrally.repositories.base import BaseRepository
from pointrally.schemas.team import TeamItem, UserTeamItem


class TeamRepository(BaseRepository[TeamModel, TeamItem]):
    """팀 카탈로그 리포지토리 (읽기 전용 참조 데이터)"""

    def __init__(self, db: Session):
        super().__init__(TeamModel, TeamItem, db)

    def get_teams(self, sport: Optional[SportEnum] = None) -> List[TeamItem]:
        query = self.db.query(self.model_class)
        if sport is not None:
            query = query.filter(self.model_class.sport == sport)
        return self._to_schemas(query.order_by(asc(self.model_class.name)).all())

    def get_teams_by_ids(self, team_ids: List[str]) -> List[TeamItem]:
        if not team_ids:
            return []
        query = self.db.query(self.model_class).filter(self.model_class.id.in_(team_ids))
        return self._to_schemas(query.order_by(asc(self.model_class.name)).all())


class UserTeamRepository(BaseRepository[UserTeamModel, UserTeamItem]):
    """사용자-팀 연결 리포지토리

    팀별 잔액(points_balance)의 유일한 쓰기 경로입니다.
    """

    def __init__(self, db: Session):
        super().__init__(UserTeamModel, UserTeamItem, db)

    def get_connection(self, user_id: str, team_id: str) -> Optional[UserTeamItem]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.user_id == user_id,
                self.model_class.team_id == team_id,
            )
            .populate_existing()
            .first()
        )
        return self._to_schema(model_instance)

    def get_user_teams(self, user_id: str) -> List[UserTeamItem]:
        """최근 연결한 팀부터 반환"""
        query = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .order_by(desc(self.model_class.connected_at), asc(self.model_class.id))
        )
        return self._to_schemas(query.all())

    def get_user_teams_by_balance(self, user_id: str) -> List[UserTeamItem]:
        """잔액이 있는 연결을 잔액 내림차순으로 반환 (차감 순서)"""
        query = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.user_id == user_id,
                self.model_class.points_balance > 0,
            )
            .order_by(
                desc(self.model_class.points_balance),
                asc(self.model_class.connected_at),
            )
        )
        return self._to_schemas(query.all())

    def get_earliest_connection(self, user_id: str) -> Optional[UserTeamItem]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .order_by(asc(self.model_class.connected_at))
            .first()
        )
        return self._to_schema(model_instance)

    def count_connections(self, user_id: str) -> int:
        return self.count({"user_id": user_id})

    def sum_balances(self, user_id: str) -> int:
        """연결된 모든 팀 잔액의 합계"""
        total = (
            self.db.query(func.coalesce(func.sum(self.model_class.points_balance), 0))
            .filter(self.model_class.user_id == user_id)
            .scalar()
        )
        return int(total or 0)

    def set_balance(
        self,
        user_team_id: str,
        balance: int,
        synced_at: Optional[datetime] = None,
        commit: bool = True,
    ) -> Optional[UserTeamItem]:
        values = {"points_balance": max(0, balance)}
        if synced_at is not None:
            values["last_synced_at"] = synced_at
        return self.update(user_team_id, commit=commit, **values)

    def delete_connection(self, user_id: str, team_id: str, commit: bool = True) -> bool:
        connection = self.get_connection(user_id, team_id)
        if connection is None:
            return False
        return self.delete(connection.id, commit=commit)
