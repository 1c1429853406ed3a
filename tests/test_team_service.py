from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from pointrally.config import settings
from pointrally.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from pointrally.core.ledger import TierEnum
from pointrally.models import (
    PointsTransaction,
    SportEnum,
    Team,
    TransactionTypeEnum,
    UserTeam,
)
from pointrally.services.team_service import TeamService
from tests.helpers import USER_ID, reload_profile


@pytest.fixture
def team_service(db_session):
    return TeamService(db_session)


class TestTeamCatalog:
    def test_all_teams_sorted_by_name(self, team_service, team, second_team):
        teams = team_service.get_all_teams()
        assert [t.name for t in teams] == ["Lakers", "Yankees"]

    def test_filter_by_sport(self, team_service, team, second_team):
        teams = team_service.get_all_teams(SportEnum.MLB)
        assert [t.code for t in teams] == ["NYY"]

    def test_unknown_team(self, team_service, db_session):
        with pytest.raises(NotFoundError):
            team_service.get_team_by_id("missing")


class TestConnectTeam:
    """팀 연결 테스트"""

    def test_connect_creates_zero_balance_row(self, team_service, user, team):
        user_team = team_service.connect_team(
            USER_ID, team.id, {"api_key": "key-1", "account_id": "acc-1"}
        )

        assert user_team.points_balance == 0
        assert user_team.team.name == "Lakers"
        assert user_team.credentials == {"api_key": "key-1", "account_id": "acc-1"}
        assert [ut.team_id for ut in team_service.get_user_teams(USER_ID)] == [team.id]

    def test_second_connect_conflicts(self, team_service, user, team):
        team_service.connect_team(USER_ID, team.id)
        with pytest.raises(ConflictError):
            team_service.connect_team(USER_ID, team.id)

    def test_unknown_team_not_found(self, team_service, user):
        with pytest.raises(NotFoundError):
            team_service.connect_team(USER_ID, "missing")

    def test_missing_profile_not_found(self, team_service, db_session, team):
        with pytest.raises(NotFoundError, match="Profile not found"):
            team_service.connect_team("ghost-user", team.id)
        assert db_session.query(UserTeam).count() == 0

    def test_user_teams_newest_first(self, team_service, db_session, user, team, second_team):
        connected_at = datetime(2026, 3, 1, tzinfo=timezone.utc)
        db_session.add_all(
            [
                UserTeam(user_id=USER_ID, team_id=team.id, connected_at=connected_at),
                UserTeam(
                    user_id=USER_ID,
                    team_id=second_team.id,
                    connected_at=connected_at + timedelta(days=1),
                ),
            ]
        )
        db_session.commit()

        user_teams = team_service.get_user_teams(USER_ID)

        assert [ut.team_id for ut in user_teams] == [second_team.id, team.id]

    def test_connection_limit(self, team_service, db_session, user):
        teams = []
        for i in range(3):
            item = Team(
                name=f"Team {i}",
                code=f"T{i}",
                sport=SportEnum.NHL,
                city="City",
                primary_color="#000000",
            )
            db_session.add(item)
            teams.append(item)
        db_session.commit()

        with patch.object(settings, "MAX_TEAM_CONNECTIONS", 2):
            team_service.connect_team(USER_ID, teams[0].id)
            team_service.connect_team(USER_ID, teams[1].id)
            with pytest.raises(InvalidInputError):
                team_service.connect_team(USER_ID, teams[2].id)


class TestDisconnectTeam:
    def test_disconnect_recomputes_total_and_keeps_history(
        self, team_service, db_session, user, team, second_team, connect
    ):
        # Given
        connect(USER_ID, team.id, balance=4000)
        connect(USER_ID, second_team.id, balance=2000)
        team_service.point_service.earn_points(USER_ID, team.id, 100, "bonus")
        assert reload_profile(db_session, USER_ID).tier == TierEnum.GOLD

        # When
        assert team_service.disconnect_team(USER_ID, team.id) is True

        # Then
        profile = reload_profile(db_session, USER_ID)
        assert profile.total_points == 2000
        assert profile.tier == TierEnum.SILVER
        assert db_session.query(PointsTransaction).count() == 1
        assert team_service.get_total_user_points(USER_ID) == 2000

    def test_disconnect_unconnected_team(self, team_service, user, team):
        with pytest.raises(NotFoundError):
            team_service.disconnect_team(USER_ID, team.id)


class TestSyncTeamPoints:
    def test_sync_overwrites_balance_and_records_difference(
        self, team_service, db_session, user, team, connect
    ):
        connect(USER_ID, team.id, balance=300)

        synced = team_service.sync_team_points(USER_ID, team.id, 1250)

        assert synced.points_balance == 1250
        assert synced.last_synced_at is not None
        profile = reload_profile(db_session, USER_ID)
        assert profile.total_points == 1250
        assert profile.tier == TierEnum.SILVER

        entry = db_session.query(PointsTransaction).one()
        assert entry.type == TransactionTypeEnum.EARNED
        assert entry.amount == 950
        assert entry.balance_after == 1250

    def test_sync_lower_balance_records_expiry(self, team_service, db_session, user, team, connect):
        connect(USER_ID, team.id, balance=500)

        team_service.sync_team_points(USER_ID, team.id, 200)

        entry = db_session.query(PointsTransaction).one()
        assert entry.type == TransactionTypeEnum.EXPIRED
        assert entry.amount == -300

    def test_sync_same_balance_records_nothing(self, team_service, db_session, user, team, connect):
        connect(USER_ID, team.id, balance=500)

        synced = team_service.sync_team_points(USER_ID, team.id, 500)

        assert synced.last_synced_at is not None
        assert db_session.query(PointsTransaction).count() == 0

    def test_sync_unconnected_team(self, team_service, user, team):
        with pytest.raises(NotFoundError):
            team_service.sync_team_points(USER_ID, team.id, 100)
