import pytest

from pointrally.core.exceptions import (
    InsufficientBalanceError,
    InvalidInputError,
    NotFoundError,
)
from pointrally.core.ledger import TierEnum
from pointrally.models import PointsTransaction, TransactionTypeEnum, UserTeam
from pointrally.services.point_service import PointService
from tests.helpers import OTHER_USER_ID, USER_ID, reload_profile


@pytest.fixture
def point_service(db_session):
    return PointService(db_session)


class TestGetCurrentBalance:
    def test_returns_profile_total(self, point_service, user, team, connect):
        connect(USER_ID, team.id, balance=1200)
        assert point_service.get_current_balance(USER_ID) == 1200

    def test_missing_profile_returns_zero(self, point_service, db_session):
        assert point_service.get_current_balance("unknown-user") == 0


class TestEarnPoints:
    """포인트 적립 테스트"""

    def test_earn_updates_team_total_and_tier(
        self, point_service, db_session, user, team, connect
    ):
        # Given
        connect(USER_ID, team.id, balance=900)

        # When
        entry = point_service.earn_points(USER_ID, team.id, 200, "Game attendance")

        # Then
        assert entry.type == TransactionTypeEnum.EARNED
        assert entry.amount == 200
        assert entry.balance_after == 1100
        assert entry.team_id == team.id

        profile = reload_profile(db_session, USER_ID)
        assert profile.total_points == 1100
        assert profile.tier == TierEnum.SILVER

    def test_non_positive_amount_rejected(self, point_service, user, team, connect):
        connect(USER_ID, team.id)
        with pytest.raises(InvalidInputError):
            point_service.earn_points(USER_ID, team.id, 0, "nothing")

    def test_unconnected_team_rejected(self, point_service, db_session, user, team):
        with pytest.raises(NotFoundError):
            point_service.earn_points(USER_ID, team.id, 100, "bonus")
        assert db_session.query(PointsTransaction).count() == 0

    def test_metadata_is_stored(self, point_service, user, team, connect):
        connect(USER_ID, team.id)
        entry = point_service.earn_points(
            USER_ID, team.id, 50, "Check-in", metadata={"game_id": "g-1"}
        )
        assert entry.metadata == {"game_id": "g-1"}


class TestRedeemPoints:
    def test_insufficient_balance(self, point_service, db_session, user, team, connect):
        # Given
        connect(USER_ID, team.id, balance=300)

        # When / Then
        with pytest.raises(InsufficientBalanceError):
            point_service.redeem_points(USER_ID, 301, "too much")

        assert reload_profile(db_session, USER_ID).total_points == 300
        assert db_session.query(PointsTransaction).count() == 0

    def test_balance_after_is_balance_minus_amount(
        self, point_service, db_session, user, team, connect
    ):
        connect(USER_ID, team.id, balance=1500)

        entry = point_service.redeem_points(USER_ID, 600, "Jersey")

        assert entry.type == TransactionTypeEnum.REDEEMED
        assert entry.amount == -600
        assert entry.balance_after == 900
        profile = reload_profile(db_session, USER_ID)
        assert profile.total_points == 900
        assert profile.tier == TierEnum.BRONZE

    def test_draws_from_largest_team_balance_first(
        self, point_service, db_session, user, team, second_team, connect
    ):
        small = connect(USER_ID, team.id, balance=200)
        large = connect(USER_ID, second_team.id, balance=500)

        entry = point_service.redeem_points(USER_ID, 600, "Experience")

        db_session.refresh(small)
        db_session.refresh(large)
        assert large.points_balance == 0
        assert small.points_balance == 100
        assert entry.balance_after == 100
        assert entry.metadata["debited_teams"] == [
            {"team_id": second_team.id, "amount": 500},
            {"team_id": team.id, "amount": 100},
        ]

    def test_team_specific_redeem_requires_team_balance(
        self, point_service, user, team, second_team, connect
    ):
        connect(USER_ID, team.id, balance=100)
        connect(USER_ID, second_team.id, balance=900)

        with pytest.raises(InsufficientBalanceError):
            point_service.redeem_points(USER_ID, 200, "Hot dog", team_id=team.id)

    def test_earn_then_redeem_same_amount_keeps_total(
        self, point_service, db_session, user, team, connect
    ):
        connect(USER_ID, team.id, balance=750)

        point_service.earn_points(USER_ID, team.id, 250, "Win bonus")
        point_service.redeem_points(USER_ID, 250, "Snack", team_id=team.id)

        assert reload_profile(db_session, USER_ID).total_points == 750


class TestTransferPoints:
    def test_transfer_moves_points_between_users(
        self, point_service, db_session, user, other_user, team, second_team, connect
    ):
        # Given
        connect(USER_ID, team.id, balance=1000)
        connect(OTHER_USER_ID, second_team.id, balance=100)

        # When
        result = point_service.transfer_points(USER_ID, OTHER_USER_ID, 400, "Gift")

        # Then
        assert result.from_transaction.amount == -400
        assert result.from_transaction.balance_after == 600
        assert result.from_transaction.metadata["to_user_id"] == OTHER_USER_ID
        assert result.to_transaction.amount == 400
        assert result.to_transaction.balance_after == 500
        assert result.to_transaction.team_id == second_team.id
        assert result.to_transaction.metadata == {"from_user_id": USER_ID}

        assert reload_profile(db_session, USER_ID).total_points == 600
        assert reload_profile(db_session, OTHER_USER_ID).total_points == 500

    def test_transfer_requires_funds(
        self, point_service, db_session, user, other_user, team, connect
    ):
        connect(USER_ID, team.id, balance=100)
        connect(OTHER_USER_ID, team.id)

        with pytest.raises(InsufficientBalanceError):
            point_service.transfer_points(USER_ID, OTHER_USER_ID, 101)

        assert db_session.query(PointsTransaction).count() == 0

    def test_recipient_without_team_rejected(
        self, point_service, db_session, user, other_user, team, connect
    ):
        connect(USER_ID, team.id, balance=500)

        with pytest.raises(InvalidInputError):
            point_service.transfer_points(USER_ID, OTHER_USER_ID, 100)

        # 실패 시 보낸 사람 잔액도 그대로
        assert reload_profile(db_session, USER_ID).total_points == 500

    def test_cannot_transfer_to_self(self, point_service, user):
        with pytest.raises(InvalidInputError):
            point_service.transfer_points(USER_ID, USER_ID, 10)


class TestExpirePoints:
    def test_expire_clamps_at_zero(self, point_service, db_session, user, team, connect):
        user_team = connect(USER_ID, team.id, balance=80)

        entry = point_service.expire_points(USER_ID, team.id, 100, "Season ended")

        db_session.refresh(user_team)
        assert user_team.points_balance == 0
        assert entry.type == TransactionTypeEnum.EXPIRED
        assert entry.amount == -80
        assert entry.balance_after == 0
        assert entry.metadata == {"requested_amount": 100}

    def test_expire_partial(self, point_service, user, team, connect):
        connect(USER_ID, team.id, balance=500)
        entry = point_service.expire_points(USER_ID, team.id, 200, "Inactivity")
        assert entry.amount == -200
        assert entry.balance_after == 300


class TestHistoryAndIntegrity:
    def test_history_is_newest_first(self, point_service, user, team, connect):
        connect(USER_ID, team.id)
        point_service.earn_points(USER_ID, team.id, 10, "first")
        point_service.earn_points(USER_ID, team.id, 20, "second")
        point_service.earn_points(USER_ID, team.id, 30, "third")

        history = point_service.get_transaction_history(USER_ID)
        assert [entry.description for entry in history] == ["third", "second", "first"]

        page = point_service.get_transaction_history(USER_ID, limit=1, offset=1)
        assert [entry.description for entry in page] == ["second"]

    def test_history_limit_is_capped(self, point_service, user, team, connect):
        connect(USER_ID, team.id)
        for i in range(3):
            point_service.earn_points(USER_ID, team.id, 1, f"tick {i}")
        assert len(point_service.get_transaction_history(USER_ID, limit=1000)) == 3

    def test_transactions_by_team(self, point_service, user, team, second_team, connect):
        connect(USER_ID, team.id)
        connect(USER_ID, second_team.id)
        point_service.earn_points(USER_ID, team.id, 10, "lakers")
        point_service.earn_points(USER_ID, second_team.id, 20, "yankees")

        entries = point_service.get_transactions_by_team(USER_ID, second_team.id)
        assert [entry.description for entry in entries] == ["yankees"]

    def test_integrity_ok_after_mutations(self, point_service, user, team, connect):
        connect(USER_ID, team.id)
        point_service.earn_points(USER_ID, team.id, 500, "earn")
        point_service.redeem_points(USER_ID, 120, "spend")

        result = point_service.verify_user_integrity(USER_ID)
        assert result.status == "OK"
        assert result.cached_total == 380
        assert result.team_balance_total == 380
        assert result.latest_balance_after == 380
        assert result.entry_count == 2

    def test_integrity_detects_mismatch(self, point_service, db_session, user, team, connect):
        user_team = connect(USER_ID, team.id, balance=100)
        db_session.query(UserTeam).filter_by(id=user_team.id).update({"points_balance": 999})
        db_session.commit()

        assert point_service.verify_user_integrity(USER_ID).status == "MISMATCH"

    def test_integrity_missing_profile(self, point_service, db_session):
        with pytest.raises(NotFoundError):
            point_service.verify_user_integrity("nobody")
