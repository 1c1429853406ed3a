from pointrally.models import Redemption, RewardAvailabilityEnum, RewardCategoryEnum
from tests.helpers import USER_ID, reload_profile


class TestRewardRoutes:
    """리워드 라우터 테스트"""

    def test_list_rewards_with_filters(self, client, auth_headers, user, team, make_reward):
        # Given
        make_reward(name="Team Scarf", points_cost=300, category=RewardCategoryEnum.MERCHANDISE, team_id=team.id)
        make_reward(name="Playoff Seats", points_cost=8000)
        make_reward(name="Pretzel", points_cost=150, category=RewardCategoryEnum.FOOD)

        # When
        all_rewards = client.get("/api/v1/rewards", headers=auth_headers)
        cheap = client.get("/api/v1/rewards?maxPoints=500", headers=auth_headers)
        by_team = client.get(f"/api/v1/rewards?teamId={team.id}", headers=auth_headers)
        food = client.get("/api/v1/rewards?category=food", headers=auth_headers)

        # Then
        assert all_rewards.status_code == 200
        assert [r["name"] for r in all_rewards.json()] == ["Pretzel", "Team Scarf", "Playoff Seats"]
        assert [r["name"] for r in cheap.json()] == ["Pretzel", "Team Scarf"]
        assert [r["name"] for r in by_team.json()] == ["Team Scarf"]
        assert [r["name"] for r in food.json()] == ["Pretzel"]

    def test_invalid_category_is_bad_request(self, client, auth_headers, user):
        response = client.get("/api/v1/rewards?category=cars", headers=auth_headers)
        assert response.status_code == 400

    def test_affordable_rewards(self, client, auth_headers, user, team, connect, make_reward):
        connect(USER_ID, team.id, balance=500)
        make_reward(name="Sticker", points_cost=50)
        make_reward(name="Cap", points_cost=500)
        make_reward(name="Jersey", points_cost=2500)

        response = client.get("/api/v1/rewards/affordable", headers=auth_headers)

        assert response.status_code == 200
        assert [r["name"] for r in response.json()] == ["Cap", "Sticker"]

    def test_featured_rewards(self, client, auth_headers, user, make_reward):
        make_reward(name="Old")
        make_reward(name="Gone", availability=RewardAvailabilityEnum.SOLDOUT)
        make_reward(name="New")

        response = client.get("/api/v1/rewards/featured", headers=auth_headers)

        assert [r["name"] for r in response.json()] == ["New", "Old"]

    def test_get_single_reward(self, client, auth_headers, user, make_reward):
        reward = make_reward(name="Bobblehead")

        found = client.get(f"/api/v1/rewards/{reward.id}", headers=auth_headers)
        missing = client.get("/api/v1/rewards/nope", headers=auth_headers)

        assert found.json()["name"] == "Bobblehead"
        assert missing.status_code == 404


class TestRedeemRoute:
    def test_redeem_success(self, client, auth_headers, db_session, user, team, connect, make_reward):
        # Given
        connect(USER_ID, team.id, balance=1200)
        reward = make_reward(name="Meet & Greet", points_cost=1000, stock=1)

        # When
        response = client.post(
            "/api/v1/rewards/redeem", json={"rewardId": reward.id}, headers=auth_headers
        )

        # Then
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Successfully redeemed Meet & Greet"
        assert data["redemption"]["status"] == "pending"
        assert data["redemption"]["pointsSpent"] == 1000
        assert len(data["redemption"]["code"]) == 14

        assert reload_profile(db_session, USER_ID).total_points == 200
        db_session.refresh(reward)
        assert reward.availability == RewardAvailabilityEnum.SOLDOUT

    def test_redeem_insufficient_points(self, client, auth_headers, db_session, user, team, connect, make_reward):
        connect(USER_ID, team.id, balance=1000)
        reward = make_reward(points_cost=1500)

        response = client.post(
            "/api/v1/rewards/redeem", json={"rewardId": reward.id}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Insufficient points"}
        assert db_session.query(Redemption).count() == 0

    def test_redeem_sold_out(self, client, auth_headers, user, team, connect, make_reward):
        connect(USER_ID, team.id, balance=1000)
        reward = make_reward(points_cost=10, stock=0, availability=RewardAvailabilityEnum.SOLDOUT)

        response = client.post(
            "/api/v1/rewards/redeem", json={"rewardId": reward.id}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Reward is sold out"

    def test_redeem_unknown_reward(self, client, auth_headers, user):
        response = client.post(
            "/api/v1/rewards/redeem", json={"rewardId": "missing"}, headers=auth_headers
        )
        assert response.status_code == 404

    def test_redeem_missing_reward_id(self, client, auth_headers, user):
        response = client.post("/api/v1/rewards/redeem", json={}, headers=auth_headers)
        assert response.status_code == 400


class TestRedemptionRoutes:
    def test_list_and_update_status(
        self, client, auth_headers, service_headers, user, team, connect, make_reward
    ):
        connect(USER_ID, team.id, balance=1000)
        reward = make_reward(points_cost=100)
        redeemed = client.post(
            "/api/v1/rewards/redeem", json={"rewardId": reward.id}, headers=auth_headers
        ).json()
        redemption_id = redeemed["redemption"]["id"]

        # 일반 사용자는 상태 변경 불가
        forbidden = client.patch(
            f"/api/v1/rewards/redemptions/{redemption_id}",
            json={"status": "completed"},
            headers=auth_headers,
        )
        assert forbidden.status_code == 403

        updated = client.patch(
            f"/api/v1/rewards/redemptions/{redemption_id}",
            json={"status": "completed", "processedAt": "2026-01-01T12:00:00Z"},
            headers=service_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["status"] == "completed"

        history = client.get("/api/v1/rewards/redemptions", headers=auth_headers).json()
        assert [r["id"] for r in history] == [redemption_id]
        assert history[0]["reward"]["id"] == reward.id

        pending = client.get(
            "/api/v1/rewards/redemptions?status=pending", headers=auth_headers
        ).json()
        assert pending == []

    def test_update_unknown_redemption(self, client, service_headers, db_session):
        response = client.patch(
            "/api/v1/rewards/redemptions/missing",
            json={"status": "failed"},
            headers=service_headers,
        )
        assert response.status_code == 404
