"""Shared pytest fixtures - 인메모리 SQLite 와 테스트용 JWT 로 앱 전체를 구동"""

import os

# pointrally.config 가 import 되기 전에 테스트 설정을 주입
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["TEAM_SYNC_BASE_URL"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from pointrally.core.ledger import compute_tier  # noqa: E402
from pointrally.database.connection import SessionLocal, engine  # noqa: E402
from pointrally.database.session import get_db  # noqa: E402
from pointrally.main import app  # noqa: E402
from pointrally.models import (  # noqa: E402
    Base,
    Profile,
    Reward,
    RewardAvailabilityEnum,
    RewardCategoryEnum,
    SportEnum,
    Team,
    UserTeam,
)
from tests.helpers import OTHER_USER_ID, USER_ID, make_auth_headers  # noqa: E402


@pytest.fixture
def db_session():
    """테스트마다 테이블을 새로 만들고 세션을 제공"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """테스트 세션을 공유하는 TestClient"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return make_auth_headers(USER_ID, email="fan@example.com")


@pytest.fixture
def other_auth_headers():
    return make_auth_headers(OTHER_USER_ID, email="friend@example.com")


@pytest.fixture
def service_headers():
    return make_auth_headers("service", role="service_role")


@pytest.fixture
def user(db_session):
    profile = Profile(id=USER_ID, email="fan@example.com", display_name="fan")
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def other_user(db_session):
    profile = Profile(id=OTHER_USER_ID, email="friend@example.com", display_name="friend")
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def team(db_session):
    item = Team(
        name="Lakers",
        code="LAL",
        sport=SportEnum.NBA,
        city="Los Angeles",
        primary_color="#552583",
        secondary_color="#FDB927",
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def second_team(db_session):
    item = Team(
        name="Yankees",
        code="NYY",
        sport=SportEnum.MLB,
        city="New York",
        primary_color="#003087",
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def connect(db_session):
    """사용자를 팀에 연결하고 총 포인트/등급 캐시를 맞춰 주는 헬퍼"""

    def _connect(user_id: str, team_id: str, balance: int = 0, credentials=None) -> UserTeam:
        user_team = UserTeam(
            user_id=user_id,
            team_id=team_id,
            points_balance=balance,
            credentials=credentials,
            connected_at=datetime.now(timezone.utc),
        )
        db_session.add(user_team)
        db_session.flush()

        profile = db_session.get(Profile, user_id)
        total = sum(ut.points_balance for ut in db_session.query(UserTeam).filter_by(user_id=user_id))
        profile.total_points = total
        profile.tier = compute_tier(total)
        db_session.commit()
        return user_team

    return _connect


@pytest.fixture
def make_reward(db_session):
    def _make_reward(
        name: str = "Courtside Tickets",
        points_cost: int = 500,
        category: RewardCategoryEnum = RewardCategoryEnum.TICKETS,
        stock: Optional[int] = None,
        availability: RewardAvailabilityEnum = RewardAvailabilityEnum.AVAILABLE,
        team_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> Reward:
        reward = Reward(
            name=name,
            description=f"{name} description",
            category=category,
            points_cost=points_cost,
            stock=stock,
            availability=availability,
            team_id=team_id,
            expires_at=expires_at,
        )
        db_session.add(reward)
        db_session.commit()
        return reward

    return _make_reward

