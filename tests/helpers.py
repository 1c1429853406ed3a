from typing import Dict, Optional

from pointrally.core.security import create_access_token
from pointrally.models import Profile

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"


def make_auth_headers(
    user_id: str, email: Optional[str] = None, role: str = "authenticated"
) -> Dict[str, str]:
    """테스트 시크릿으로 서명한 Bearer 헤더"""
    token = create_access_token(user_id, email=email, role=role)
    return {"Authorization": f"Bearer {token}"}


def reload_profile(db_session, user_id: str) -> Profile:
    profile = db_session.get(Profile, user_id, populate_existing=True)
    assert profile is not None
    return profile
