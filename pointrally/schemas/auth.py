from typing import Optional

from pydantic import BaseModel


class AuthUser(BaseModel):
    """access token 에서 추출한 인증 사용자"""

    id: str
    email: Optional[str] = None
    role: str = "authenticated"
