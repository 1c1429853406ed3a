from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from pointrally.config import settings
from pointrally.core.exceptions import AuthenticationError


class TokenPayload(BaseModel):
    """인증 제공자가 발급한 access token 의 클레임"""

    sub: str  # 사용자 ID (profiles.id)
    email: Optional[str] = None
    role: str = "authenticated"


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    role: str = "authenticated",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """access token 발급 (로컬 개발/테스트 용도, 운영에서는 인증 제공자가 발급)"""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode = {"sub": user_id, "email": email, "role": role, "exp": expire}
    if settings.AUTH_JWT_AUDIENCE:
        to_encode["aud"] = settings.AUTH_JWT_AUDIENCE
    return jwt.encode(
        to_encode, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM
    )


def decode_access_token(token: str) -> TokenPayload:
    """JWT 서명/만료/audience 를 검증하고 클레임을 반환합니다."""
    audience = settings.AUTH_JWT_AUDIENCE
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=audience,
            options={"verify_aud": bool(audience)},
        )
        return TokenPayload.model_validate(payload)
    except (JWTError, ValidationError) as e:
        raise AuthenticationError("Unauthorized", details={"reason": str(e)})
