from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pointrally.config import settings
from pointrally.core.exceptions import AuthenticationError, AuthorizationError
from pointrally.core.security import decode_access_token
from pointrally.schemas.auth import AuthUser

# JWT Bearer 토큰 스킴 (토큰 누락 시 403 대신 401 을 직접 반환하기 위해 auto_error=False)
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """필수 사용자 인증 - 유효한 토큰이 필요함"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Unauthorized")

    payload = decode_access_token(credentials.credentials)
    return AuthUser(id=payload.sub, email=payload.email, role=payload.role)


def require_service_role(
    current_user: AuthUser = Depends(get_current_user),
) -> AuthUser:
    """백오피스(service role 토큰) 전용 엔드포인트용 의존성"""
    if current_user.role != settings.SERVICE_ROLE:
        raise AuthorizationError("Service role required")
    return current_user
