"""
Authentication for FastAPI routes.

Two ways in:
- Supabase JWT (HS256, SUPABASE_JWT_SECRET), the user id is the `sub` claim
- Service-role key as bearer plus an X-User-Id header, used by bulk tooling
"""

import hmac
from typing import Optional

from fastapi import Depends, Header, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from core.config import Settings
from core.exceptions import AppException, AuthenticationError, InvalidTokenError
from core.logging import get_logger

logger = get_logger(__name__)

ALGORITHM = "HS256"

# auto_error=False so a missing header becomes our 401 envelope, not FastAPI's 403
security = HTTPBearer(auto_error=False)


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: str = "authenticated"
    service: bool = False


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def verify_supabase_token(token: str, settings: Settings) -> AuthUser:
    """
    Verify a Supabase JWT and return the user behind it.

    Raises:
        InvalidTokenError: bad signature, expired or no subject
        AppException: SUPABASE_JWT_SECRET not configured
    """
    if not settings.supabase_jwt_secret:
        logger.error("SUPABASE_JWT_SECRET not configured!")
        raise AppException(
            "Authentication not configured on server",
            code="AUTH_NOT_CONFIGURED",
            status_code=500,
        )

    try:
        payload = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=[ALGORITHM],
            options={"verify_aud": False},  # Supabase doesn't always set aud
        )
    except JWTError as e:
        logger.warning(f"Supabase JWT verification failed: {e}")
        raise InvalidTokenError()

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError()

    return AuthUser(
        id=user_id,
        email=payload.get("email"),
        role=payload.get("role", "authenticated"),
    )


def is_service_key(token: str, settings: Settings) -> bool:
    return hmac.compare_digest(token.encode(), settings.supabase_service_role_key.encode())


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    settings: Settings = Depends(get_app_settings),
) -> AuthUser:
    """
    Require an authenticated caller.

    Usage:
        @router.post("/something")
        async def something(user: AuthUser = Depends(require_auth)):
            ...

    Raises:
        AuthenticationError 401 if no or invalid credentials
        AppException 400 if a service-role call names no user
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    token = credentials.credentials
    if is_service_key(token, settings):
        if not x_user_id:
            raise AppException(
                "X-User-Id header is required for service calls",
                code="MISSING_USER_ID",
                status_code=400,
                details={"field": "X-User-Id"},
            )
        logger.debug(f"Service-role call on behalf of user {x_user_id}")
        return AuthUser(id=x_user_id, role="service_role", service=True)

    return verify_supabase_token(token, settings)
