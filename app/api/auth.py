# app/api/auth.py
from fastapi import Depends, Request, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import hmac

from app.config import get_settings
from app.exceptions import NotAuthorizedError
from app.schemas.auth import Principal
from app.services.auth_service import AuthService

# Setup security scheme; a missing header falls through to the cookie
security = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "access_token"


def get_auth_service() -> AuthService:
    return AuthService(get_settings())


async def get_optional_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Principal]:
    """
    Resolve the principal from the bearer token, falling back to the
    access_token cookie. Invalid credentials count as no principal.
    """
    principal = None
    if credentials:
        principal = auth_service.verify_token(credentials.credentials)

    if principal is None:
        cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        if cookie_token:
            principal = auth_service.verify_token(cookie_token)

    return principal


async def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal)
) -> Principal:
    """
    Dependency to get the authenticated principal from a JWT token.
    """
    if principal is None:
        raise NotAuthorizedError()
    return principal


async def verify_internal_secret(
    x_internal_secret: Optional[str] = Header(None)
) -> None:
    """
    Dependency guarding service-to-service routes with the shared secret.
    """
    expected = get_settings().INTERNAL_SECRET
    if not x_internal_secret or not hmac.compare_digest(
        x_internal_secret.encode("utf-8"), expected.encode("utf-8")
    ):
        raise NotAuthorizedError("Unauthorized")
