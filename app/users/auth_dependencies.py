# app/users/auth_dependencies.py
# Centralized Authentication Dependencies

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.users.permissions import authorize
from app.users.security import verify_access_token
from app.users.user_models.schemas import ROLES, TokenIdentity
from config.appconfig import settings

# Security schemes
security_scheme = HTTPBearer(auto_error=False)  # Don't auto-raise for cookie fallback


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """
    Token from EITHER:
    - Authorization: Bearer header (takes precedence)
    - httpOnly admin_token cookie (for web browsers)
    """
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


async def get_current_identity_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> Optional[TokenIdentity]:
    """
    Identity if a valid token was sent, otherwise None.
    Invalid/expired tokens are treated as anonymous.
    """
    return verify_access_token(extract_token(request, credentials))


async def get_current_identity(
    identity: Optional[TokenIdentity] = Depends(get_current_identity_optional),
) -> TokenIdentity:
    """Require any valid token. Raises 401 otherwise."""
    return authorize(identity, "viewer")


def require_role(required_role: ROLES):
    """
    Dependency factory for role-gated routes.

    Usage:
        @router.get("/", dependencies=[Depends(require_role("admin"))])
    """

    async def _require_role(
        identity: Optional[TokenIdentity] = Depends(get_current_identity_optional),
    ) -> TokenIdentity:
        return authorize(identity, required_role)

    return _require_role
