# app/users/permissions.py
from typing import Optional

from app.shared.exceptions import AuthenticationError, AuthorizationError
from app.users.user_models.schemas import ROLES, TokenIdentity

ROLE_RANK = {
    "viewer": 1,
    "admin": 2,
    "super_admin": 3,
}


def has_permission(user_role: ROLES, required_role: ROLES) -> bool:
    """True iff user_role sits at or above required_role."""
    return ROLE_RANK.get(user_role, 0) >= ROLE_RANK[required_role]


def authorize(identity: Optional[TokenIdentity], required_role: ROLES) -> TokenIdentity:
    """
    Allow or deny an already-verified identity.
    Missing identity -> AuthenticationError (401).
    Insufficient rank -> AuthorizationError (403).
    """
    if identity is None:
        raise AuthenticationError("Authentication required. Please log in.")
    if not has_permission(identity.role, required_role):
        raise AuthorizationError(f"Access denied. Requires role '{required_role}' or higher.")
    return identity
