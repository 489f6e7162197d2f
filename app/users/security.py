# app/users/security.py

from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from app.helpers.time import utcnow
from app.users.user_models.schemas import AdminUser, TokenIdentity
from config.appconfig import settings

# Password hashing context
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


# ============================================================
# ✅ Verify Password
# ============================================================
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Malformed or unknown hash format
        return False


# ============================================================
# ✅ Get Password Hash
# ============================================================
def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


# ============================================================
# ✅ Create Access Token
# ============================================================
def create_access_token(user: AdminUser, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT carrying the admin's id, username and role."""
    issued_at = utcnow()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRY)

    to_encode = {
        "sub": user.username,
        "user_id": user.id,
        "role": user.role,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# ============================================================
# ✅ Decode Token
# ============================================================
def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT token (signature and expiry)."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None


# ============================================================
# ✅ Verify Access Token
# ============================================================
def verify_access_token(token: Optional[str]) -> Optional[TokenIdentity]:
    """Identity from a valid access token, or None for anything else."""
    if not token:
        return None

    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        return None

    try:
        return TokenIdentity(
            user_id=payload.get("user_id"),
            username=payload.get("sub"),
            role=payload.get("role"),
            issued_at=payload.get("iat"),
        )
    except PydanticValidationError:
        return None
