import logging
from typing import List, Optional, Tuple

from app.database.record_store import CredentialStore
from app.shared.exceptions import AuthenticationError, NotFoundError, ValidationError
from app.users.security import create_access_token, get_password_hash, verify_password
from app.users.user_models.schemas import AdminUser, TokenIdentity, UserLogin

logger = logging.getLogger(__name__)

# Seeded once, when the admin table is empty
INITIAL_ADMINS = [
    {
        "username": "superadmin",
        "email": "super@clinic.local",
        "password": "super123",
        "role": "super_admin",
        "full_name": "Super Administrator",
    },
    {
        "username": "admin",
        "email": "admin@clinic.local",
        "password": "admin123",
        "role": "admin",
        "full_name": "Administrator",
    },
    {
        "username": "viewer",
        "email": "viewer@clinic.local",
        "password": "viewer123",
        "role": "viewer",
        "full_name": "Viewer",
    },
]


# ============================================================
# ✅ SEED INITIAL ADMINS
# ============================================================
async def create_initial_admins(store: CredentialStore) -> int:
    """Create the seed accounts if no account exists yet. Returns how many were created."""
    if await store.count_admins() > 0:
        return 0

    logger.info("Creating initial admin accounts...")
    for seed in INITIAL_ADMINS:
        await store.create_admin(
            username=seed["username"],
            email=seed["email"],
            password_hash=get_password_hash(seed["password"]),
            role=seed["role"],
            full_name=seed["full_name"],
        )
        logger.info(f"   - {seed['username']} ({seed['role']})")
    return len(INITIAL_ADMINS)


# ============================================================
# ✅ VALIDATE CREDENTIALS
# ============================================================
async def validate_credentials(username: str, password: str, store: CredentialStore) -> Optional[AdminUser]:
    """
    The hash-free user on success, None on any failure.
    Unknown user, inactive account and wrong password are indistinguishable.
    """
    admin = await store.get_admin_by_username(username)
    if not admin or not admin.is_active:
        return None

    if not verify_password(password, admin.password_hash):
        return None

    await store.touch_last_login(admin.id)
    refreshed = await store.get_admin_by_id(admin.id)
    return (refreshed or admin).to_public()


# ============================================================
# ✅ LOGIN USER
# ============================================================
async def login_user(user_data: UserLogin, store: CredentialStore) -> Tuple[str, AdminUser]:
    user = await validate_credentials(user_data.username, user_data.password, store)
    if not user:
        logger.warning(f"Failed login attempt for '{user_data.username}'")
        raise AuthenticationError("Invalid username or password")

    access_token = create_access_token(user)
    logger.info(f"✅ {user.username} logged in ({user.role})")
    return access_token, user


# ============================================================
# ✅ CURRENT USER (live record)
# ============================================================
async def get_live_user(identity: TokenIdentity, store: CredentialStore) -> AdminUser:
    """Re-fetch the account behind a token; reject if it is gone or deactivated."""
    admin = await store.get_admin_by_username(identity.username)
    if not admin or not admin.is_active:
        raise AuthenticationError("User not found or deactivated")
    return admin.to_public()


# ============================================================
# ✅ ADMIN ACCOUNT MANAGEMENT
# ============================================================
async def list_admin_users(store: CredentialStore) -> List[AdminUser]:
    return await store.list_admins()


async def set_admin_user_status(
    acting: TokenIdentity, user_id: int, is_active: bool, store: CredentialStore
) -> str:
    if user_id == acting.user_id:
        raise ValidationError("You cannot change the status of your own account")

    updated = await store.set_admin_active(user_id, is_active)
    if not updated:
        raise NotFoundError("User not found")

    action = "activated" if is_active else "deactivated"
    logger.info(f"User {user_id} {action} by {acting.username}")
    return f"User {action}"
