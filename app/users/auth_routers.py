# app/users/auth_routers.py

from fastapi import APIRouter, Depends, Response

from app.database.connection import get_store
from app.database.record_store import RecordStore
from app.users.auth_dependencies import get_current_identity, require_role
from app.users.auth_services import (
    get_live_user,
    list_admin_users,
    login_user,
    set_admin_user_status,
)
from app.users.user_models.schemas import (
    TokenIdentity,
    UserList,
    UserLogin,
    UserLoginResponse,
    UserMeResponse,
    UserStatusUpdate,
)
from app.shared.schemas import MessageResponse
from config.appconfig import settings

router = APIRouter()
admin_users_router = APIRouter()


def _set_auth_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )


# ============================================================
# ✅ AUTHENTICATE USER (LOGIN)
# ============================================================
@router.post("/login", response_model=UserLoginResponse)
async def login(
    user_data: UserLogin,
    response: Response,
    store: RecordStore = Depends(get_store),
) -> UserLoginResponse:
    access_token, user = await login_user(user_data, store)
    _set_auth_cookie(response, access_token, max_age=settings.ACCESS_TOKEN_EXPIRY * 60)
    return UserLoginResponse(
        message="Login successful",
        user=user,
        access_token=access_token,
        token_type="bearer",
    )


# ============================================================
# ✅ LOGOUT USER
# ============================================================
@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    _set_auth_cookie(response, "", max_age=0)
    return MessageResponse(message="Logged out successfully")


# ============================================================
# ✅ WHO AM I
# ============================================================
@router.get("/me", response_model=UserMeResponse)
async def me(
    identity: TokenIdentity = Depends(get_current_identity),
    store: RecordStore = Depends(get_store),
) -> UserMeResponse:
    user = await get_live_user(identity, store)
    return UserMeResponse(user=user)


# ============================================================
# ✅ LIST ADMIN USERS (super_admin)
# ============================================================
@admin_users_router.get("/users", response_model=UserList)
async def get_admin_users(
    identity: TokenIdentity = Depends(require_role("super_admin")),
    store: RecordStore = Depends(get_store),
) -> UserList:
    return UserList(users=await list_admin_users(store))


# ============================================================
# ✅ ACTIVATE / DEACTIVATE ADMIN USER (super_admin)
# ============================================================
@admin_users_router.patch("/users", response_model=MessageResponse)
async def update_admin_user_status(
    data: UserStatusUpdate,
    identity: TokenIdentity = Depends(require_role("super_admin")),
    store: RecordStore = Depends(get_store),
) -> MessageResponse:
    message = await set_admin_user_status(identity, data.user_id, data.is_active, store)
    return MessageResponse(message=message)
