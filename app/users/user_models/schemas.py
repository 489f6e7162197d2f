# app/users/user_models/schemas.py


from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.shared.schemas import CamelModel

# Allowed values as constants
ROLES = Literal["viewer", "admin", "super_admin"]


# ✅ Public-safe admin user (no password hash)
class AdminUser(CamelModel):
    id: int
    username: str
    email: str
    role: ROLES
    full_name: str = ""
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


# ✅ Internal record, never returned by the API
class AdminUserInDB(AdminUser):
    password_hash: str

    def to_public(self) -> AdminUser:
        return AdminUser.model_validate(self.model_dump(exclude={"password_hash"}))


# ✅ User login request
class UserLogin(BaseModel):
    username: str
    password: str

    @field_validator("username", "password")
    def required_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("username")
    def normalize_username(cls, v):
        return v.strip()


# ✅ Response schema for user login
class UserLoginResponse(CamelModel):
    message: str
    user: AdminUser
    access_token: str
    token_type: str = "bearer"


class UserMeResponse(CamelModel):
    user: AdminUser


class UserList(CamelModel):
    users: List[AdminUser]


# ✅ Request schema for activating / deactivating an account
class UserStatusUpdate(CamelModel):
    user_id: int = Field(..., strict=True)
    is_active: bool = Field(..., strict=True)


# ✅ Identity carried inside an access token
class TokenIdentity(BaseModel):
    user_id: int
    username: str
    role: ROLES
    issued_at: Optional[datetime] = None
