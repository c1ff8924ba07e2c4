from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from app.api.v1.schemas.common import SchemaBase
from app.models.user import UserRole


class UserOut(SchemaBase):
    id: UUID
    username: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_picture: str | None = None
    role: UserRole
    is_guest: bool
    is_onboarded: bool
    created_at: datetime
    last_login_at: datetime | None = None


class RegisterIn(SchemaBase):
    email: EmailStr
    password: str = Field(min_length=8)
    username: str | None = Field(default=None, min_length=3, max_length=150)
    first_name: str | None = None
    last_name: str | None = None


class LoginIn(SchemaBase):
    email: EmailStr
    password: str


class AuthOut(SchemaBase):
    user: UserOut
    token: str
    token_type: str = "bearer"
    expires_in: int


class MeOut(SchemaBase):
    user: UserOut
    is_authenticated: bool


class UpdateUserIn(SchemaBase):
    role: UserRole


class GuestUserIn(SchemaBase):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=200)
    last_name: str | None = Field(default=None, max_length=200)
