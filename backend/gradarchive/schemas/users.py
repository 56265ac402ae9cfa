"""Pydantic models for users.

Outputs never carry the password hash or the stored token; only the
login, logout and refresh responses return a token explicitly.
"""

from __future__ import annotations

from datetime import datetime

from gradarchive.schemas.common import ApiModel, Password, PersonOut, Username
from gradarchive.schemas.people import PersonIn


class UserIn(ApiModel):
    username: Username
    password: Password
    is_active: bool = True
    person: PersonIn | None = None


class UserUpdate(ApiModel):
    username: Username
    # Omitted: keep the current password.
    password: Password | None = None
    is_active: bool = True
    person: PersonIn | None = None


class LoginIn(ApiModel):
    username: Username
    password: Password


class UserOut(ApiModel):
    id: str
    username: str
    is_active: bool
    person: PersonOut | None = None
    created_at: datetime
    updated_at: datetime


class UserResponse(ApiModel):
    success: bool = True
    user: UserOut


class UserListResponse(ApiModel):
    success: bool = True
    users: list[UserOut]


class LoginResponse(ApiModel):
    success: bool = True
    user: UserOut
    token: str


class TokenResponse(ApiModel):
    success: bool = True
    token: str
