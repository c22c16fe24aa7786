"""Pydantic schemas for HR user management."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from esignportal.api.schemas.auth import UserResponse
from esignportal.api.schemas.common import Notice
from esignportal.core.auth import Role


class UserCreateRequest(BaseModel):
    """Request schema for HR creating an account."""

    name: str = Field(..., min_length=1, max_length=128, description="Display name")
    email: EmailStr = Field(..., description="Login email")
    role: Role = Field(default=Role.EMPLOYEE, description="Account role")
    phone: str | None = Field(None, max_length=32)
    address: str | None = Field(None, max_length=255)


class UserUpdateRequest(BaseModel):
    """Request schema for HR editing an account; the role cannot be changed."""

    name: str | None = Field(None, min_length=1, max_length=128)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=32)
    address: str | None = Field(None, max_length=255)


class UserStats(BaseModel):
    total: int
    active: int = Field(..., description="Accounts that completed onboarding")
    hr: int
    employees: int


class UserListResponse(BaseModel):
    page: str = "manage-users"
    search: str = ""
    stats: UserStats
    shown: int
    users: list[UserResponse]


class UserActionResponse(BaseModel):
    message: str
    notice: Notice
    user: UserResponse | None = None
