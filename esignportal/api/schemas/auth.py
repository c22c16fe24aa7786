"""Pydantic schemas for login, logout, password reset and profile pages."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from esignportal.api.schemas.common import Notice
from esignportal.core.auth import Role

# --- Request Schemas ---


class LoginRequest(BaseModel):
    """Request schema for portal login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")
    role: Role = Field(..., description="Role the user signs in as")


class PasswordResetRequest(BaseModel):
    """Request schema for password reset instructions."""

    email: EmailStr = Field(..., description="Email the instructions are sent to")


class ProfileUpdateRequest(BaseModel):
    """Self-service profile edit; omitted fields keep their values."""

    name: str | None = Field(None, min_length=1, max_length=128)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=32)
    address: str | None = Field(None, max_length=255)


# --- Response Schemas ---


class UserResponse(BaseModel):
    """Response schema for user data."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    role: Role = Field(..., description="User role")
    name: str = Field(..., description="Display name")
    phone: str | None = None
    address: str | None = None
    has_completed_first_login: bool = Field(..., description="Onboarding completed")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoginPageResponse(BaseModel):
    page: str = "login"
    roles: list[Role] = Field(default_factory=lambda: list(Role))


class LoginResponse(BaseModel):
    """Response schema for a successful login."""

    message: str = Field(default="Login successful")
    user: UserResponse
    notice: Notice
    redirect_to: str


class PasswordResetPageResponse(BaseModel):
    page: str = "password-reset"


class PasswordResetResponse(BaseModel):
    success: bool
    message: str
    notice: Notice


class ProfileResponse(BaseModel):
    user: UserResponse
    notice: Notice


class FirstLoginPageResponse(BaseModel):
    page: str = "first-login"
    user: UserResponse
    required_fields: list[str]
    accepted_id_proof: list[str]
    max_id_proof_mb: int


class UnauthorizedPageResponse(BaseModel):
    page: str = "unauthorized"
    message: str = "Unauthorized Access"
