from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt

from esignportal.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be issued for an identity."""


class Role(str, Enum):
    EMPLOYEE = "employee"
    HR = "hr"


def create_access_token(
    subject: str,
    *,
    role: str,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed bearer token for a portal identity."""
    settings = get_settings()

    if role not in settings.allowed_roles:
        raise TokenError(f"Unsupported role: {role}")

    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    payload = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }

    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
