"""Domain entities and services of the signing portal."""

from esignportal.domain.models import (
    Document,
    EffectiveStatus,
    RequestStatus,
    SessionContext,
    SigningRequest,
    User,
)

__all__ = [
    "Document",
    "EffectiveStatus",
    "RequestStatus",
    "SessionContext",
    "SigningRequest",
    "User",
]
