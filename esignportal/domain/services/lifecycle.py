"""
Signing request lifecycle.

Stored states are ``pending`` (initial) and ``signed`` (terminal). The
``expired`` label is derived at read time from ``expires_at`` and never
written back. Legal transitions:

    pending -> signed    sign()
    pending -> deleted   ensure_deletable()

Every other transition raises InvalidTransitionError.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from esignportal.core.auth import Role
from esignportal.core.exceptions import InvalidTransitionError
from esignportal.domain.models import (
    EffectiveStatus,
    RequestStatus,
    SigningRequest,
    User,
)

EXPIRING_SOON_DAYS = 3


def utcnow() -> datetime:
    return datetime.now(UTC)


def is_expired(request: SigningRequest, now: datetime | None = None) -> bool:
    """A pending request whose deadline has passed."""
    now = now or utcnow()
    return request.status == RequestStatus.PENDING and now > request.expires_at


def effective_status(request: SigningRequest, now: datetime | None = None) -> EffectiveStatus:
    if request.status == RequestStatus.SIGNED:
        return EffectiveStatus.SIGNED
    if is_expired(request, now):
        return EffectiveStatus.EXPIRED
    return EffectiveStatus.PENDING


def days_until_expiry(request: SigningRequest, now: datetime | None = None) -> int:
    """Whole days left before the deadline, rounded up."""
    now = now or utcnow()
    return math.ceil((request.expires_at - now) / timedelta(days=1))


def is_expiring_soon(
    request: SigningRequest,
    now: datetime | None = None,
    *,
    within_days: int = EXPIRING_SOON_DAYS,
) -> bool:
    if effective_status(request, now) != EffectiveStatus.PENDING:
        return False
    return 0 < days_until_expiry(request, now) <= within_days


def can_view(user: User, request: SigningRequest) -> bool:
    """HR sees every request; an employee only the requests addressed to them."""
    if user.role == Role.HR:
        return True
    return request.employee_id == user.id


def is_signable(user: User, request: SigningRequest, now: datetime | None = None) -> bool:
    """Whether the sign action is offered and accepted for ``user``.

    Used both to render the action and to guard the sign endpoint.
    """
    return (
        user.role == Role.EMPLOYEE
        and request.employee_id == user.id
        and effective_status(request, now) == EffectiveStatus.PENDING
    )


def sign(request: SigningRequest, now: datetime | None = None) -> SigningRequest:
    """Apply the pending -> signed transition."""
    if request.status == RequestStatus.SIGNED:
        raise InvalidTransitionError(f"Request {request.id} is already signed")
    now = now or utcnow()
    return request.model_copy(
        update={"status": RequestStatus.SIGNED, "signed_at": now, "updated_at": now}
    )


def ensure_deletable(request: SigningRequest) -> None:
    if request.status != RequestStatus.PENDING:
        raise InvalidTransitionError(
            f"Request {request.id} is {request.status.value} and can no longer be deleted"
        )


@dataclass(slots=True)
class RequestSummary:
    total: int = 0
    pending: int = 0
    signed: int = 0
    expired: int = 0


def summarize(requests: Iterable[SigningRequest], now: datetime | None = None) -> RequestSummary:
    """Count requests by stored status; expired pending ones are also counted apart."""
    now = now or utcnow()
    summary = RequestSummary()
    for request in requests:
        summary.total += 1
        if request.status == RequestStatus.SIGNED:
            summary.signed += 1
        else:
            summary.pending += 1
            if is_expired(request, now):
                summary.expired += 1
    return summary


def matches_status(request: SigningRequest, status: str, now: datetime | None = None) -> bool:
    """Status filter used by the request lists: all, pending, signed or expired."""
    if status == "all":
        return True
    if status == EffectiveStatus.EXPIRED.value:
        return is_expired(request, now)
    return request.status.value == status


def matches_search(request: SigningRequest, term: str, *fields: str) -> bool:
    """Case-insensitive substring search over the given attributes."""
    if not term:
        return True
    needle = term.lower()
    return any(needle in str(getattr(request, name) or "").lower() for name in fields)
