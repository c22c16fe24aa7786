"""Domain error taxonomy shared by the repository, services and API layer."""

from __future__ import annotations


class PortalError(Exception):
    """Base exception for portal errors."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(PortalError):
    """Raised when a user or signing request does not exist."""

    status_code = 404


class UnauthorizedError(PortalError):
    """Raised when an operation needs an authenticated identity."""

    status_code = 401


class ForbiddenError(PortalError):
    """Raised when the identity may not perform the operation."""

    status_code = 403


class ProtectedUserError(ForbiddenError):
    """Raised when attempting to delete an HR administrator."""


class ValidationFailedError(PortalError):
    """Raised when form input is missing or invalid, before any backend call."""

    status_code = 422

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []


class InvalidTransitionError(PortalError):
    """Raised for an illegal signing request state transition."""

    status_code = 409
