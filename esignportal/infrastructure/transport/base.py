from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from esignportal.domain.models import (
    FirstLoginData,
    LoginResult,
    RequestDraft,
    ResetPasswordResult,
    SigningRequest,
    User,
    UserDraft,
)


class TransportError(Exception):
    """Base exception for a failed round trip to the signing backend."""


class TransportTimeoutError(TransportError):
    """Raised when the backend does not answer within the configured timeout."""


class TransportFailureError(TransportError):
    """Raised for network errors, non-success statuses and malformed bodies."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class Transport(Protocol):
    """Operations of the signing backend, one method per endpoint."""

    async def login(self, email: str, password: str, role: str) -> LoginResult: ...

    async def logout(self) -> None: ...

    async def reset_password(self, email: str) -> ResetPasswordResult: ...

    async def complete_first_login(self, user_id: str, data: FirstLoginData) -> User: ...

    async def list_users(self) -> list[User]: ...

    async def create_user(self, draft: UserDraft) -> User: ...

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User: ...

    async def delete_user(self, user_id: str) -> None: ...

    async def list_requests(self, employee_id: str | None = None) -> list[SigningRequest]: ...

    async def get_request(self, request_id: str) -> SigningRequest: ...

    async def create_request(self, draft: RequestDraft, expires_at: datetime) -> SigningRequest: ...

    async def delete_request(self, request_id: str) -> None: ...

    async def sign_request(self, request_id: str) -> SigningRequest: ...
