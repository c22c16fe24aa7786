from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog

from esignportal.domain.models import (
    FirstLoginData,
    LoginResult,
    RequestDraft,
    ResetPasswordResult,
    SigningRequest,
    User,
    UserDraft,
)
from esignportal.infrastructure.transport.base import Transport, TransportError

logger = structlog.get_logger()


class FallbackTransport:
    """Try the remote transport first and answer from the local one when it fails.

    With no remote configured every call goes straight to the local
    transport. Only TransportError triggers the fallback; domain errors
    raised by either side propagate unchanged.
    """

    def __init__(self, remote: Transport | None, local: Transport) -> None:
        self.remote = remote
        self.local = local

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None

    async def _call(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        if self.remote is not None:
            try:
                return await getattr(self.remote, operation)(*args, **kwargs)
            except TransportError as exc:
                await logger.awarning(
                    "transport_fallback",
                    operation=operation,
                    error=str(exc),
                    error_type=type(exc).__name__,
                    status_code=getattr(exc, "status_code", None),
                )
        return await getattr(self.local, operation)(*args, **kwargs)

    async def login(self, email: str, password: str, role: str) -> LoginResult:
        return await self._call("login", email, password, role)

    async def logout(self) -> None:
        await self._call("logout")

    async def reset_password(self, email: str) -> ResetPasswordResult:
        return await self._call("reset_password", email)

    async def complete_first_login(self, user_id: str, data: FirstLoginData) -> User:
        return await self._call("complete_first_login", user_id, data)

    async def list_users(self) -> list[User]:
        return await self._call("list_users")

    async def create_user(self, draft: UserDraft) -> User:
        return await self._call("create_user", draft)

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User:
        return await self._call("update_user", user_id, changes)

    async def delete_user(self, user_id: str) -> None:
        await self._call("delete_user", user_id)

    async def list_requests(self, employee_id: str | None = None) -> list[SigningRequest]:
        return await self._call("list_requests", employee_id)

    async def get_request(self, request_id: str) -> SigningRequest:
        return await self._call("get_request", request_id)

    async def create_request(self, draft: RequestDraft, expires_at: datetime) -> SigningRequest:
        return await self._call("create_request", draft, expires_at)

    async def delete_request(self, request_id: str) -> None:
        await self._call("delete_request", request_id)

    async def sign_request(self, request_id: str) -> SigningRequest:
        return await self._call("sign_request", request_id)
