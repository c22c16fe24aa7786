"""
Repository for portal users and signing requests.

Wraps a transport and enforces the invariants that must hold whichever
backend answers: HR accounts are never deleted, roles never change,
requests start pending and only pending requests are signed or deleted.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import httpx
import structlog

from esignportal.core.auth import Role
from esignportal.core.config import Settings, get_settings
from esignportal.core.exceptions import NotFoundError, ProtectedUserError
from esignportal.domain.models import (
    FirstLoginData,
    LoginResult,
    RequestDraft,
    ResetPasswordResult,
    SigningRequest,
    User,
    UserDraft,
)
from esignportal.domain.services import lifecycle
from esignportal.infrastructure.transport import (
    FallbackTransport,
    HttpTransport,
    MockTransport,
    Transport,
)

logger = structlog.get_logger()

IMMUTABLE_USER_FIELDS = frozenset({"id", "role", "created_at", "updated_at"})


class SigningRepository:
    """Users and signing requests, independent of the backend that answers."""

    def __init__(self, transport: Transport, *, request_ttl_days: int | None = None) -> None:
        self.transport = transport
        self.request_ttl_days = (
            request_ttl_days if request_ttl_days is not None else get_settings().request_ttl_days
        )

    # Authentication

    async def login(self, email: str, password: str, role: str) -> LoginResult:
        await logger.ainfo("login_attempt", email=email, role=role)
        result = await self.transport.login(email, password, role)
        if result.success and result.user is not None and result.user.role.value == role:
            await logger.ainfo("login_success", user_id=result.user.id, role=role)
        else:
            await logger.awarning("login_invalid_credentials", email=email, role=role)
            result = LoginResult(success=False, message="Invalid credentials")
        return result

    async def logout(self) -> None:
        await self.transport.logout()

    async def reset_password(self, email: str) -> ResetPasswordResult:
        return await self.transport.reset_password(email)

    async def complete_first_login(self, user_id: str, data: FirstLoginData) -> User:
        user = await self.transport.complete_first_login(user_id, data)
        await logger.ainfo("first_login_completed", user_id=user.id)
        return user

    # Users

    async def list_users(self) -> list[User]:
        return await self.transport.list_users()

    async def get_user(self, user_id: str) -> User:
        for user in await self.transport.list_users():
            if user.id == user_id:
                return user
        raise NotFoundError(f"User {user_id} not found")

    async def create_user(self, draft: UserDraft) -> User:
        user = await self.transport.create_user(draft)
        await logger.ainfo("user_created", user_id=user.id, role=user.role.value)
        return user

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User:
        """Partial update; fields not given keep their values, id and role never change."""
        changes = {k: v for k, v in changes.items() if k not in IMMUTABLE_USER_FIELDS}
        user = await self.transport.update_user(user_id, changes)
        await logger.ainfo("user_updated", user_id=user_id, fields=sorted(changes))
        return user

    async def delete_user(self, user_id: str) -> None:
        target = await self.get_user(user_id)
        if target.role == Role.HR:
            await logger.awarning("user_delete_refused", user_id=user_id, role=target.role.value)
            raise ProtectedUserError("Cannot delete HR admin users")
        await self.transport.delete_user(user_id)
        await logger.ainfo("user_deleted", user_id=user_id)

    # Signing requests

    async def list_requests(self, employee_id: str | None = None) -> list[SigningRequest]:
        return await self.transport.list_requests(employee_id)

    async def get_request(self, request_id: str) -> SigningRequest:
        return await self.transport.get_request(request_id)

    async def create_request(self, draft: RequestDraft) -> SigningRequest:
        employee = await self.get_user(draft.employee_id)
        expires_at = draft.expires_at or (
            lifecycle.utcnow() + timedelta(days=self.request_ttl_days)
        )
        request = await self.transport.create_request(draft, expires_at)
        await logger.ainfo(
            "signing_request_created",
            request_id=request.id,
            employee_id=employee.id,
            documents=len(request.documents),
        )
        return request

    async def delete_request(self, request_id: str) -> None:
        lifecycle.ensure_deletable(await self.get_request(request_id))
        await self.transport.delete_request(request_id)
        await logger.ainfo("signing_request_deleted", request_id=request_id)

    async def sign_document(self, request_id: str) -> SigningRequest:
        current = await self.get_request(request_id)
        # Raises InvalidTransitionError for an already signed request.
        lifecycle.sign(current)
        signed = await self.transport.sign_request(request_id)
        await logger.ainfo("signing_request_signed", request_id=request_id)
        return signed


def build_repository(
    *,
    local: MockTransport,
    token: str | None = None,
    settings: Settings | None = None,
    remote_transport: httpx.AsyncBaseTransport | None = None,
) -> SigningRepository:
    """Assemble the repository for one client, remote first unless mock-only mode is on."""
    settings = settings or get_settings()
    remote = None
    if not settings.use_mock_data_only:
        remote = HttpTransport(
            settings.api_base_url,
            token=token,
            timeout_seconds=settings.api_timeout_seconds,
            transport=remote_transport,
        )
    return SigningRepository(
        FallbackTransport(remote, local),
        request_ttl_days=settings.request_ttl_days,
    )
