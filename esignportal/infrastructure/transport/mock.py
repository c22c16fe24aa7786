"""
In-memory signing backend seeded with deterministic demo data.

Answers every backend operation locally. It is used on its own in
mock-only mode and as the fallback when the remote backend fails. State
lives for the lifetime of the instance and is guarded by an asyncio lock.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import uuid4

import structlog
from passlib.context import CryptContext

from esignportal.core.auth import Role, create_access_token
from esignportal.core.exceptions import (
    NotFoundError,
    ProtectedUserError,
    ValidationFailedError,
)
from esignportal.domain.models import (
    Document,
    FirstLoginData,
    LoginResult,
    RequestDraft,
    ResetPasswordResult,
    SigningRequest,
    User,
    UserDraft,
)
from esignportal.domain.reference_data import (
    DEFAULT_PASSWORD,
    RESET_PASSWORD_MESSAGE,
    SEED_PASSWORDS,
    SEED_REQUESTS,
    SEED_USERS,
)
from esignportal.domain.services import lifecycle

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Fields an update may touch; id and role are fixed at creation.
MUTABLE_USER_FIELDS = frozenset({"name", "email", "phone", "address", "has_completed_first_login"})


def new_id() -> str:
    return uuid4().hex


class MockTransport:
    """Deterministic backend used for development and as the failure fallback."""

    def __init__(self, clock: Callable[[], datetime] = lifecycle.utcnow) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._users: dict[str, User] = {}
        self._passwords: dict[str, str] = {}
        self._requests: dict[str, SigningRequest] = {}
        self.reset()

    def reset(self) -> None:
        """Restore the seed data, dropping every change made since."""
        self._users = {raw["id"]: User.model_validate(raw) for raw in SEED_USERS}
        self._passwords = {
            email: pwd_context.hash(password) for email, password in SEED_PASSWORDS.items()
        }
        self._requests = {raw["id"]: SigningRequest.model_validate(raw) for raw in SEED_REQUESTS}

    def _user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def _request(self, request_id: str) -> SigningRequest:
        request = self._requests.get(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    def _email_taken(self, email: str, *, exclude: str | None = None) -> bool:
        needle = email.lower()
        return any(
            user.email.lower() == needle and user.id != exclude for user in self._users.values()
        )

    # Authentication

    async def login(self, email: str, password: str, role: str) -> LoginResult:
        user = next(
            (u for u in self._users.values() if u.email.lower() == email.lower()),
            None,
        )
        hashed = self._passwords.get(user.email) if user else None
        if user is None or hashed is None or user.role.value != role:
            return LoginResult(success=False, message="Invalid credentials")
        if not pwd_context.verify(password, hashed):
            return LoginResult(success=False, message="Invalid credentials")

        token = create_access_token(user.id, role=user.role.value, email=user.email)
        return LoginResult(success=True, user=user, token=token)

    async def logout(self) -> None:
        return None

    async def reset_password(self, email: str) -> ResetPasswordResult:
        await logger.ainfo("mock_password_reset", email=email)
        return ResetPasswordResult(success=True, message=RESET_PASSWORD_MESSAGE)

    async def complete_first_login(self, user_id: str, data: FirstLoginData) -> User:
        async with self._lock:
            user = self._user(user_id)
            updated = user.model_copy(
                update={
                    "name": data.name,
                    "phone": data.phone,
                    "address": data.address,
                    "has_completed_first_login": True,
                    "updated_at": self._clock(),
                }
            )
            self._users[user_id] = updated
        return updated

    # Users

    async def list_users(self) -> list[User]:
        return list(self._users.values())

    async def create_user(self, draft: UserDraft) -> User:
        async with self._lock:
            if self._email_taken(draft.email):
                raise ValidationFailedError(
                    f"User with email {draft.email} already exists", fields=["email"]
                )
            now = self._clock()
            user = User(
                id=new_id(),
                email=draft.email,
                role=draft.role,
                name=draft.name,
                phone=draft.phone,
                address=draft.address,
                has_completed_first_login=draft.has_completed_first_login,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            # New accounts receive the default credentials by email.
            self._passwords[user.email] = pwd_context.hash(DEFAULT_PASSWORD)
        return user

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User:
        async with self._lock:
            user = self._user(user_id)
            update = {key: value for key, value in changes.items() if key in MUTABLE_USER_FIELDS}
            new_email = update.get("email")
            if new_email and self._email_taken(new_email, exclude=user_id):
                raise ValidationFailedError(
                    f"User with email {new_email} already exists", fields=["email"]
                )
            update["updated_at"] = self._clock()
            updated = user.model_copy(update=update)
            self._users[user_id] = updated
            if new_email and new_email != user.email and user.email in self._passwords:
                self._passwords[new_email] = self._passwords.pop(user.email)
        return updated

    async def delete_user(self, user_id: str) -> None:
        async with self._lock:
            user = self._user(user_id)
            if user.role == Role.HR:
                raise ProtectedUserError("Cannot delete HR admin users")
            del self._users[user_id]
            self._passwords.pop(user.email, None)

    # Signing requests

    async def list_requests(self, employee_id: str | None = None) -> list[SigningRequest]:
        requests = list(self._requests.values())
        if employee_id is not None:
            requests = [r for r in requests if r.employee_id == employee_id]
        return requests

    async def get_request(self, request_id: str) -> SigningRequest:
        return self._request(request_id)

    async def create_request(self, draft: RequestDraft, expires_at: datetime) -> SigningRequest:
        async with self._lock:
            employee = self._user(draft.employee_id)
            now = self._clock()
            documents = []
            for document in draft.documents:
                document_id = new_id()
                documents.append(
                    Document(
                        id=document_id,
                        name=document.name,
                        url=f"mock-url-{document_id}",
                        type=document.type,
                        size=document.size or 0,
                        uploaded_at=now,
                    )
                )
            request = SigningRequest(
                id=new_id(),
                title=draft.title,
                description=draft.description,
                created_at=now,
                updated_at=now,
                employee_id=employee.id,
                employee_name=employee.name,
                employee_email=employee.email,
                created_by=draft.created_by,
                documents=tuple(documents),
                expires_at=expires_at,
            )
            self._requests[request.id] = request
        return request

    async def delete_request(self, request_id: str) -> None:
        async with self._lock:
            lifecycle.ensure_deletable(self._request(request_id))
            del self._requests[request_id]

    async def sign_request(self, request_id: str) -> SigningRequest:
        async with self._lock:
            signed = lifecycle.sign(self._request(request_id), self._clock())
            self._requests[request_id] = signed
        return signed
