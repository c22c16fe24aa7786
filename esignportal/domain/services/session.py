"""
Session store: the durable, single-slot session of one portal client.

The authenticated identity and its bearer token are kept in the client's
storage under fixed keys. Callers never mutate a session in place; every
operation returns a new immutable SessionContext.
"""

from __future__ import annotations

import asyncio
import weakref
from typing import TYPE_CHECKING, Any, Protocol

import structlog
from pydantic import ValidationError

from esignportal.core.exceptions import NotFoundError, UnauthorizedError
from esignportal.domain.models import ANONYMOUS, SessionContext, User
from esignportal.infrastructure.transport.base import TransportError

if TYPE_CHECKING:
    from esignportal.infrastructure.repositories.signing import SigningRepository

logger = structlog.get_logger()

USER_KEY = "user"
TOKEN_KEY = "authToken"

# Fields a local patch may change; identity and role are never patched.
PATCHABLE_FIELDS = frozenset({"name", "email", "phone", "address"})


class KeyValueStorage(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, *keys: str) -> None: ...


class SessionLocks:
    """One lock per client so that writes to a session slot are serialized.

    A lock lives only while some in-flight request holds it.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def __len__(self) -> int:
        return len(self._locks)

    def for_client(self, client_id: str) -> asyncio.Lock:
        lock = self._locks.get(client_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[client_id] = lock
        return lock


class SessionStore:
    """Persist, restore and clear the identity of one client."""

    def __init__(self, storage: KeyValueStorage, lock: asyncio.Lock | None = None) -> None:
        self.storage = storage
        self._lock = lock or asyncio.Lock()

    async def restore(self) -> SessionContext:
        """Load the persisted identity; a corrupt record is discarded, never raised."""
        raw = await self.storage.get(USER_KEY)
        if raw is None:
            return ANONYMOUS

        try:
            user = User.model_validate_json(raw)
        except ValidationError as exc:
            await logger.awarning("session_restore_corrupt", errors=exc.error_count())
            async with self._lock:
                await self.storage.remove(USER_KEY, TOKEN_KEY)
            return ANONYMOUS

        token = await self.storage.get(TOKEN_KEY)
        return SessionContext(user=user, token=token)

    async def commit(self, user: User, token: str | None = None) -> SessionContext:
        """Persist ``user``, replacing any previous identity.

        The stored token is kept unless a new one is given.
        """
        async with self._lock:
            await self.storage.set(USER_KEY, user.model_dump_json(by_alias=True, exclude_none=True))
            if token is not None:
                await self.storage.set(TOKEN_KEY, token)
            else:
                token = await self.storage.get(TOKEN_KEY)
        return SessionContext(user=user, token=token)

    async def clear(self) -> SessionContext:
        async with self._lock:
            await self.storage.remove(USER_KEY, TOKEN_KEY)
        return ANONYMOUS

    async def patch(
        self,
        context: SessionContext,
        changes: dict[str, Any],
        repository: SigningRepository,
    ) -> SessionContext:
        """Merge ``changes`` into the session identity.

        The repository update is authoritative. When the backend cannot be
        reached or no longer knows the account, the change is applied locally
        so the edit is not lost; a rejection such as a duplicate email is raised.
        """
        if context.user is None:
            raise UnauthorizedError("Not signed in")

        changes = {k: v for k, v in changes.items() if k in PATCHABLE_FIELDS}
        try:
            updated = await repository.update_user(context.user.id, changes)
        except (NotFoundError, TransportError) as exc:
            await logger.awarning(
                "session_patch_local_fallback",
                user_id=context.user.id,
                error=str(exc),
            )
            updated = context.user.model_copy(update=changes)
        return await self.commit(updated)
