from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from esignportal.infrastructure.db.models import ClientStorageEntry


class ClientStorage:
    """Durable string key-value storage of one portal client.

    Survives reloads and process restarts, like a browser's local storage.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], client_id: str) -> None:
        self._session_factory = session_factory
        self.client_id = client_id

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            stmt = select(ClientStorageEntry.value).where(
                ClientStorageEntry.client_id == self.client_id,
                ClientStorageEntry.key == key,
            )
            return await session.scalar(stmt)

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            stmt = select(ClientStorageEntry).where(
                ClientStorageEntry.client_id == self.client_id,
                ClientStorageEntry.key == key,
            )
            entry = await session.scalar(stmt)
            if entry is None:
                session.add(ClientStorageEntry(client_id=self.client_id, key=key, value=value))
            else:
                entry.value = value
            await session.commit()

    async def remove(self, *keys: str) -> None:
        if not keys:
            return
        async with self._session_factory() as session:
            await session.execute(
                delete(ClientStorageEntry).where(
                    ClientStorageEntry.client_id == self.client_id,
                    ClientStorageEntry.key.in_(keys),
                )
            )
            await session.commit()
