from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from esignportal.api.main import create_app
from esignportal.core.config import Settings
from esignportal.domain.services.session import SessionStore
from esignportal.infrastructure.db.session import (
    create_engine,
    create_session_factory,
    create_tables,
)
from esignportal.infrastructure.repositories.signing import SigningRepository
from esignportal.infrastructure.storage import ClientStorage
from esignportal.infrastructure.transport import FallbackTransport, MockTransport


def make_settings(tmp_path: Path, **overrides) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    values = {"DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture()
def test_client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest.fixture()
def repository(mock_transport: MockTransport) -> SigningRepository:
    return SigningRepository(FallbackTransport(None, mock_transport), request_ttl_days=30)


@pytest.fixture()
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture()
def storage(session_factory: async_sessionmaker[AsyncSession]) -> ClientStorage:
    return ClientStorage(session_factory, "client-1")


@pytest.fixture()
def store(storage: ClientStorage) -> SessionStore:
    return SessionStore(storage)
