"""API test fixtures — FastAPI app over an in-memory database.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db overridden to use a DatabaseSessionManager bound to the test engine,
      so rollback and error mapping are the production ones
    - db_manager patched for the readiness probe
    - get_current_year pinned to CURRENT_YEAR: year bounds are deterministic
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

import vehicle_api.infrastructure.database as db_module
from vehicle_api.api.dependencies import get_current_year
from vehicle_api.db.base import Base
from vehicle_api.infrastructure.database import get_db, DatabaseSessionManager
from vehicle_api.main import app
from vehicle_api.models import Vehicle  # noqa: F401
from tests.api.payloads import CURRENT_YEAR, VALID_VEHICLE


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(test_engine):
    """FastAPI test client with DB dependency overridden."""
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )

    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_year] = lambda: CURRENT_YEAR

    original_manager = db_module.db_manager
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def create_vehicle(client):
    async def _create(**overrides):
        res = await client.post("/vehicle", json={**VALID_VEHICLE, **overrides})
        assert res.status_code == 201, res.text
        return res.json()
    return _create
