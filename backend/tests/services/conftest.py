"""Service test fixtures — async in-memory database and vehicle factories.

Invariants:
    - Every test gets a fresh in-memory SQLite database (StaticPool: one shared connection)
    - make_vehicle_data produces distinct 17-character VINs in the non-checked region

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the unique index on
      upper(vin) and the check constraints are enforced by SQLite too
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from vehicle_api.db.base import Base
from vehicle_api.models import Vehicle  # noqa: F401
from vehicle_api.services.vehicle_service import VehicleService


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
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def service(test_db):
    return VehicleService(test_db)


def vin_for(n: int) -> str:
    """Distinct valid European-style VIN (no check digit rule)."""
    return f"WVWZZZ3CZWE{n:06d}"


@pytest.fixture
def make_vehicle_data():
    def _make(n: int = 1, **overrides) -> dict:
        data = {
            "vin": vin_for(n),
            "manufacturer_name": "Volkswagen",
            "description": None,
            "horse_power": 150,
            "model_name": "Golf",
            "model_year": 2020,
            "purchase_price": "19999.99",
            "fuel_type": "Gasoline",
        }
        data.update(overrides)
        return data
    return _make
