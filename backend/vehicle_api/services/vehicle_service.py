"""Vehicle Service — list, lookup, create, update and delete vehicles by VIN.

Invariants:
    - Every VIN argument is canonicalized with normalize_vin before it reaches SQL
    - Lookups match upper(vin) == canonical VIN (case-insensitive exact match)
    - Listing order is total: manufacturer_name ASC, model_year DESC, vin ASC
    - create: the unique index on upper(vin) is the source of truth; the exists()
      pre-check only produces the friendly 409 early
    - update/delete signal absence with VehicleNotFoundError, duplicates with
      VinConflictError — never a generic exception
    - One commit per mutating call; on failure the session manager rolls back

Design Decisions:
    - Service owns the AsyncSession for the request (injected), mirroring the
      handler classes: one instance per request, no shared state
    - update locks the row (SELECT ... FOR UPDATE, ignored by SQLite) so the
      read-modify-write is a single logical transaction
    - delete is one DELETE statement: no check-then-act window
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vehicle_api.core.domain_types import FuelType
from vehicle_api.core.errors import (
    DatabaseError, VehicleNotFoundError, VinConflictError,
)
from vehicle_api.core.pagination import (
    PageInfo, PageRequest, VehicleFilter, build_page_info, escape_like,
)
from vehicle_api.core.vin import normalize_vin
from vehicle_api.models.vehicle import Vehicle, utcnow

logger = logging.getLogger(__name__)

LISTING_ORDER = (
    Vehicle.manufacturer_name.asc(),
    Vehicle.model_year.desc(),
    Vehicle.vin.asc(),
)


def _vin_matches(vin: str):
    return func.upper(Vehicle.vin) == normalize_vin(vin)


def _filter_conditions(filters: VehicleFilter) -> list:
    conditions = []
    if filters.manufacturer:
        conditions.append(
            Vehicle.manufacturer_name.ilike(
                f"%{escape_like(filters.manufacturer)}%", escape="\\",
            ),
        )
    if filters.fuel_type is not None:
        conditions.append(Vehicle.fuel_type == FuelType(filters.fuel_type).value)
    if filters.year_min is not None:
        conditions.append(Vehicle.model_year >= filters.year_min)
    if filters.year_max is not None:
        conditions.append(Vehicle.model_year <= filters.year_max)
    return conditions


def _to_columns(data: dict) -> dict:
    """Coerce validated input into column values (Decimal price, enum value)."""
    columns = dict(data)
    if columns.get("purchase_price") is not None:
        columns["purchase_price"] = Decimal(str(columns["purchase_price"]))
    if columns.get("fuel_type") is not None:
        columns["fuel_type"] = FuelType(columns["fuel_type"]).value
    return columns


def _next_updated_at(previous: datetime) -> datetime:
    """Refresh timestamp, never earlier than the stored one (clock skew)."""
    now = utcnow()
    if previous.tzinfo is None:
        # SQLite returns naive datetimes; compare as UTC
        now = now.replace(tzinfo=None)
    return max(now, previous)


class VehicleService:
    """Vehicle query engine over a request-scoped session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_vehicles(
        self,
        page_request: PageRequest = PageRequest(),
        filters: VehicleFilter = VehicleFilter(),
    ) -> tuple[list[Vehicle], PageInfo]:
        """Page of vehicles matching filters, plus page metadata.

        Pages past the last match are empty without querying rows, so the
        offset sent to the store never exceeds the match count.
        """
        conditions = _filter_conditions(filters)

        count_query = select(func.count()).select_from(Vehicle).where(*conditions)
        total = (await self.db.execute(count_query)).scalar_one()
        page_info = build_page_info(page_request, total)
        if page_request.offset >= total:
            return [], page_info

        query = (
            select(Vehicle)
            .where(*conditions)
            .order_by(*LISTING_ORDER)
            .offset(page_request.offset)
            .limit(page_request.limit)
        )
        vehicles = (await self.db.execute(query)).scalars().all()
        return list(vehicles), page_info

    async def find_by_vin(self, vin: str) -> Vehicle | None:
        result = await self.db.execute(select(Vehicle).where(_vin_matches(vin)))
        return result.scalar_one_or_none()

    async def exists(self, vin: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Vehicle).where(_vin_matches(vin)),
        )
        return result.scalar_one() > 0

    async def get_by_vin(self, vin: str) -> Vehicle:
        """find_by_vin or raise VehicleNotFoundError."""
        vehicle = await self.find_by_vin(vin)
        if vehicle is None:
            raise VehicleNotFoundError(vin)
        return vehicle

    async def create(self, data: dict) -> Vehicle:
        """Insert a vehicle. `data` is a validated create payload (snake_case)."""
        columns = _to_columns(data)
        vin = normalize_vin(columns["vin"])
        columns["vin"] = vin

        if await self.exists(vin):
            raise VinConflictError(vin)

        vehicle = Vehicle(**columns)
        self.db.add(vehicle)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            # a concurrent insert won the race, or another constraint failed
            if await self.exists(vin):
                logger.info(
                    "Concurrent create rejected by unique index",
                    extra={"vin": vin},
                )
                raise VinConflictError(vin) from e
            raise DatabaseError("Integrity constraint violated", "insert") from e

        await self.db.refresh(vehicle)
        logger.info("Vehicle created", extra={"vin": vin})
        return vehicle

    async def update(self, vin: str, changes: dict) -> Vehicle:
        """Apply provided fields only. `vin` itself is never changed."""
        changes = _to_columns(changes)
        changes.pop("vin", None)

        result = await self.db.execute(
            select(Vehicle).where(_vin_matches(vin)).with_for_update(),
        )
        vehicle = result.scalar_one_or_none()
        if vehicle is None:
            raise VehicleNotFoundError(vin)

        for name, value in changes.items():
            setattr(vehicle, name, value)
        vehicle.updated_at = _next_updated_at(vehicle.updated_at)

        await self.db.commit()
        await self.db.refresh(vehicle)
        logger.info(
            f"Vehicle updated: {sorted(changes)}", extra={"vin": vehicle.vin},
        )
        return vehicle

    async def delete(self, vin: str) -> None:
        """Hard delete."""
        result = await self.db.execute(
            delete(Vehicle)
            .where(_vin_matches(vin))
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise VehicleNotFoundError(vin)
        await self.db.commit()
        logger.info("Vehicle deleted", extra={"vin": normalize_vin(vin)})
