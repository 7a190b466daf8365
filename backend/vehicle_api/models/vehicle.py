"""Vehicle ORM — the single persisted resource, keyed by VIN.

Invariants:
    - id is UUID primary key, generated on insert, never updated
    - vin is stored canonical (uppercase) and unique case-insensitively
      (unique index on upper(vin) — the authoritative uniqueness guard)
    - purchase_price is Numeric(12, 2) and always a Decimal in Python
    - updated_at >= created_at

Design Decisions:
    - Check constraints mirror the schema bounds that don't depend on the clock
      (model_year upper bound is enforced at write time, see core/vehicle_rules.py)
    - fuel_type stored as plain string of FuelType.value: portable across
      PostgreSQL and SQLite, validated at the boundary by the enum
    - Timestamps set application-side in UTC: identical behaviour on both backends
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint, DateTime, Index, Integer, Numeric, String, Text, func,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from vehicle_api.core.domain_types import (
    HORSE_POWER_MAX, HORSE_POWER_MIN, MODEL_YEAR_MIN, NAME_MAX_LENGTH,
    PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS, VIN_LENGTH,
)
from vehicle_api.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Vehicle(Base):
    """A vehicle record."""
    __tablename__ = "vehicles"
    __table_args__ = (
        CheckConstraint(
            f"length(vin) = {VIN_LENGTH}", name="ck_vehicles_vin_length",
        ),
        CheckConstraint(
            f"horse_power BETWEEN {HORSE_POWER_MIN} AND {HORSE_POWER_MAX}",
            name="ck_vehicles_horse_power_range",
        ),
        CheckConstraint(
            f"model_year >= {MODEL_YEAR_MIN}", name="ck_vehicles_model_year_min",
        ),
        CheckConstraint(
            "purchase_price >= 0", name="ck_vehicles_purchase_price_non_negative",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    vin: Mapped[str] = mapped_column(
        String(VIN_LENGTH), nullable=False, unique=True,
    )
    manufacturer_name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH), nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    horse_power: Mapped[int] = mapped_column(Integer, nullable=False)
    model_name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH), nullable=False,
    )
    model_year: Mapped[int] = mapped_column(Integer, nullable=False)
    purchase_price: Mapped[Decimal] = mapped_column(
        Numeric(PRICE_MAX_DIGITS, PRICE_DECIMAL_PLACES, asdecimal=True),
        nullable=False,
    )
    fuel_type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )


Index(
    "uq_vehicles_vin_upper", func.upper(Vehicle.vin), unique=True,
)
Index(
    "ix_vehicles_listing_order",
    Vehicle.manufacturer_name, Vehicle.model_year.desc(), Vehicle.vin,
)
