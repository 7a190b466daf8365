"""Vehicle Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Wire names are camelCase (alias_generator); Python attributes stay snake_case
    - Request models forbid unknown fields (extra="forbid") and accept aliases only
    - VehicleCreate.vin passes validate_vin and is stored canonical (uppercase)
    - VehicleUpdate has no vin field: the natural key is immutable
    - purchase_price is Decimal on the way in, float on the way out

Design Decisions:
    - VIN failures raised as PydanticCustomError: they join the other field errors
      in one 422 response instead of a second validation pass
    - modelYear upper bound NOT declared here (depends on the clock, see
      core/vehicle_rules.py); the lower bound is static
    - Names are trimmed before the non-empty check: "  " is rejected, "  Honda "
      is stored as "Honda"
    - Explicit null rejected for non-nullable update fields: omitting a field and
      sending null are different requests
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import (
    BaseModel, ConfigDict, Field, StringConstraints, field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from vehicle_api.core.domain_types import (
    FuelType, HORSE_POWER_MAX, HORSE_POWER_MIN, MODEL_YEAR_MIN,
    NAME_MAX_LENGTH, PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS,
)
from vehicle_api.core.pagination import PageInfo
from vehicle_api.core.vin import normalize_vin, validate_vin

NonBlankName = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=1, max_length=NAME_MAX_LENGTH,
    ),
]
HorsePower = Annotated[int, Field(ge=HORSE_POWER_MIN, le=HORSE_POWER_MAX)]
ModelYear = Annotated[int, Field(ge=MODEL_YEAR_MIN)]
Price = Annotated[
    Decimal,
    Field(
        ge=0, max_digits=PRICE_MAX_DIGITS, decimal_places=PRICE_DECIMAL_PLACES,
    ),
]

NON_NULLABLE_UPDATE_FIELDS = (
    "manufacturer_name", "horse_power", "model_name",
    "model_year", "purchase_price", "fuel_type",
)


class _RequestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=False, extra="forbid",
    )


class _ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VehicleCreate(_RequestModel):
    """Create body — all fields required except description."""
    vin: str = Field(examples=["1HGBH41JXMN109186"])
    manufacturer_name: NonBlankName = Field(examples=["Honda"])
    description: str | None = Field(None, examples=["Reliable mid-size sedan"])
    horse_power: HorsePower = Field(examples=[192])
    model_name: NonBlankName = Field(examples=["Accord"])
    model_year: ModelYear = Field(examples=[2024])
    purchase_price: Price = Field(examples=[32999.99])
    fuel_type: FuelType = Field(examples=[FuelType.GASOLINE])

    @field_validator("vin")
    @classmethod
    def check_vin(cls, v: str) -> str:
        result = validate_vin(v)
        if not result.valid:
            raise PydanticCustomError(
                "vin_invalid", result.message, {"reason": result.error.value},
            )
        return normalize_vin(v)


class VehicleUpdate(_RequestModel):
    """Update body — every field optional; only provided fields change."""
    manufacturer_name: NonBlankName | None = None
    description: str | None = None
    horse_power: HorsePower | None = None
    model_name: NonBlankName | None = None
    model_year: ModelYear | None = None
    purchase_price: Price | None = None
    fuel_type: FuelType | None = None

    @field_validator(*NON_NULLABLE_UPDATE_FIELDS, mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise PydanticCustomError("null_not_allowed", "Field may not be null")
        return v

    def changes(self) -> dict:
        """Provided fields only, snake_case keys."""
        return self.model_dump(exclude_unset=True)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-01-15T10:30:00.000Z."""
    if value.tzinfo is None:
        # SQLite drops the offset; values are always written in UTC
        value = value.replace(tzinfo=timezone.utc)
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class VehicleResponse(_ResponseModel):
    """Public vehicle shape."""
    id: UUID
    vin: str
    manufacturer_name: str
    description: str | None
    horse_power: int
    model_name: str
    model_year: int
    purchase_price: float
    fuel_type: FuelType
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, vehicle) -> "VehicleResponse":
        return cls(
            id=vehicle.id,
            vin=vehicle.vin,
            manufacturer_name=vehicle.manufacturer_name,
            description=vehicle.description,
            horse_power=vehicle.horse_power,
            model_name=vehicle.model_name,
            model_year=vehicle.model_year,
            purchase_price=float(vehicle.purchase_price),
            fuel_type=FuelType(vehicle.fuel_type),
            created_at=format_timestamp(vehicle.created_at),
            updated_at=format_timestamp(vehicle.updated_at),
        )


class PaginationResponse(_ResponseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_page_info(cls, info: PageInfo) -> "PaginationResponse":
        return cls(
            page=info.page, limit=info.limit,
            total=info.total, total_pages=info.total_pages,
        )


class VehicleListResponse(_ResponseModel):
    data: list[VehicleResponse]
    pagination: PaginationResponse


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope — documented in OpenAPI for every error status."""
    statusCode: int
    error: str
    message: str
    details: list[ErrorDetail] | None = None
