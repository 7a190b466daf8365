"""Vehicle Routes — CRUD over /vehicle, keyed by VIN (case-insensitive).

Invariants:
    - Routes never contain business logic: validation → rules → VehicleService → response
    - Not-found and conflict arrive as typed errors from the service; the global
      handler turns them into 404/409 envelopes
    - modelYear, yearMin and yearMax upper bounds checked with the injected
      current year; all year inputs stay within [1886, current_year + 2]

Design Decisions:
    - POST responds 201 with the created record; DELETE responds 204 with no body
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status

from vehicle_api.api.dependencies import get_current_year, get_vehicle_service
from vehicle_api.core.domain_types import (
    FuelType, LIMIT_DEFAULT, LIMIT_MAX, MODEL_YEAR_MIN, PAGE_DEFAULT,
)
from vehicle_api.core.errors import ValidationFailedError
from vehicle_api.core.pagination import PageRequest, VehicleFilter
from vehicle_api.core.vehicle_rules import (
    check_year_range_query, collect_write_issues,
)
from vehicle_api.schemas.vehicle import (
    ErrorResponse, PaginationResponse, VehicleCreate, VehicleListResponse,
    VehicleResponse, VehicleUpdate,
)
from vehicle_api.services.vehicle_service import VehicleService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/vehicle", tags=["vehicles"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Vehicle not found"}}
UNPROCESSABLE = {422: {"model": ErrorResponse, "description": "Validation failed"}}
MALFORMED = {400: {"model": ErrorResponse, "description": "Malformed request body"}}
CONFLICT = {409: {"model": ErrorResponse, "description": "VIN already exists"}}


def _raise_on_issues(fields: dict, current_year: int) -> None:
    issues = collect_write_issues(fields, current_year)
    if issues:
        raise ValidationFailedError(issues)


@router.get(
    "", response_model=VehicleListResponse, responses=UNPROCESSABLE,
)
async def list_vehicles(
    page: int = Query(PAGE_DEFAULT, ge=1, description="Page number"),
    limit: int = Query(
        LIMIT_DEFAULT, ge=1, le=LIMIT_MAX, description="Items per page",
    ),
    manufacturer: str | None = Query(
        None, description="Case-insensitive partial match on manufacturer name",
    ),
    fuel_type: FuelType | None = Query(None, alias="fuelType"),
    year_min: int | None = Query(None, alias="yearMin", ge=MODEL_YEAR_MIN),
    year_max: int | None = Query(None, alias="yearMax", ge=MODEL_YEAR_MIN),
    current_year: int = Depends(get_current_year),
    service: VehicleService = Depends(get_vehicle_service),
):
    """List vehicles with pagination and optional filtering."""
    issues = [
        issue for issue in (
            check_year_range_query(year_min, current_year, "yearMin"),
            check_year_range_query(year_max, current_year, "yearMax"),
        )
        if issue
    ]
    if issues:
        raise ValidationFailedError(issues)

    vehicles, page_info = await service.list_vehicles(
        PageRequest(page=page, limit=limit),
        VehicleFilter(
            manufacturer=manufacturer or None,
            fuel_type=fuel_type,
            year_min=year_min,
            year_max=year_max,
        ),
    )
    return VehicleListResponse(
        data=[VehicleResponse.from_model(v) for v in vehicles],
        pagination=PaginationResponse.from_page_info(page_info),
    )


@router.get("/{vin}", response_model=VehicleResponse, responses=NOT_FOUND)
async def get_vehicle(
    vin: str, service: VehicleService = Depends(get_vehicle_service),
):
    """Get a single vehicle by VIN (case-insensitive)."""
    vehicle = await service.get_by_vin(vin)
    return VehicleResponse.from_model(vehicle)


@router.post(
    "",
    response_model=VehicleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**MALFORMED, **CONFLICT, **UNPROCESSABLE},
)
async def create_vehicle(
    body: VehicleCreate,
    current_year: int = Depends(get_current_year),
    service: VehicleService = Depends(get_vehicle_service),
):
    """Create a new vehicle record."""
    data = body.model_dump()
    _raise_on_issues(data, current_year)
    vehicle = await service.create(data)
    return VehicleResponse.from_model(vehicle)


@router.put(
    "/{vin}",
    response_model=VehicleResponse,
    responses={**MALFORMED, **NOT_FOUND, **UNPROCESSABLE},
)
async def update_vehicle(
    vin: str,
    body: VehicleUpdate,
    current_year: int = Depends(get_current_year),
    service: VehicleService = Depends(get_vehicle_service),
):
    """Update an existing vehicle by VIN. Only provided fields change."""
    changes = body.changes()
    _raise_on_issues(changes, current_year)
    vehicle = await service.update(vin, changes)
    return VehicleResponse.from_model(vehicle)


@router.delete(
    "/{vin}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
async def delete_vehicle(
    vin: str, service: VehicleService = Depends(get_vehicle_service),
):
    """Delete a vehicle by VIN."""
    await service.delete(vin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
