"""Route Dependencies — request-scoped collaborators injected with FastAPI Depends.

Invariants:
    - One VehicleService per request, bound to that request's session
    - The current year comes from get_current_year only; tests override it via
      app.dependency_overrides to pin year-dependent bounds
"""

from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vehicle_api.infrastructure.database import get_db
from vehicle_api.services.vehicle_service import VehicleService


def get_current_year() -> int:
    return datetime.now(timezone.utc).year


def get_vehicle_service(db: AsyncSession = Depends(get_db)) -> VehicleService:
    return VehicleService(db)
