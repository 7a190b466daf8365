"""Pagination — page/limit arithmetic and list filter parameters.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - offset == (page - 1) * limit
    - total_pages == ceil(total / limit); 0 when there are no matches
    - A filter field of None means "not filtered" (0 is never treated as absent)

Design Decisions:
    - Frozen dataclasses: request parameters are values, not mutable state
    - Bounds are validated at the HTTP boundary (Query constraints); these types
      assert them again so the service can be called safely from other shells
"""

import math
from dataclasses import dataclass

from vehicle_api.core.domain_types import (
    FuelType, LIMIT_DEFAULT, LIMIT_MAX, PAGE_DEFAULT,
)


@dataclass(frozen=True)
class PageRequest:
    page: int = PAGE_DEFAULT
    limit: int = LIMIT_DEFAULT

    def __post_init__(self):
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if not 1 <= self.limit <= LIMIT_MAX:
            raise ValueError(f"limit must be in [1, {LIMIT_MAX}], got {self.limit}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class VehicleFilter:
    """Optional list filters. Manufacturer is a case-insensitive substring."""
    manufacturer: str | None = None
    fuel_type: FuelType | None = None
    year_min: int | None = None
    year_max: int | None = None


@dataclass(frozen=True)
class PageInfo:
    page: int
    limit: int
    total: int
    total_pages: int


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def build_page_info(request: PageRequest, total: int) -> PageInfo:
    return PageInfo(
        page=request.page,
        limit=request.limit,
        total=total,
        total_pages=total_pages(total, request.limit),
    )


def escape_like(term: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so `term` matches literally as a substring."""
    return (
        term.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )
