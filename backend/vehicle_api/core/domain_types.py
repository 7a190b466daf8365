"""Domain Types — closed value sets and field bounds shared by schemas, rules and ORM.

Invariants:
    - FuelType is the single source of truth for allowed fuel values (schema, ORM, filters)
    - VinError enumerates every reason validate_vin can fail — no raw string matching
    - Field bounds live here once; schemas and check constraints read them

Design Decisions:
    - str Enums: serialize to JSON without custom encoders and compare equal to
      their persisted string value (ADR: no drift between wire and column)
    - Model-year upper bound is NOT a constant — it depends on the current year,
      see core/vehicle_rules.py
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

VehicleId = NewType("VehicleId", UUID)
CanonicalVin = NewType("CanonicalVin", str)   # uppercase, produced by normalize_vin


# ─── Field Bounds ────────────────────────────────────────────────

VIN_LENGTH = 17
HORSE_POWER_MIN = 1
HORSE_POWER_MAX = 2000
MODEL_YEAR_MIN = 1886            # Benz Patent-Motorwagen
MODEL_YEAR_LOOKAHEAD = 2         # manufacturers sell next year's models early
PRICE_MAX_DIGITS = 12
PRICE_DECIMAL_PLACES = 2
NAME_MAX_LENGTH = 255

PAGE_DEFAULT = 1
LIMIT_DEFAULT = 20
LIMIT_MAX = 100


# ─── Enums ───────────────────────────────────────────────────────

class FuelType(str, Enum):
    """Fuel types a vehicle may declare — maps to `fuel_type` column."""
    GASOLINE = "Gasoline"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"
    HYDROGEN = "Hydrogen"
    OTHER = "Other"


class VinError(str, Enum):
    """Reasons a VIN fails validation, in the order the rules are applied."""
    MISSING_INPUT = "MissingInput"
    INVALID_LENGTH = "InvalidLength"
    FORBIDDEN_CHARACTER = "ForbiddenCharacter"
    INVALID_CHARACTER_SET = "InvalidCharacterSet"
    INVALID_CHECK_DIGIT = "InvalidCheckDigit"
