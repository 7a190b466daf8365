"""VIN Validation — ISO 3779 format rules and the North American check digit.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - validate_vin never raises — it returns a VinValidation describing the first failure
    - Rules run in a fixed order and short-circuit: missing → length → I/O/Q →
      character set → check digit
    - normalize_vin is the ONLY canonicalization; every comparison goes through it

Design Decisions:
    - Check digit only verified for WMI regions 1, 4, 5 (North America): other
      regions do not use the scheme, so verifying them would reject real VINs
    - Result object over exceptions: the schema layer decides how to surface a
      failure (ADR: validator stays transport-agnostic)
"""

import re
from dataclasses import dataclass

from vehicle_api.core.domain_types import CanonicalVin, VIN_LENGTH, VinError

TRANSLITERATIONS: dict[str, int] = {
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
}

WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)

CHECK_DIGIT_INDEX = 8
CHECK_DIGIT_REGIONS = frozenset("145")

_FORBIDDEN = re.compile(r"[IOQ]")
_ALLOWED = re.compile(r"[A-HJ-NPR-Z0-9]{17}")

ERROR_MESSAGES: dict[VinError, str] = {
    VinError.MISSING_INPUT: "VIN is required",
    VinError.INVALID_LENGTH: f"VIN must be exactly {VIN_LENGTH} characters",
    VinError.FORBIDDEN_CHARACTER: "VIN cannot contain I, O, or Q",
    VinError.INVALID_CHARACTER_SET: "VIN contains invalid characters",
    VinError.INVALID_CHECK_DIGIT: "Invalid VIN check digit",
}


@dataclass(frozen=True)
class VinValidation:
    """Outcome of validate_vin. `error` is None iff `valid`."""
    valid: bool
    error: VinError | None = None

    @property
    def message(self) -> str | None:
        return ERROR_MESSAGES[self.error] if self.error else None


VALID = VinValidation(valid=True)


def normalize_vin(raw: str) -> CanonicalVin:
    """Canonical form used for storage, lookup and uniqueness."""
    return CanonicalVin(raw.upper())


def _char_value(char: str) -> int:
    if char.isdigit():
        return int(char)
    return TRANSLITERATIONS.get(char, 0)


def calculate_check_digit(vin: str) -> str:
    """Expected position-9 character for an uppercase 17-character VIN."""
    total = sum(
        _char_value(char) * weight for char, weight in zip(vin, WEIGHTS)
    )
    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


def validate_vin(raw: object) -> VinValidation:
    """Apply the VIN rules in order; first failure wins."""
    if not raw or not isinstance(raw, str):
        return VinValidation(False, VinError.MISSING_INPUT)

    vin = normalize_vin(raw)

    if len(vin) != VIN_LENGTH:
        return VinValidation(False, VinError.INVALID_LENGTH)
    if _FORBIDDEN.search(vin):
        return VinValidation(False, VinError.FORBIDDEN_CHARACTER)
    if not _ALLOWED.fullmatch(vin):
        return VinValidation(False, VinError.INVALID_CHARACTER_SET)

    if vin[0] in CHECK_DIGIT_REGIONS:
        if calculate_check_digit(vin) != vin[CHECK_DIGIT_INDEX]:
            return VinValidation(False, VinError.INVALID_CHECK_DIGIT)

    return VALID
