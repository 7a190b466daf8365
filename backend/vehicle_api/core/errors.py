"""Error Hierarchy — typed, categorized exceptions for all Vehicle API failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
      and an http_status
    - to_response() produces the client envelope {statusCode, error, message, details?}
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level)
      never expose internal details to the client

Design Decisions:
    - Single hierarchy with VehicleApiError base: FastAPI global handler catches all
      (ADR: uniform error shape, no string-sniffing in routes)
    - FieldIssue as dataclass: same shape for VIN failures, bound checks and
      Pydantic errors
"""

from dataclasses import dataclass, asdict
from enum import Enum
from http import HTTPStatus

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    MALFORMED_REQUEST = "malformed_request"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass(frozen=True)
class FieldIssue:
    """One entry of the `details` array."""
    field: str
    message: str


def error_envelope(
    http_status: int, message: str, details: list[FieldIssue] | None = None,
) -> dict:
    """Client-facing error body. `error` is the HTTP reason phrase."""
    body = {
        "statusCode": http_status,
        "error": HTTPStatus(http_status).phrase,
        "message": message,
    }
    if details:
        body["details"] = [asdict(d) for d in details]
    return body


class VehicleApiError(Exception):
    """Base exception for all Vehicle API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 500,
        details: list[FieldIssue] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.details = details or []

    @property
    def client_message(self) -> str:
        return self.message

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return error_envelope(
            self.http_status, self.client_message, self.details,
        )


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationFailedError(VehicleApiError):
    """One or more fields failed validation (VIN rules, bounds)."""
    def __init__(self, details: list[FieldIssue]):
        super().__init__(
            "Validation failed", "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 422, details,
        )


class MalformedRequestError(VehicleApiError):
    """Request body could not be parsed."""
    def __init__(self, message: str = "Malformed request body"):
        super().__init__(
            message, "MALFORMED_REQUEST", ErrorCategory.MALFORMED_REQUEST,
            ErrorSeverity.WARNING, 400,
        )


class VehicleNotFoundError(VehicleApiError):
    """No vehicle with the given VIN."""
    def __init__(self, vin: str):
        super().__init__(
            f"Vehicle with VIN {vin} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, 404,
        )
        self.vin = vin


class VinConflictError(VehicleApiError):
    """A vehicle with the same VIN (case-insensitively) already exists."""
    def __init__(self, vin: str):
        super().__init__(
            f"Vehicle with VIN {vin} already exists",
            "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, 409,
        )
        self.vin = vin


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(VehicleApiError):
    """Database operation failed. Message is logged, never sent to the client."""
    def __init__(self, message: str, operation: str):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, 500,
        )
        self.operation = operation

    @property
    def client_message(self) -> str:
        return UNEXPECTED_ERROR_MESSAGE
