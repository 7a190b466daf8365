"""Error Handlers — global exception handlers for the Vehicle API.

Invariants:
    - VehicleApiError → envelope {statusCode, error, message, details?}
    - RequestValidationError → 422 with field-level details, or 400 when the body
      itself is unusable (invalid JSON, not an object, absent)
    - Starlette HTTPException (unknown route, wrong method) → same envelope
    - Exception (catch-all) → 500, logged with traceback, never leaks internal details

Design Decisions:
    - Four-layer handler: domain, validation (Pydantic), HTTP (routing), catch-all
    - Extracted from main.py: keeps the app module to wiring only
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vehicle_api.core.errors import (
    FieldIssue, MalformedRequestError, ValidationFailedError,
    VehicleApiError, ErrorSeverity, UNEXPECTED_ERROR_MESSAGE, error_envelope,
)

logger = logging.getLogger(__name__)

REQUEST_LOCATIONS = ("body", "query", "path", "header")
MALFORMED_BODY_TYPES = (
    "json_invalid", "model_type", "model_attributes_type", "dict_type", "missing",
)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    """Register Vehicle API domain/infrastructure error handler."""

    @app.exception_handler(VehicleApiError)
    async def vehicle_api_error_handler(request: Request, exc: VehicleApiError):
        """Handle all Vehicle API domain/infrastructure errors."""
        log = (
            logger.error if exc.severity == ErrorSeverity.CRITICAL
            else logger.info
        )
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        error = _classify_validation_error(exc)
        return JSONResponse(
            status_code=error.http_status, content=error.to_response(),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register routing-level HTTP error handler (404 unknown path, 405)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException,
    ):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.status_code, message),
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                UNEXPECTED_ERROR_MESSAGE,
            ),
        )


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts) or "body"


def _is_malformed_body(error: dict) -> bool:
    loc = tuple(error.get("loc", ()))
    if error.get("type") == "json_invalid":
        return True
    return loc == ("body",) and error.get("type") in MALFORMED_BODY_TYPES


def _classify_validation_error(exc: RequestValidationError) -> VehicleApiError:
    """400 for an unusable body, otherwise 422 with one detail per field error."""
    errors = exc.errors()
    malformed = next((e for e in errors if _is_malformed_body(e)), None)
    if malformed is not None:
        if malformed.get("type") == "json_invalid":
            return MalformedRequestError("Request body is not valid JSON")
        return MalformedRequestError("Request body must be a JSON object")
    return ValidationFailedError([
        FieldIssue(_field_name(e["loc"]), e["msg"]) for e in errors
    ])
