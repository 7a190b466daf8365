"""Structured Logging — JSON formatter, setup, and per-request access logging.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (vin, error_code, path, status_code, ...) surfaced when present
    - JSON format in production, human-readable in development
    - Every response carries X-Correlation-ID (echoed from the request when provided)

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan
    - Access log level follows status: 5xx ERROR, 4xx WARNING, otherwise INFO
    - Unhandled route exceptions become the generic 500 envelope inside the
      middleware, logged with traceback, so they carry the correlation id too
"""

import json
import logging
import time
import uuid
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from vehicle_api.core.errors import UNEXPECTED_ERROR_MESSAGE, error_envelope

EXTRA_KEYS = (
    "vin", "error_code", "path", "method", "status_code",
    "duration_ms", "correlation_id",
)

access_logger = logging.getLogger("vehicle_api.access")


def _access_extra(
    request: Request, correlation_id: str, response: Response, start: float,
) -> dict:
    return {
        "correlation_id": correlation_id,
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": round((time.perf_counter() - start) * 1000, 2),
    }


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.handlers = [handler]
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with correlation id and duration for every request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(
            "X-Correlation-ID", str(uuid.uuid4()),
        )
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            # unhandled route error: answer here so the 500 keeps the header
            response = JSONResponse(
                status_code=500,
                content=error_envelope(500, UNEXPECTED_ERROR_MESSAGE),
            )
            access_logger.error(
                "unhandled exception",
                exc_info=True,
                extra=_access_extra(request, correlation_id, response, start),
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response

        response.headers["X-Correlation-ID"] = correlation_id

        extra = _access_extra(request, correlation_id, response, start)
        if response.status_code >= 500:
            access_logger.error("request failed", extra=extra)
        elif response.status_code >= 400:
            access_logger.warning("request rejected", extra=extra)
        else:
            access_logger.info("request completed", extra=extra)
        return response
