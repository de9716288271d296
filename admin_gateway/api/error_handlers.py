"""Error Handlers — map every failure onto the {"ok": false, "error": {...}} envelope.

Invariants:
    - AdminGatewayError → its own http_status and to_response() body
    - SESSION_EXPIRED responses also expire the stale session cookie
    - RequestValidationError → 400 VALIDATION_ERROR with per-field details,
      submitted values never echoed (they may contain passwords)
    - Any other exception → 500 INTERNAL_ERROR, no internals in the body

Design Decisions:
    - Three handlers, most specific first: domain, validation, catch-all
    - Client errors (< 500) logged as warnings, the rest as errors
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from admin_gateway.config import get_settings
from admin_gateway.core.errors import (
    AdminGatewayError, ErrorCategory, ErrorSeverity, SessionExpiredError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AdminGatewayError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def error_envelope(
    code: str,
    message: str,
    category: str,
    severity: ErrorSeverity,
    details: list[dict] | None = None,
) -> dict:
    error = {
        "code": code,
        "message": message,
        "category": category,
        "severity": severity.value,
    }
    if details is not None:
        error["details"] = details
    return {"ok": False, "error": error}


async def handle_domain_error(request: Request, exc: AdminGatewayError) -> JSONResponse:
    log = logger.warning if exc.http_status < 500 else logger.error
    log(
        f"{exc.code}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    response = JSONResponse(status_code=exc.http_status, content=exc.to_response())
    if isinstance(exc, SessionExpiredError):
        response.delete_cookie(get_settings().admin_session_cookie, path="/")
    return response


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected request body ({len(details)} field errors)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION.value, ErrorSeverity.ERROR, details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.url.path}",
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL.value, ErrorSeverity.CRITICAL,
        ),
    )
