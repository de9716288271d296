"""Error Hierarchy — typed, categorized exceptions for the admin gateway.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - "Session expired", "access denied" and "temporarily unavailable" carry
      distinct codes and are never collapsed into one generic error
    - Bad credentials are NOT an exception: authentication returns None
    - DataServiceError keeps the backing service's status/code so the retry
      executor can classify it, and is re-raised unchanged after exhaustion
    - No secrets (tokens, hashes, passwords) ever appear in messages

Design Decisions:
    - Single hierarchy with AdminGatewayError base: one FastAPI handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """How loudly an error is logged and reported."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Which layer of the gateway an error comes from."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    SESSION = "session"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Per-error metadata; user_message overrides the client-facing text."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    subject_id: str | None = None
    table: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class AdminGatewayError(Exception):
    """Base exception for all admin gateway errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Envelope sent to the client: {"ok": false, "error": {...}}."""
        return {
            "ok": False,
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            },
        }


# ─── Credential Errors ──────────────────────────────────────────

class InvalidPasswordError(AdminGatewayError):
    """Password cannot be hashed (not encodable, or beyond bcrypt's 72 bytes)."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Password rejected: {reason}",
            "INVALID_PASSWORD", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class MalformedHashError(AdminGatewayError):
    """Stored password hash is not a valid bcrypt hash."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Stored password hash is malformed",
            "MALFORMED_PASSWORD_HASH", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Session Errors (401-level) ─────────────────────────────────

class AuthenticationRequiredError(AdminGatewayError):
    """No administrator session present — access denied."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Administrator authentication required",
            "AUTH_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class SessionExpiredError(AdminGatewayError):
    """Administrator session existed but outlived its fixed lifetime."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Administrator session expired, please sign in again",
            "SESSION_EXPIRED", ErrorCategory.SESSION,
            ErrorSeverity.WARNING, context, 401,
        )


class SessionStorageError(AdminGatewayError):
    """Persisting, reading or removing a session failed. Never retried."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Session storage {operation} failed",
            "SESSION_STORAGE_ERROR", ErrorCategory.SESSION,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


# ─── Domain Errors ──────────────────────────────────────────────

class ResourceNotFoundError(AdminGatewayError):
    """Row addressed by id does not exist in the data service."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(AdminGatewayError):
    """Session store database call failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


RATE_LIMIT_STATUS = 429
RATE_LIMIT_SERVICE_CODE = "over_request_rate_limit"


class DataServiceError(AdminGatewayError):
    """Backing data service call failed.

    status_code is the HTTP status (None for transport failures) and
    service_code the code from the service's error body, if any.
    """
    def __init__(
        self,
        message: str,
        status_code: int | None,
        service_code: str | None = None,
        context: ErrorContext | None = None,
    ):
        self.status_code = status_code
        self.service_code = service_code
        if self.rate_limited:
            code, http_status = "DATA_SERVICE_RATE_LIMITED", 503
            severity = ErrorSeverity.WARNING
        else:
            code, http_status = "DATA_SERVICE_ERROR", 502
            severity = ErrorSeverity.CRITICAL
        super().__init__(
            f"Data service error ({status_code}, {service_code}): {message}",
            code, ErrorCategory.EXTERNAL_API, severity, context, http_status,
        )

    @property
    def rate_limited(self) -> bool:
        return (
            self.status_code == RATE_LIMIT_STATUS
            or self.service_code == RATE_LIMIT_SERVICE_CODE
        )
