"""Error Hierarchy — typed, categorized exceptions for all ledger failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are terminal for the request, never retried
    - Infrastructure errors (5xx) never leak driver messages to the client
    - to_response() produces the REST envelope used by every error handler

Design Decisions:
    - Single hierarchy with GoodJobError base: FastAPI global handler catches all
    - ErrorContext as dataclass: carries ids for logging without coupling to the logger
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Ids and debug data attached to an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    good_job_id: int | None = None
    debug_info: dict[str, Any] | None = None


class GoodJobError(Exception):
    """Base exception for all ledger errors."""

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
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "good_job_id": self.context.good_job_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class BusinessRuleError(GoodJobError):
    """A ledger rule rejected the operation."""
    def __init__(
        self,
        message: str,
        code: str = "BUSINESS_RULE_VIOLATION",
        context: ErrorContext | None = None,
        http_status: int = 400,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, http_status,
        )


class AdminOwnershipError(BusinessRuleError):
    """An administrator was about to own or receive a GoodJob."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "ADMIN_CANNOT_OWN", context, 400)


class NotOwnerError(BusinessRuleError):
    """Transfer attempted by someone who is not the current owner."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You only can transfer your own GoodJobs",
            "NOT_GOOD_JOB_OWNER", context, 403,
        )


class UserAlreadyExistsError(BusinessRuleError):
    """User name is already taken."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__("User already exists", "USER_ALREADY_EXISTS", context, 400)
        self.name = name


class ResourceNotFoundError(GoodJobError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class AuthenticationError(GoodJobError):
    """Caller identity is missing, invalid, or the credentials are wrong."""
    def __init__(
        self,
        message: str = "Authentication required",
        code: str = "AUTHENTICATION_REQUIRED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidCredentialsError(AuthenticationError):
    """Unknown user name or wrong password (deliberately indistinguishable)."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Invalid credentials", "INVALID_CREDENTIALS", context)


class PermissionDeniedError(GoodJobError):
    """Caller is authenticated but lacks the required role."""
    def __init__(
        self, message: str = "Admin access required", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "ADMIN_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class ConcurrencyError(GoodJobError):
    """Concurrent modification detected."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class DatabaseError(GoodJobError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
