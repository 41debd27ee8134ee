"""Error Hierarchy — typed, categorized exceptions for all BookSwap failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with BookSwapError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - error_from_violation bridges pure-core error dicts to typed exceptions (one table, no string sniffing)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone
from uuid import UUID


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    swap_id: UUID | None = None
    actor_id: UUID | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class BookSwapError(Exception):
    """Base exception for all BookSwap errors."""

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
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "swap_id": _str_or_none(self.context.swap_id),
                    "actor_id": _str_or_none(self.context.actor_id),
                },
            }
        }


def _str_or_none(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(BookSwapError):
    """Input failed a business validation rule (e.g. rating outside 1–5)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class AuthenticationError(BookSwapError):
    """Request carries no usable actor identity."""
    def __init__(self, message: str = "Authentication required", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(BookSwapError):
    """Actor is not permitted to perform this action on this swap."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, context, 403,
        )


class ResourceNotFoundError(BookSwapError):
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


class InvalidTransitionError(BookSwapError):
    """Current status does not allow the requested move."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class NotAcceptedError(BookSwapError):
    """Completion attempted on a swap that is not ACCEPTED."""
    def __init__(self, message: str = "Only accepted swaps can be completed", context: ErrorContext | None = None):
        super().__init__(
            message, "NOT_ACCEPTED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class AlreadyCompletedError(BookSwapError):
    """Actor already confirmed their side of the swap."""
    def __init__(self, message: str = "You have already marked this swap as completed", context: ErrorContext | None = None):
        super().__init__(
            message, "ALREADY_COMPLETED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
        )


class BookNotAvailableError(BookSwapError):
    """Book is not currently listed as available."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "NOT_AVAILABLE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class OwnBookError(BookSwapError):
    """Requester attempted to request their own book."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You cannot request a swap for your own book",
            "OWN_BOOK", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class ConcurrencyError(BookSwapError):
    """Concurrent modification detected — conditional write matched zero rows."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class SwapInvariantError(BookSwapError):
    """Persisted row violates a swap invariant — data corruption, never user error."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SWAP_INVARIANT_VIOLATED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class DatabaseError(BookSwapError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


# ─── Violation → Exception ──────────────────────────────────────

_VIOLATION_ERRORS = {
    "FORBIDDEN": ForbiddenError,
    "INVALID_TRANSITION": InvalidTransitionError,
    "NOT_ACCEPTED": NotAcceptedError,
    "ALREADY_COMPLETED": AlreadyCompletedError,
    "NOT_AVAILABLE": BookNotAvailableError,
}


def error_from_violation(
    violation: dict, context: ErrorContext | None = None,
) -> BookSwapError:
    """Map a pure-core error dict to its typed exception."""
    code = violation["error_code"]
    if code == "VALIDATION_ERROR":
        return ValidationError(
            violation["message"], violation.get("field", ""), context,
        )
    if code == "OWN_BOOK":
        return OwnBookError(context)
    error_cls = _VIOLATION_ERRORS.get(code)
    if error_cls is None:
        raise KeyError(f"Unmapped violation code: {code}")
    return error_cls(violation["message"], context)
