"""Error Hierarchy — typed, categorized exceptions for all SwapMarket failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation errors are client-input errors, always recoverable by fixing input
    - Conflict errors mean "state changed concurrently, refresh and retry"
    - IllegalTransitionError is never retried automatically
    - StorageError is transient: the whole operation may be retried
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SwapMarketError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - Pure validators return instances of these classes instead of raising;
      the lifecycle engine raises them (ADR: validators stay testable as plain values)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


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
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str | None = None
    transaction_id: str | None = None
    product_id: str | None = None
    user_id: str | None = None
    debug_info: dict[str, Any] | None = None


class SwapMarketError(Exception):
    """Base exception for all SwapMarket errors."""

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

    @property
    def retryable(self) -> bool:
        return self.category in (ErrorCategory.CONFLICT, ErrorCategory.DATABASE)

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "request_id": self.context.request_id,
                    "transaction_id": self.context.transaction_id,
                    "product_id": self.context.product_id,
                    "user_id": self.context.user_id,
                },
            }
        }


# ─── Validation Errors (400) ────────────────────────────────────

class SwapValidationError(SwapMarketError):
    """Client-input error raised before any mutation."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class SelfSwapError(SwapValidationError):
    """Requester owns the product they are asking for."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You cannot request a swap for your own product.",
            "SELF_SWAP", context,
        )


class NotOwnerError(SwapValidationError):
    """Offered product does not belong to the requester."""
    def __init__(self, product_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Product '{product_id}' is not owned by the requester.",
            "NOT_OWNER", context,
        )
        self.product_id = product_id


class ProductUnavailableError(SwapValidationError):
    """Product is unavailable, soft-deleted, or held by an active swap."""
    def __init__(self, product_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Product '{product_id}' is not available for swapping.",
            "PRODUCT_UNAVAILABLE", context,
        )
        self.product_id = product_id


class InvalidReviewError(SwapValidationError):
    """Review payload is malformed (rating out of range, self-review)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "INVALID_REVIEW", context)


class InvalidMessageError(SwapValidationError):
    """Message payload is malformed (empty content, sending to self)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "INVALID_MESSAGE", context)


# ─── Conflict Errors (409) ──────────────────────────────────────

class AlreadyResolvedError(SwapMarketError):
    """Swap changed state concurrently — compare-and-swap missed."""
    def __init__(self, resource_type: str, resource_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"{resource_type} '{resource_id}' was resolved concurrently. Refresh and retry.",
            "ALREADY_RESOLVED", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateReviewError(SwapMarketError):
    """A review already exists for (reviewer, reviewee, product)."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You have already reviewed this user for this product.",
            "DUPLICATE_REVIEW", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Business Rule Errors (422) ─────────────────────────────────

class IllegalTransitionError(SwapMarketError):
    """Requested status change is not an edge of the state machine."""
    def __init__(
        self, resource_type: str, current: str, requested: str,
        reason: str | None = None, context: ErrorContext | None = None,
    ):
        message = f"{resource_type} cannot move from {current} to {requested}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(
            message, "ILLEGAL_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )
        self.current = current
        self.requested = requested


class NotEligibleError(SwapMarketError):
    """Review requested without a completed swap linking the parties."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Reviews require a completed swap between both users for this product.",
            "NOT_ELIGIBLE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 422,
        )


class ResourceNotFoundError(SwapMarketError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (503) ────────────────────────────────

class StorageError(SwapMarketError):
    """Entity store operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
