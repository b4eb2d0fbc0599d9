"""Error Hierarchy — typed, categorized exceptions for all scheduler failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Input and invariant errors (400/404/409) are rejections the caller may fix and retry;
      external and database errors (5xx) abort the unit of work with no partial effect
    - to_response() produces the REST envelope used by the global FastAPI handler
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SchedulerError base: one global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - The engine never retries; retry policy belongs to the host or the sweep runner
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
    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    executive_id: str | None = None
    slot_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class SchedulerError(Exception):
    """Base exception for all scheduler errors."""

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
                    "executive_id": self.context.executive_id,
                    "slot_id": self.context.slot_id,
                },
            }
        }


# ─── Input Errors (400) ─────────────────────────────────────────

class InvalidDateFormatError(SchedulerError):
    """Date string does not match YYYY-MM-DD."""
    def __init__(self, value: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid date format: {value}. Use YYYY-MM-DD",
            "INVALID_DATE_FORMAT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.value = value


class InvalidRangeError(SchedulerError):
    """Range start lies after its end, or range parameters are out of bounds."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_RANGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Invariant Violations (404/409) ─────────────────────────────

class DuplicateSlotError(SchedulerError):
    """slot_id already exists in committed state."""
    def __init__(self, slot_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(slot_id=slot_id)
        super().__init__(
            f"Slot {slot_id} is already scheduled",
            "DUPLICATE_SLOT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.slot_id = slot_id


class SlotOverlapError(SchedulerError):
    """Requested range intersects an active slot of the same executive."""
    def __init__(
        self, executive_id: str, conflicting_slot_id: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(executive_id=executive_id)
        super().__init__(
            "Slot overlaps with existing executive schedule",
            "SLOT_OVERLAP", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.executive_id = executive_id
        self.conflicting_slot_id = conflicting_slot_id


class AvailabilityConflictError(SchedulerError):
    """Date marked AVAILABLE while an active slot occupies it."""
    def __init__(
        self, executive_id: str, date: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(executive_id=executive_id)
        super().__init__(
            f"Cannot mark date {date} as AVAILABLE, it is already scheduled",
            "AVAILABILITY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.executive_id = executive_id
        self.date = date


class AlreadyStartedError(SchedulerError):
    """Cancellation requested on or after the slot's start day."""
    def __init__(self, slot_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(slot_id=slot_id)
        super().__init__(
            "Cannot cancel slot that already started",
            "ALREADY_STARTED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.slot_id = slot_id


class SlotNotFoundError(SchedulerError):
    """Referenced slot does not exist."""
    def __init__(self, slot_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(slot_id=slot_id)
        super().__init__(
            f"Slot '{slot_id}' not found",
            "SLOT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.slot_id = slot_id


# ─── Authorization Errors (401/403) — raised by the HTTP shell ──

class AuthenticationError(SchedulerError):
    """Missing or malformed identity headers."""
    def __init__(self, message: str = "Missing or invalid auth headers"):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, None, 401,
        )


class ForbiddenError(SchedulerError):
    """Caller's role may not perform the operation."""
    def __init__(self, message: str):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, None, 403,
        )


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class ExternalProvisioningError(SchedulerError):
    """Meeting provisioning capability failed."""
    def __init__(self, slot_id: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(slot_id=slot_id)
        ctx.user_message = "Meeting provisioning failed, retry later"
        super().__init__(
            f"Meeting provisioning failed for slot {slot_id}: {reason}",
            "EXTERNAL_PROVISIONING_FAILURE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 502,
        )
        self.slot_id = slot_id


class ExternalResolutionError(SchedulerError):
    """Contract resolution capability failed."""
    def __init__(
        self, contract_id: str, reason: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.user_message = "Contract resolution failed, retry later"
        super().__init__(
            f"Contract resolution failed for {contract_id}: {reason}",
            "EXTERNAL_RESOLUTION_FAILURE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 502,
        )
        self.contract_id = contract_id


class DatabaseError(SchedulerError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
