"""Error Hierarchy — typed, categorized exceptions for every failure mode of the service.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - No error carries an HTTP status: the router owns the category -> status table
    - to_response() produces the stable REST envelope (no timestamps, no internals)
    - Each error kind has exactly one terminal handling path:
        ConstructionError  -> raised synchronously from start()/run()
        DomainError        -> router exception handler (request-scoped)
        TransportError     -> request tracking middleware (connection dropped)
        ShutdownTimeoutError -> ShutdownReport.error (process still reaches STOPPED)

Design Decisions:
    - Single hierarchy with EchoServiceError base: one envelope shape everywhere
    - ErrorContext kept out of to_response(): identical errors give identical bodies
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """How bad it is; drives the log level and the envelope's severity field."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """What kind of failure; the router maps domain categories to a status."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATA_ACCESS = "data_access"
    CONSTRUCTION = "construction"
    TRANSPORT = "transport"
    SHUTDOWN = "shutdown"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where the error happened, for logs only (never serialized to clients)."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    component: str | None = None
    path: str | None = None
    debug_info: dict[str, Any] | None = None


class EchoServiceError(Exception):
    """Base exception for all service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to the standardized REST error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
            }
        }


# ─── Domain Errors (request-scoped) ─────────────────────────────

class DomainError(EchoServiceError):
    """Recoverable, request-scoped error raised by a capability."""


class InvalidInputError(DomainError):
    """Capability input failed validation."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.field = field


class ResourceNotFoundError(DomainError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )


class StoreUnavailableError(DomainError):
    """Data access operation failed or the store is closed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Store {operation} failed: {message}",
            "STORE_UNAVAILABLE", ErrorCategory.DATA_ACCESS,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation


# ─── Lifecycle / Transport Errors ───────────────────────────────

class ConstructionError(EchoServiceError):
    """A dependency failed to initialize; startup is aborted."""
    def __init__(self, message: str, component: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.component = component
        super().__init__(
            f"Failed to construct {component}: {message}",
            "CONSTRUCTION_FAILED", ErrorCategory.CONSTRUCTION,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.component = component


class TransportError(EchoServiceError):
    """Connection-level failure; only the affected connection is dropped."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "TRANSPORT_ERROR", ErrorCategory.TRANSPORT,
            ErrorSeverity.WARNING, context,
        )


class ShutdownTimeoutError(EchoServiceError):
    """Requests were still in flight when the drain deadline passed."""
    def __init__(self, abandoned: int, deadline_seconds: float, context: ErrorContext | None = None):
        super().__init__(
            f"{abandoned} request(s) abandoned after {deadline_seconds}s drain deadline",
            "SHUTDOWN_TIMEOUT", ErrorCategory.SHUTDOWN,
            ErrorSeverity.WARNING, context,
        )
        self.abandoned = abandoned
        self.deadline_seconds = deadline_seconds


class IllegalTransitionError(RuntimeError):
    """Lifecycle state machine was driven along an edge it does not have."""
