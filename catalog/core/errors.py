"""Error Hierarchy — typed, categorized exceptions for all catalog failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are reported to the caller and never retried
    - to_response() produces the REST error envelope
    - StoreValidationError is internal: it never reaches a client unmapped

Design Decisions:
    - Single hierarchy with CatalogError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability without coupling to logging framework
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
    AUTHENTICATION = "authentication"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    entity: str | None = None
    invalid_args: dict[str, Any] | None = None


class CatalogError(Exception):
    """Base exception for all catalog errors."""

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
                    "operation": self.context.operation,
                    "entity": self.context.entity,
                    "invalid_args": self.context.invalid_args,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class UnauthorizedError(CatalogError):
    """Protected mutation attempted without a resolved caller identity."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Not authorized", "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidInputError(CatalogError):
    """Required arguments missing or empty."""
    def __init__(
        self, message: str, invalid_args: dict[str, Any],
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.invalid_args = invalid_args
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.invalid_args = invalid_args


class DuplicateTitleError(CatalogError):
    """A book with the same title already exists."""
    def __init__(self, title: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.invalid_args = {"title": title}
        super().__init__(
            "Title must be unique", "DUPLICATE_TITLE", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.title = title


class ValidationFailedError(CatalogError):
    """Store-level constraint violation mapped to a user-facing message."""
    def __init__(
        self, message: str, entity: str, field: str, kind: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity = entity
        super().__init__(
            message, "VALIDATION_FAILED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.entity = entity
        self.field = field
        self.kind = kind


class ResourceNotFoundError(CatalogError):
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


class AuthorNotFoundError(ResourceNotFoundError):
    """Author-scoped read named an author that does not exist."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__("Author", name, context)
        self.name = name


class UsernameTakenError(CatalogError):
    """Username already registered."""
    def __init__(self, username: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.invalid_args = {"username": username}
        super().__init__(
            "Sorry! Username is already taken.", "USERNAME_TAKEN",
            ErrorCategory.CONFLICT, ErrorSeverity.ERROR, ctx, 409,
        )


class InvalidCredentialsError(CatalogError):
    """Login with unknown user or wrong password."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Wrong Credential", "INVALID_CREDENTIALS",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 401,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(CatalogError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


# ─── Store Contract ──────────────────────────────────────────────

class StoreValidationError(Exception):
    """Raised by the entity store when a record violates a field rule.

    errors maps each offending field to its violation kind
    (``required``, ``minlength``, ``unique``).
    """

    def __init__(self, entity: str, errors: dict[str, str]):
        super().__init__(
            f"{entity} validation failed: "
            + ", ".join(f"{f}={k}" for f, k in errors.items())
        )
        self.entity = entity
        self.errors = errors
