"""Error Hierarchy — typed, categorized exceptions for all SoundLike failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation and authorization errors are raised before any mutation
    - TransactionError is only raised after the transaction was rolled back
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SoundLikeError base: FastAPI global handler catches all
    - Cleanup failures are NOT exceptions: post-commit disk/mail problems are logged
      warnings and never reach the caller
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
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    STORAGE = "storage"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_uid: str | None = None
    track_id: int | None = None
    debug_info: dict[str, Any] | None = None


class SoundLikeError(Exception):
    """Base exception for all SoundLike errors."""

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
            }
        }


# ─── Request Errors (400-level) ─────────────────────────────────

class ValidationError(SoundLikeError):
    """Bad input — size, type, length, or required field."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class AuthenticationError(SoundLikeError):
    """Missing or invalid bearer token."""
    def __init__(self, message: str = "Authentication required", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class EmailNotVerifiedError(SoundLikeError):
    """Write attempted by an identity whose e-mail is not verified."""
    def __init__(self, action: str, context: ErrorContext | None = None):
        super().__init__(
            f"Email verification is required to {action}.",
            "EMAIL_NOT_VERIFIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.action = action


class AuthorizationError(SoundLikeError):
    """Caller is not the owner of the resource."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(SoundLikeError):
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


class DisplayNameTakenError(SoundLikeError):
    """Display name already stored on another uploader's tracks."""
    def __init__(self, display_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Display name '{display_name}' is already taken.",
            "DISPLAY_NAME_TAKEN", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.display_name = display_name


# ─── Infrastructure Errors (500-level) ──────────────────────────

class TransactionError(SoundLikeError):
    """Store-level failure mid-transaction. Always raised after rollback."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "TRANSACTION_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation


class StorageError(SoundLikeError):
    """Blob store write/delete failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation


class IdentityProviderError(SoundLikeError):
    """Identity provider call (lookup, profile update) failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Identity provider {operation} failed: {message}",
            "IDENTITY_PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.operation = operation


class MailDeliveryError(SoundLikeError):
    """Outbound mail transport failed. Never surfaced to HTTP callers."""
    def __init__(self, message: str, recipient: str, context: ErrorContext | None = None):
        super().__init__(
            f"Mail delivery to {recipient} failed: {message}",
            "MAIL_DELIVERY_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, context, 502,
        )
        self.recipient = recipient
