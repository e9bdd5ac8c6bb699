"""Error taxonomy shared by the gate, the services and the HTTP handlers.

Every error carries a user-safe message. Internal details (tracebacks,
driver messages) are logged server-side and never placed in `message`.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes."""

    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INVALID_SESSION = "INVALID_SESSION"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL = "INTERNAL"


class OrchLinkError(Exception):
    """Base error with code, HTTP status and user-safe message."""

    status_code: int = 500
    default_code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class AuthenticationError(OrchLinkError):
    """Missing, invalid or expired session. The cookie gets cleared."""

    status_code = 401
    default_code = ErrorCode.AUTHENTICATION_REQUIRED


class AuthorizationError(OrchLinkError):
    """Valid session, insufficient role. The cookie is kept."""

    status_code = 403
    default_code = ErrorCode.ADMIN_REQUIRED

    def __init__(self, message: str = "Administrator privileges required") -> None:
        super().__init__(message)


class ValidationError(OrchLinkError):
    """Missing or malformed input."""

    status_code = 400
    default_code = ErrorCode.VALIDATION_FAILED


class NotFoundError(OrchLinkError):
    """Referenced entity does not exist."""

    status_code = 404
    default_code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: str | None = None) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class InternalError(OrchLinkError):
    """Unexpected failure. Detail goes to the log only."""

    status_code = 500
    default_code = ErrorCode.INTERNAL

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""
