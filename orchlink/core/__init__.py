"""Core models, errors and helpers shared by every layer."""

from orchlink.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    InternalError,
    NotFoundError,
    OrchLinkError,
    ValidationError,
)
from orchlink.core.utils import generate_id, touch, utc_now

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "InternalError",
    "NotFoundError",
    "OrchLinkError",
    "ValidationError",
    "generate_id",
    "touch",
    "utc_now",
]
