"""Shared FastAPI dependencies for the resource routers."""

from fastapi import Request

from orchlink.core.errors import ValidationError
from orchlink.services.orchestra import OrchestraService


def get_service(request: Request) -> OrchestraService:
    return request.app.state.service


def require_param(value: str | None, name: str) -> str:
    """Reject a missing or blank query parameter with a 400."""
    if value is None or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()
