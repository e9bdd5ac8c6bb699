"""
Session cookie transport.

The token travels in a single httpOnly cookie scoped to the whole site.
"""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

from orchlink.config import Settings


def get_session_token(request: Request, settings: Settings) -> str | None:
    """Token from the session cookie, or None."""
    return request.cookies.get(settings.session_cookie_name) or None


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="strict",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Instruct the client to drop the session cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="strict",
    )
