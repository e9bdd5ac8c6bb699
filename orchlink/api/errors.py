"""
Error mapping at the HTTP boundary.

Every error response is `{"error": "<one human-readable message>"}`.

- `OrchLinkError` subclasses map to their own status
- request validation failures (bad JSON, missing fields, unparseable
  dates, malformed URLs) become 400
- anything else raised inside a route is logged with its traceback and
  answered with a generic 500; Sentry's Starlette integration reports the
  500 (with the original exception as its cause)
"""

from __future__ import annotations

from collections.abc import Callable
import logging

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException

from orchlink.auth.session import clear_session_cookie
from orchlink.core.errors import AuthenticationError, ErrorCode, InternalError, OrchLinkError

logger = logging.getLogger(__name__)


class BoundaryRoute(APIRoute):
    """
    Route class that turns unexpected exceptions into InternalError.

    Expected errors pass through untouched so their own handlers apply.
    """

    def get_route_handler(self) -> Callable:
        original = super().get_route_handler()

        async def handler(request: Request) -> Response:
            try:
                return await original(request)
            except (OrchLinkError, HTTPException, RequestValidationError):
                raise
            except Exception as e:
                logger.exception(f"Unhandled error on {request.method} {request.url.path}")
                raise InternalError() from e

        return handler


def format_validation_error(exc: RequestValidationError) -> str:
    """First validation problem as `field: reason`."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Request body is not valid JSON"
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    message = str(first.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{'.'.join(location)}: {message}" if location else message


async def orchlink_error_handler(request: Request, exc: OrchLinkError) -> JSONResponse:
    response = JSONResponse(status_code=exc.status_code, content={"error": exc.message})
    # A rejected password says nothing about the session the caller already holds.
    if isinstance(exc, AuthenticationError) and exc.code is not ErrorCode.INVALID_CREDENTIALS:
        clear_session_cookie(response, request.app.state.settings)
    return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": format_validation_error(exc)})


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrchLinkError, orchlink_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
