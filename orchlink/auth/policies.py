"""
Policies - the authorization gate every request passes through.

Design:
- `PathPolicy` classifies a (method, path) pair as public, session or admin
- `AuthorizationGate` is the one middleware that enforces it
- On success the verified identity is attached to `request.state.auth`
- Handlers never inspect tokens or compare role strings themselves

Failure responses:
- no token / bad token  -> 401 JSON for /api paths, redirect to /login otherwise;
                           a bad token is also scrubbed from the client
- valid token, not admin -> 403 JSON, cookie left alone
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from orchlink.auth.context import AuthContext
from orchlink.auth.jwt import TokenService
from orchlink.auth.session import clear_session_cookie, get_session_token
from orchlink.config import Settings
from orchlink.core.errors import AuthenticationError, AuthorizationError, ErrorCode, OrchLinkError

logger = logging.getLogger(__name__)


# =============================================================================
# Path classification
# =============================================================================


class Access(str, Enum):
    """What a path requires."""

    PUBLIC = "public"
    SESSION = "session"
    ADMIN = "admin"


MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

LOGIN_PAGE = "/login"


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


@dataclass(frozen=True)
class PathPolicy:
    """
    Static routing rules for the gate.

    Precedence: public, then admin, then session (the default).
    """

    public_paths: frozenset[str] = frozenset({
        LOGIN_PAGE,
        "/api/auth/login",
        "/api/auth/verify",
        "/health",
        "/favicon.ico",
    })
    public_prefixes: tuple[str, ...] = ("/static",)

    # Administrative pages, any method.
    admin_prefixes: tuple[str, ...] = ("/admin",)

    # Resource APIs: readable with any session, writable by admins only.
    resource_prefixes: tuple[str, ...] = (
        "/api/concerts",
        "/api/attendance",
        "/api/scores",
        "/api/practices",
        "/api/contact",
    )

    api_prefix: str = "/api"

    def classify(self, method: str, path: str) -> Access:
        if path in self.public_paths or any(_under(path, p) for p in self.public_prefixes):
            return Access.PUBLIC
        if any(_under(path, p) for p in self.admin_prefixes):
            return Access.ADMIN
        if method.upper() in MUTATING_METHODS and any(_under(path, p) for p in self.resource_prefixes):
            return Access.ADMIN
        return Access.SESSION

    def is_api(self, path: str) -> bool:
        return _under(path, self.api_prefix)


# =============================================================================
# The gate
# =============================================================================


class AuthorizationGate(BaseHTTPMiddleware):
    """
    Single choke point for authentication and role checks.

    Stateless: the verified token is the whole session.
    """

    def __init__(
        self,
        app,
        tokens: TokenService,
        settings: Settings,
        policy: PathPolicy | None = None,
    ):
        super().__init__(app)
        self.tokens = tokens
        self.settings = settings
        self.policy = policy or PathPolicy()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        access = self.policy.classify(request.method, path)

        if access is Access.PUBLIC:
            return await call_next(request)

        token = get_session_token(request, self.settings)
        if token is None:
            return self._unauthenticated(request, AuthenticationError("Authentication required"))

        claims = self.tokens.verify(token)
        if claims is None:
            logger.warning(f"Invalid or expired session token on {request.method} {path}; clearing cookie")
            return self._unauthenticated(
                request,
                AuthenticationError("Invalid or expired session", code=ErrorCode.INVALID_SESSION),
            )

        ctx = AuthContext.from_claims(claims)
        if access is Access.ADMIN and not ctx.is_admin:
            logger.warning(f"Denied {ctx.role.value} {ctx.subject_id} on {request.method} {path}")
            return self._error(AuthorizationError())

        request.state.auth = ctx
        return await call_next(request)

    # -------------------------------------------------------------------------

    def _unauthenticated(self, request: Request, error: AuthenticationError) -> Response:
        if self.policy.is_api(request.url.path):
            response = self._error(error)
        else:
            response = RedirectResponse(url=LOGIN_PAGE, status_code=303)
        # A token was presented and rejected: scrub it from the client.
        if error.code is ErrorCode.INVALID_SESSION:
            clear_session_cookie(response, self.settings)
        return response

    @staticmethod
    def _error(error: OrchLinkError) -> JSONResponse:
        return JSONResponse(status_code=error.status_code, content={"error": error.message})
