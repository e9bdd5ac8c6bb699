"""
Auth context - who is making this request.

The gate builds one per request from verified claims and stores it on
`request.state.auth`. Route handlers receive it through
`Depends(get_auth_context)`.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from orchlink.auth.jwt import SessionClaims
from orchlink.auth.roles import Role
from orchlink.core.errors import AuthenticationError


@dataclass(frozen=True)
class AuthContext:
    """
    Verified identity for a request.
    
    Usage in routes:
        async def my_route(ctx: AuthContext = Depends(get_auth_context)):
            logger.info(f"{ctx.subject_id} did something")
    """
    
    subject_id: str
    role: Role
    email: str | None = None
    
    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
    
    @classmethod
    def from_claims(cls, claims: SessionClaims) -> AuthContext:
        return cls(subject_id=claims.subject_id, role=claims.role, email=claims.email)


def get_auth_context(request: Request) -> AuthContext:
    """
    FastAPI dependency returning the context attached by the gate.
    
    Raises AuthenticationError if the route was reached without passing
    through the gate (a public path wired to a protected handler).
    """
    ctx = getattr(request.state, "auth", None)
    if ctx is None:
        raise AuthenticationError("Authentication required")
    return ctx
