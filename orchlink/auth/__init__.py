"""
Authentication and authorization.

Design principles:
1. Two roles, one shared password each
2. The signed token in the session cookie is the whole session
3. One gate decides access for every request
4. Handlers only ever see an `AuthContext`
"""

from orchlink.auth.context import AuthContext, get_auth_context
from orchlink.auth.jwt import (
    SessionClaims,
    TokenService,
    authenticate_password,
)
from orchlink.auth.policies import Access, AuthorizationGate, PathPolicy
from orchlink.auth.roles import Role

__all__ = [
    "AuthContext",
    "get_auth_context",
    "SessionClaims",
    "TokenService",
    "authenticate_password",
    "Access",
    "AuthorizationGate",
    "PathPolicy",
    "Role",
]
