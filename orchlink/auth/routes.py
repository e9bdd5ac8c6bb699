# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /api/auth/login   - Check a role password, set the session cookie
#   POST /api/auth/logout  - Drop the session cookie
#   GET  /api/auth/verify  - Introspect the current session
#
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from orchlink.api.errors import BoundaryRoute
from orchlink.auth.context import AuthContext, get_auth_context
from orchlink.auth.jwt import TokenService, authenticate_password
from orchlink.auth.roles import Role, SUBJECT_IDS
from orchlink.auth.session import clear_session_cookie, get_session_token, set_session_cookie
from orchlink.config import Settings
from orchlink.core.errors import AuthenticationError, ErrorCode, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"], route_class=BoundaryRoute)


# =============================================================================
# Dependencies
# =============================================================================


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


# =============================================================================
# Request Models
# =============================================================================

class LoginRequest(BaseModel):
    password: str | None = None
    role: str | None = None


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/login")
async def login(
    data: LoginRequest,
    settings: Settings = Depends(get_app_settings),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Authenticate with a shared role password.
    
    On success the session token is set as an httpOnly cookie; it is never
    returned in the body.
    """
    if not data.password or not data.role:
        raise ValidationError("Password and role are required")
    
    role = Role.parse(data.role)
    if role is None:
        raise ValidationError("Invalid role")
    
    if not authenticate_password(settings, data.password, role):
        logger.warning(f"Failed login attempt for role {role.value}")
        raise AuthenticationError("Incorrect password", code=ErrorCode.INVALID_CREDENTIALS)
    
    email = settings.admin_email if role is Role.ADMIN else None
    token = tokens.issue(SUBJECT_IDS[role], role, email=email)
    
    response = JSONResponse({
        "success": True,
        "user": {"role": role.value, "email": email},
    })
    set_session_cookie(response, token, settings)
    logger.info(f"Login succeeded for role {role.value}")
    return response


@router.get("/verify")
async def verify(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Report whether the caller holds a valid session.
    
    Public so that clients can probe their state; an invalid token is
    scrubbed from the client.
    """
    token = get_session_token(request, settings)
    if token is None:
        return JSONResponse(
            {"authenticated": False, "error": "No session token"},
            status_code=401,
        )
    
    claims = tokens.verify(token)
    if claims is None:
        response = JSONResponse(
            {"authenticated": False, "error": "Invalid or expired session"},
            status_code=401,
        )
        clear_session_cookie(response, settings)
        return response
    
    return {
        "authenticated": True,
        "user": {
            "userId": claims.subject_id,
            "role": claims.role.value,
            "email": claims.email,
        },
    }


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.post("/logout")
async def logout(
    ctx: AuthContext = Depends(get_auth_context),
    settings: Settings = Depends(get_app_settings),
):
    """
    Logout by clearing the cookie.
    
    Tokens are not tracked server-side, so there is nothing else to revoke.
    """
    response = JSONResponse({"success": True, "message": "Logged out"})
    clear_session_cookie(response, settings)
    logger.info(f"Logout for {ctx.subject_id}")
    return response
