# =============================================================================
# Session Token Service
# =============================================================================
#
# Issues and verifies the signed session tokens carried in the session
# cookie:
#   - Token creation (role + optional email, fixed lifetime)
#   - Token validation (signature, expiry, shape)
#   - Shared-password check for the two roles
#
# The token is the whole session: nothing is stored server-side.
#
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import secrets

from pydantic import BaseModel
import jwt

from orchlink.auth.roles import Role
from orchlink.config import Settings
from orchlink.core.errors import ConfigurationError
from orchlink.core.utils import utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================

class SessionClaims(BaseModel):
    """Verified contents of a session token."""
    subject_id: str
    role: Role
    email: str | None = None
    issued_at: datetime
    expires_at: datetime


# =============================================================================
# Token Validation Errors (internal)
# =============================================================================


class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
    pass


# =============================================================================
# Token Service
# =============================================================================


class TokenService:
    """
    Signs and verifies session tokens with a symmetric secret.
    
    Construct once at startup. The secret is read-only afterwards, so a
    single instance is safe to share between concurrent requests.
    """
    
    def __init__(self, secret_key: str, algorithm: str = "HS256", ttl: timedelta = timedelta(hours=24)):
        if not secret_key:
            raise ConfigurationError("JWT_SECRET_KEY is not set; refusing to start")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.ttl = ttl
    
    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(hours=settings.session_ttl_hours),
        )
    
    def issue(self, subject_id: str, role: Role, email: str | None = None, now: datetime | None = None) -> str:
        """Create a signed token that expires `ttl` after issuance."""
        now = now or utc_now()
        payload = {
            "sub": subject_id,
            "role": role.value,
            "iat": now,
            "exp": now + self.ttl,
        }
        if email:
            payload["email"] = email
        
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
    
    def decode(self, token: str) -> SessionClaims:
        """
        Decode and validate a token.
        
        Raises:
            TokenExpiredError: Token has expired
            TokenInvalidError: Bad signature, malformed, or unknown role
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}")
        
        role = Role.parse(payload.get("role"))
        if role is None:
            raise TokenInvalidError(f"Unknown role: {payload.get('role')!r}")
        
        return SessionClaims(
            subject_id=payload["sub"],
            role=role,
            email=payload.get("email"),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    
    def verify(self, token: str | None) -> SessionClaims | None:
        """
        Verify a token.
        
        Returns the claims, or None when the token is missing, expired,
        forged or malformed. Never raises.
        """
        if not token:
            return None
        try:
            return self.decode(token)
        except TokenError as e:
            logger.debug(f"Rejected session token: {e}")
            return None


# =============================================================================
# Password Check
# =============================================================================


def authenticate_password(settings: Settings, password: str, role: Role) -> bool:
    """Check a shared role password. A role without a configured password cannot log in."""
    expected = {
        Role.ADMIN: settings.admin_password,
        Role.VIEWER: settings.viewer_password,
    }.get(role, "")
    if not expected:
        return False
    return secrets.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))
