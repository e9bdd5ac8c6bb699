"""
Tests for session tokens and role passwords.
"""

from datetime import timedelta

import jwt
import pytest

from orchlink.auth.jwt import (
    TokenExpiredError,
    TokenInvalidError,
    TokenService,
    authenticate_password,
)
from orchlink.auth.roles import Role
from orchlink.core.errors import ConfigurationError
from orchlink.core.utils import utc_now


# =============================================================================
# TokenService
# =============================================================================


class TestTokenService:
    def test_issue_and_verify(self, tokens):
        token = tokens.issue("admin-user", Role.ADMIN, email="admin@orch-link.com")
        claims = tokens.verify(token)

        assert claims is not None
        assert claims.subject_id == "admin-user"
        assert claims.role is Role.ADMIN
        assert claims.email == "admin@orch-link.com"
        assert claims.expires_at - claims.issued_at == timedelta(hours=24)

    def test_viewer_token_has_no_email(self, tokens):
        claims = tokens.verify(tokens.issue("viewer-user", Role.VIEWER))

        assert claims.role is Role.VIEWER
        assert claims.email is None

    def test_expired_token_rejected(self, tokens):
        token = tokens.issue("admin-user", Role.ADMIN, now=utc_now() - timedelta(hours=25))

        assert tokens.verify(token) is None
        with pytest.raises(TokenExpiredError):
            tokens.decode(token)

    def test_wrong_secret_rejected(self, tokens):
        other = TokenService("some-other-secret")
        token = other.issue("admin-user", Role.ADMIN)

        assert tokens.verify(token) is None
        with pytest.raises(TokenInvalidError):
            tokens.decode(token)

    @pytest.mark.parametrize("token", [None, "", "not-a-token", "a.b.c"])
    def test_malformed_token_rejected(self, tokens, token):
        assert tokens.verify(token) is None

    def test_unknown_role_rejected(self, tokens, settings):
        now = utc_now()
        token = jwt.encode(
            {"sub": "x", "role": "superuser", "iat": now, "exp": now + timedelta(hours=1)},
            settings.jwt_secret_key,
            algorithm="HS256",
        )

        assert tokens.verify(token) is None

    def test_missing_subject_rejected(self, tokens, settings):
        now = utc_now()
        token = jwt.encode(
            {"role": "admin", "iat": now, "exp": now + timedelta(hours=1)},
            settings.jwt_secret_key,
            algorithm="HS256",
        )

        assert tokens.verify(token) is None

    def test_empty_secret_refuses_to_start(self):
        with pytest.raises(ConfigurationError):
            TokenService("")


# =============================================================================
# Role passwords
# =============================================================================


class TestAuthenticatePassword:
    def test_correct_passwords(self, settings):
        assert authenticate_password(settings, "admin-pass", Role.ADMIN)
        assert authenticate_password(settings, "viewer-pass", Role.VIEWER)

    def test_passwords_are_per_role(self, settings):
        assert not authenticate_password(settings, "viewer-pass", Role.ADMIN)
        assert not authenticate_password(settings, "admin-pass", Role.VIEWER)

    def test_unconfigured_role_cannot_log_in(self, settings):
        settings = settings.model_copy(update={"viewer_password": ""})

        assert not authenticate_password(settings, "", Role.VIEWER)
        assert not authenticate_password(settings, "anything", Role.VIEWER)
