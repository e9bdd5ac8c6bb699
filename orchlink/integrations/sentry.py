# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   Set SENTRY_DSN in the environment or .env
#
# Usage:
#   init_sentry(settings) is called from the app lifespan. Unexpected route
#   errors become 500s, which the Starlette integration reports once.
#
# =============================================================================

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration, ignore_logger
from sentry_sdk.integrations.starlette import StarletteIntegration

from orchlink.config import Settings

logger = logging.getLogger(__name__)

# Never forwarded: they carry the session token.
SENSITIVE_HEADERS = ("authorization", "cookie", "set-cookie")

# Its 500s are already reported by the Starlette integration.
BOUNDARY_LOGGER = "orchlink.api.errors"


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    if not settings.sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        send_default_pii=False,
        before_send=_filter_events,
        before_send_transaction=_filter_transactions,
    )
    ignore_logger(BOUNDARY_LOGGER)

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _filter_events(event: dict, hint: dict) -> dict | None:
    """Scrub session material from request data."""
    request = event.get("request")
    if request and "headers" in request:
        headers = request["headers"]
        for key in list(headers.keys()):
            if key.lower() in SENSITIVE_HEADERS:
                headers[key] = "[Filtered]"
    if request and "cookies" in request:
        request["cookies"] = "[Filtered]"
    return event


def _filter_transactions(event: dict, hint: dict) -> dict | None:
    """Filter out noisy transactions."""
    transaction = event.get("transaction", "")
    if transaction in ("/health",):
        return None
    if transaction.startswith("/static"):
        return None
    return event

