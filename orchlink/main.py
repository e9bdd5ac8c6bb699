"""
orchlink - main entry point.

Configures logging and serves the API with uvicorn:

    orchlink-api
    # or
    uvicorn orchlink.api.app:create_app --factory
"""

from __future__ import annotations

import logging

import uvicorn

from orchlink.config import get_settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logging.getLogger(__name__).info(f"Serving orchlink API on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "orchlink.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
