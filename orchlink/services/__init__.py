"""Business rules."""

from orchlink.services.orchestra import OrchestraService, check_practice_window

__all__ = ["OrchestraService", "check_practice_window"]
