"""
Shared utility functions for orchlink.

This module contains common utilities used across the codebase.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.
    
    Args:
        prefix: Optional prefix (e.g., "concert", "score", "practice")
        
    Returns:
        A unique ID like "concert_a1b2c3d4e5f6a7b8"
    """
    uid = uuid.uuid4().hex[:16]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def touch(previous: datetime | None = None) -> datetime:
    """
    Timestamp for a mutation.
    
    Always strictly later than `previous`, even when the clock has not
    advanced since the last write.
    """
    now = utc_now()
    if previous is not None and now <= ensure_utc(previous):
        return ensure_utc(previous) + timedelta(microseconds=1)
    return now
