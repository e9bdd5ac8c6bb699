"""
Storage abstractions.

- OrchestraRepository → the interface the services depend on
- SqlRepository → SQLite (aiosqlite) locally, PostgreSQL in deployment
- InMemoryRepository → tests and throwaway runs
"""

from orchlink.storage.base import OrchestraRepository
from orchlink.storage.local import InMemoryRepository
from orchlink.storage.sql import SqlRepository

__all__ = [
    "OrchestraRepository",
    "InMemoryRepository",
    "SqlRepository",
]
