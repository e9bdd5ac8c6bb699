"""
Storage abstraction layer.

All persistence goes through `OrchestraRepository`. Two implementations
exist behind it:

- `SqlRepository` (storage/sql.py) - the production store, SQLAlchemy async
- `InMemoryRepository` (storage/local.py) - a test double

Lifecycle: construct once per process, `await open()` at startup, pass the
instance to the services, `await close()` at shutdown.

New entities are inserted whole. Updates write only the columns they are
given, so concurrent patches to different fields both land. Reads come
back in display order. The repository does not validate input; absence is
reported as None / False, never raised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from orchlink.core.models import (
    AttendanceForm,
    Concert,
    ConcertDetail,
    ContactInfo,
    Practice,
    Score,
    ScoreComment,
)


class OrchestraRepository(ABC):
    """Persistence for concerts and everything that hangs off them."""

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def open(self) -> None:
        """Acquire connections / create schema."""
        pass

    async def close(self) -> None:
        """Release connections."""
        pass

    # =========================================================================
    # Concerts
    # =========================================================================

    @abstractmethod
    async def list_concerts(self, active_only: bool = False) -> list[Concert]:
        """Concerts, most recently updated first."""
        pass

    @abstractmethod
    async def get_concert(self, concert_id: str) -> Concert | None:
        """A concert by ID regardless of isActive."""
        pass

    @abstractmethod
    async def get_concert_detail(self, concert_id: str) -> ConcertDetail | None:
        """
        A concert with its children:
        attendance forms newest first, scores most recently updated first
        (each with comments newest first), practices earliest start first.
        """
        pass

    @abstractmethod
    async def add_concert(self, concert: Concert) -> Concert:
        """Insert a new concert."""
        pass

    @abstractmethod
    async def update_concert(self, concert_id: str, values: dict[str, Any]) -> Concert | None:
        """
        Write only `values` to an existing concert and return the stored row.

        None when the concert does not exist.
        """
        pass

    # =========================================================================
    # Attendance forms
    # =========================================================================

    @abstractmethod
    async def list_attendance_forms(self, concert_id: str) -> list[AttendanceForm]:
        """Forms of a concert, newest first."""
        pass

    @abstractmethod
    async def get_attendance_form(self, form_id: str) -> AttendanceForm | None:
        pass

    @abstractmethod
    async def add_attendance_form(self, form: AttendanceForm) -> AttendanceForm:
        pass

    @abstractmethod
    async def update_attendance_form(self, form_id: str, values: dict[str, Any]) -> AttendanceForm | None:
        pass

    @abstractmethod
    async def delete_attendance_form(self, form_id: str) -> bool:
        """Physically remove a form. False if it did not exist."""
        pass

    # =========================================================================
    # Scores
    # =========================================================================

    @abstractmethod
    async def list_scores(self, concert_id: str) -> list[Score]:
        """Scores of a concert with comments, most recently updated first."""
        pass

    @abstractmethod
    async def get_score(self, score_id: str) -> Score | None:
        """A score with its comments newest first."""
        pass

    @abstractmethod
    async def add_score(self, score: Score) -> Score:
        """Insert a new score. `score.comments` is ignored."""
        pass

    @abstractmethod
    async def update_score(
        self,
        score_id: str,
        values: dict[str, Any],
        comment: ScoreComment | None = None,
    ) -> Score | None:
        """
        Write `values` to an existing score and append `comment` in the
        same transaction. History only ever grows through `comment`.

        None (and nothing written) when the score does not exist.
        """
        pass

    @abstractmethod
    async def delete_score(self, score_id: str) -> bool:
        """Physically remove a score and its comments. False if absent."""
        pass

    # =========================================================================
    # Practices
    # =========================================================================

    @abstractmethod
    async def list_practices(self, concert_id: str) -> list[Practice]:
        """Practices of a concert, earliest start first."""
        pass

    @abstractmethod
    async def get_practice(self, practice_id: str) -> Practice | None:
        pass

    @abstractmethod
    async def add_practice(self, practice: Practice) -> Practice:
        pass

    @abstractmethod
    async def update_practice(self, practice_id: str, values: dict[str, Any]) -> Practice | None:
        pass

    @abstractmethod
    async def delete_practice(self, practice_id: str) -> bool:
        pass

    # =========================================================================
    # Contact info
    # =========================================================================

    @abstractmethod
    async def get_contact_info(self) -> ContactInfo | None:
        """The most recently updated contact record."""
        pass

    @abstractmethod
    async def add_contact_info(self, contact: ContactInfo) -> ContactInfo:
        pass

    @abstractmethod
    async def update_contact_info(self, contact_id: str, values: dict[str, Any]) -> ContactInfo | None:
        pass
