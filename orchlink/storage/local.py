"""
In-memory repository.

Same interface and ordering rules as the SQL store, kept in plain dicts.
Used as a test double and for throwaway local runs; nothing survives a
restart.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel

from orchlink.core.models import (
    AttendanceForm,
    Concert,
    ConcertDetail,
    ContactInfo,
    Practice,
    Score,
    ScoreComment,
)
from orchlink.storage.base import OrchestraRepository

M = TypeVar("M", bound=BaseModel)


def _copy(model: M) -> M:
    # Callers must never hold a reference into the store.
    return model.model_copy(deep=True)


def _patch(store: dict[str, M], key: str, values: dict[str, Any]) -> M | None:
    """Apply `values` to the stored record in place of a column UPDATE."""
    current = store.get(key)
    if current is None:
        return None
    store[key] = current.model_copy(deep=True, update=values)
    return _copy(store[key])


class InMemoryRepository(OrchestraRepository):
    """Dict-backed repository."""

    def __init__(self):
        self._concerts: dict[str, Concert] = {}
        self._forms: dict[str, AttendanceForm] = {}
        self._scores: dict[str, Score] = {}
        self._comments: dict[str, ScoreComment] = {}
        self._practices: dict[str, Practice] = {}
        self._contacts: dict[str, ContactInfo] = {}

    # -------------------------------------------------------------------------
    # Concerts
    # -------------------------------------------------------------------------

    async def list_concerts(self, active_only: bool = False) -> list[Concert]:
        concerts = [c for c in self._concerts.values() if c.is_active or not active_only]
        concerts.sort(key=lambda c: c.updated_at, reverse=True)
        return [_copy(c) for c in concerts]

    async def get_concert(self, concert_id: str) -> Concert | None:
        concert = self._concerts.get(concert_id)
        return _copy(concert) if concert else None

    async def get_concert_detail(self, concert_id: str) -> ConcertDetail | None:
        concert = self._concerts.get(concert_id)
        if concert is None:
            return None
        return ConcertDetail(
            concert=_copy(concert),
            attendance_forms=await self.list_attendance_forms(concert_id),
            scores=await self.list_scores(concert_id),
            practices=await self.list_practices(concert_id),
        )

    async def add_concert(self, concert: Concert) -> Concert:
        self._concerts[concert.id] = _copy(concert)
        return _copy(concert)

    async def update_concert(self, concert_id: str, values: dict[str, Any]) -> Concert | None:
        return _patch(self._concerts, concert_id, values)

    # -------------------------------------------------------------------------
    # Attendance forms
    # -------------------------------------------------------------------------

    async def list_attendance_forms(self, concert_id: str) -> list[AttendanceForm]:
        forms = [f for f in self._forms.values() if f.concert_id == concert_id]
        forms.sort(key=lambda f: f.created_at, reverse=True)
        return [_copy(f) for f in forms]

    async def get_attendance_form(self, form_id: str) -> AttendanceForm | None:
        form = self._forms.get(form_id)
        return _copy(form) if form else None

    async def add_attendance_form(self, form: AttendanceForm) -> AttendanceForm:
        self._forms[form.id] = _copy(form)
        return _copy(form)

    async def update_attendance_form(self, form_id: str, values: dict[str, Any]) -> AttendanceForm | None:
        return _patch(self._forms, form_id, values)

    async def delete_attendance_form(self, form_id: str) -> bool:
        return self._forms.pop(form_id, None) is not None

    # -------------------------------------------------------------------------
    # Scores
    # -------------------------------------------------------------------------

    def _with_comments(self, score: Score) -> Score:
        comments = [c for c in self._comments.values() if c.score_id == score.id]
        comments.sort(key=lambda c: c.created_at, reverse=True)
        return score.model_copy(deep=True, update={"comments": [_copy(c) for c in comments]})

    async def list_scores(self, concert_id: str) -> list[Score]:
        scores = [s for s in self._scores.values() if s.concert_id == concert_id]
        scores.sort(key=lambda s: s.updated_at, reverse=True)
        return [self._with_comments(s) for s in scores]

    async def get_score(self, score_id: str) -> Score | None:
        score = self._scores.get(score_id)
        return self._with_comments(score) if score else None

    async def add_score(self, score: Score) -> Score:
        self._scores[score.id] = score.model_copy(deep=True, update={"comments": []})
        return self._with_comments(self._scores[score.id])

    async def update_score(
        self,
        score_id: str,
        values: dict[str, Any],
        comment: ScoreComment | None = None,
    ) -> Score | None:
        if _patch(self._scores, score_id, values) is None:
            return None
        if comment is not None:
            self._comments[comment.id] = _copy(comment)
        return self._with_comments(self._scores[score_id])

    async def delete_score(self, score_id: str) -> bool:
        if self._scores.pop(score_id, None) is None:
            return False
        for comment_id in [c.id for c in self._comments.values() if c.score_id == score_id]:
            del self._comments[comment_id]
        return True

    # -------------------------------------------------------------------------
    # Practices
    # -------------------------------------------------------------------------

    async def list_practices(self, concert_id: str) -> list[Practice]:
        practices = [p for p in self._practices.values() if p.concert_id == concert_id]
        practices.sort(key=lambda p: p.start_time)
        return [_copy(p) for p in practices]

    async def get_practice(self, practice_id: str) -> Practice | None:
        practice = self._practices.get(practice_id)
        return _copy(practice) if practice else None

    async def add_practice(self, practice: Practice) -> Practice:
        self._practices[practice.id] = _copy(practice)
        return _copy(practice)

    async def update_practice(self, practice_id: str, values: dict[str, Any]) -> Practice | None:
        return _patch(self._practices, practice_id, values)

    async def delete_practice(self, practice_id: str) -> bool:
        return self._practices.pop(practice_id, None) is not None

    # -------------------------------------------------------------------------
    # Contact info
    # -------------------------------------------------------------------------

    async def get_contact_info(self) -> ContactInfo | None:
        if not self._contacts:
            return None
        latest = max(self._contacts.values(), key=lambda c: c.updated_at)
        return _copy(latest)

    async def add_contact_info(self, contact: ContactInfo) -> ContactInfo:
        self._contacts[contact.id] = _copy(contact)
        return _copy(contact)

    async def update_contact_info(self, contact_id: str, values: dict[str, Any]) -> ContactInfo | None:
        return _patch(self._contacts, contact_id, values)
