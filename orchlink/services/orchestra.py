"""
Orchestra service - all business rules live here.

Handlers call the service; the service calls the repository.

- Parents are checked before any child is written
- Updates are merge-patches: only supplied fields are written to the store
- Every mutation stamps a strictly later `updated_at`
- Concerts are only ever deactivated, never removed
- Absence is raised as NotFoundError so handlers can map it to 404
"""

from __future__ import annotations

from datetime import datetime
import logging

from orchlink.core.errors import NotFoundError, ValidationError
from orchlink.core.models import (
    AttendanceForm,
    AttendanceFormCreate,
    AttendanceFormUpdate,
    Concert,
    ConcertCreate,
    ConcertDetail,
    ConcertUpdate,
    ContactInfo,
    ContactInfoUpdate,
    Practice,
    PracticeCreate,
    PracticeUpdate,
    Score,
    ScoreComment,
    ScoreCreate,
    ScoreUpdate,
)
from orchlink.core.utils import generate_id, touch, utc_now
from orchlink.storage.base import OrchestraRepository

logger = logging.getLogger(__name__)


def check_practice_window(start_time: datetime, end_time: datetime | None) -> None:
    """A practice that has an end must end strictly after it starts."""
    if end_time is not None and end_time <= start_time:
        raise ValidationError("endTime must be after startTime")


class OrchestraService:
    """Operations on concerts and their attendance forms, scores and practices."""

    def __init__(self, repository: OrchestraRepository) -> None:
        self._repo = repository

    # =========================================================================
    # Concerts
    # =========================================================================

    async def list_concerts(self, active_only: bool = False) -> list[Concert]:
        return await self._repo.list_concerts(active_only=active_only)

    async def get_concert(self, concert_id: str) -> Concert:
        concert = await self._repo.get_concert(concert_id)
        if concert is None:
            raise NotFoundError("Concert", concert_id)
        return concert

    async def get_concert_detail(self, concert_id: str) -> ConcertDetail:
        """Concert plus children. Inactive concerts are still returned."""
        detail = await self._repo.get_concert_detail(concert_id)
        if detail is None:
            raise NotFoundError("Concert", concert_id)
        return detail

    async def create_concert(self, data: ConcertCreate, actor: str | None = None) -> Concert:
        concert = Concert(
            id=generate_id("concert"),
            title=data.title,
            date=data.date,
            venue=data.venue,
            is_active=data.is_active,
            updated_at=utc_now(),
        )
        concert = await self._repo.add_concert(concert)
        logger.info(f"Created concert {concert.id} by {actor}")
        return concert

    async def update_concert(self, data: ConcertUpdate, actor: str | None = None) -> Concert:
        """Patch a concert. Setting isActive=true reactivates it."""
        existing = await self.get_concert(data.target_id)
        changes = data.changes()
        concert = await self._repo.update_concert(existing.id, {
            **changes,
            "updated_at": touch(existing.updated_at),
        })
        if concert is None:
            raise NotFoundError("Concert", existing.id)
        logger.info(f"Updated concert {concert.id} by {actor}: {sorted(changes)}")
        return concert

    async def delete_concert(self, concert_id: str, actor: str | None = None) -> Concert:
        """
        Soft delete: flip isActive to false.

        Children are left untouched. Repeating the call on an inactive
        concert succeeds and leaves it inactive.
        """
        existing = await self.get_concert(concert_id)
        concert = await self._repo.update_concert(existing.id, {
            "is_active": False,
            "updated_at": touch(existing.updated_at),
        })
        if concert is None:
            raise NotFoundError("Concert", concert_id)
        logger.info(f"Deactivated concert {concert.id} by {actor}")
        return concert

    # =========================================================================
    # Attendance forms
    # =========================================================================

    async def list_attendance_forms(self, concert_id: str) -> list[AttendanceForm]:
        await self.get_concert(concert_id)
        return await self._repo.list_attendance_forms(concert_id)

    async def get_attendance_form(self, form_id: str) -> AttendanceForm:
        form = await self._repo.get_attendance_form(form_id)
        if form is None:
            raise NotFoundError("Attendance form", form_id)
        return form

    async def create_attendance_form(self, data: AttendanceFormCreate, actor: str | None = None) -> AttendanceForm:
        await self.get_concert(data.concert_id)
        now = utc_now()
        form = AttendanceForm(
            id=generate_id("form"),
            concert_id=data.concert_id,
            title=data.title,
            url=data.url,
            description=data.description,
            created_at=now,
            updated_at=now,
        )
        form = await self._repo.add_attendance_form(form)
        logger.info(f"Created attendance form {form.id} for concert {form.concert_id} by {actor}")
        return form

    async def update_attendance_form(self, data: AttendanceFormUpdate, actor: str | None = None) -> AttendanceForm:
        existing = await self.get_attendance_form(data.target_id)
        form = await self._repo.update_attendance_form(existing.id, {
            **data.changes(),
            "updated_at": touch(existing.updated_at),
        })
        if form is None:
            raise NotFoundError("Attendance form", existing.id)
        logger.info(f"Updated attendance form {form.id} by {actor}")
        return form

    async def delete_attendance_form(self, form_id: str, actor: str | None = None) -> None:
        if not await self._repo.delete_attendance_form(form_id):
            raise NotFoundError("Attendance form", form_id)
        logger.info(f"Deleted attendance form {form_id} by {actor}")

    # =========================================================================
    # Scores
    # =========================================================================

    async def list_scores(self, concert_id: str) -> list[Score]:
        await self.get_concert(concert_id)
        return await self._repo.list_scores(concert_id)

    async def get_score(self, score_id: str) -> Score:
        score = await self._repo.get_score(score_id)
        if score is None:
            raise NotFoundError("Score", score_id)
        return score

    async def create_score(self, data: ScoreCreate, actor: str | None = None) -> Score:
        await self.get_concert(data.concert_id)
        now = utc_now()
        score = Score(
            id=generate_id("score"),
            concert_id=data.concert_id,
            title=data.title,
            url=data.url,
            is_valid=True,
            created_at=now,
            updated_at=now,
        )
        score = await self._repo.add_score(score)
        logger.info(f"Created score {score.id} for concert {score.concert_id} by {actor}")
        return score

    async def update_score(self, data: ScoreUpdate, actor: str | None = None) -> Score:
        """
        Patch a score and, when `comment` is non-blank, append it to the
        history in the same write.
        """
        existing = await self.get_score(data.target_id)

        comment = None
        content = (data.comment or "").strip()
        if content:
            latest = existing.comments[0].created_at if existing.comments else None
            comment = ScoreComment(
                id=generate_id("comment"),
                score_id=existing.id,
                content=content,
                created_at=touch(latest),
            )

        score = await self._repo.update_score(
            existing.id,
            {**data.changes(), "updated_at": touch(existing.updated_at)},
            comment=comment,
        )
        if score is None:
            raise NotFoundError("Score", existing.id)
        logger.info(f"Updated score {score.id} by {actor} (comment added: {comment is not None})")
        return score

    async def delete_score(self, score_id: str, actor: str | None = None) -> None:
        if not await self._repo.delete_score(score_id):
            raise NotFoundError("Score", score_id)
        logger.info(f"Deleted score {score_id} by {actor}")

    # =========================================================================
    # Practices
    # =========================================================================

    async def list_practices(self, concert_id: str) -> list[Practice]:
        await self.get_concert(concert_id)
        return await self._repo.list_practices(concert_id)

    async def get_practice(self, practice_id: str) -> Practice:
        practice = await self._repo.get_practice(practice_id)
        if practice is None:
            raise NotFoundError("Practice", practice_id)
        return practice

    async def create_practice(self, data: PracticeCreate, actor: str | None = None) -> Practice:
        check_practice_window(data.start_time, data.end_time)
        await self.get_concert(data.concert_id)
        now = utc_now()
        practice = Practice(
            id=generate_id("practice"),
            **data.model_dump(),
            created_at=now,
            updated_at=now,
        )
        practice = await self._repo.add_practice(practice)
        logger.info(f"Created practice {practice.id} for concert {practice.concert_id} by {actor}")
        return practice

    async def update_practice(self, data: PracticeUpdate, actor: str | None = None) -> Practice:
        existing = await self.get_practice(data.target_id)
        changes = data.changes()
        # Checked on the merged record: moving only one end can break the window.
        merged = existing.model_copy(update=changes)
        check_practice_window(merged.start_time, merged.end_time)
        practice = await self._repo.update_practice(existing.id, {
            **changes,
            "updated_at": touch(existing.updated_at),
        })
        if practice is None:
            raise NotFoundError("Practice", existing.id)
        logger.info(f"Updated practice {practice.id} by {actor}")
        return practice

    async def delete_practice(self, practice_id: str, actor: str | None = None) -> None:
        if not await self._repo.delete_practice(practice_id):
            raise NotFoundError("Practice", practice_id)
        logger.info(f"Deleted practice {practice_id} by {actor}")

    # =========================================================================
    # Contact info
    # =========================================================================

    async def get_contact_info(self) -> ContactInfo:
        contact = await self._repo.get_contact_info()
        if contact is None:
            raise NotFoundError("Contact info")
        return contact

    async def update_contact_info(self, data: ContactInfoUpdate, actor: str | None = None) -> ContactInfo:
        """Patch the contact record, creating it on first write."""
        existing = await self._repo.get_contact_info()
        if existing is None:
            if data.email is None or data.description is None:
                raise ValidationError("email and description are required")
            contact = await self._repo.add_contact_info(ContactInfo(
                id=generate_id("contact"),
                email=data.email,
                description=data.description,
                updated_at=utc_now(),
            ))
        else:
            contact = await self._repo.update_contact_info(existing.id, {
                **data.changes(),
                "updated_at": touch(existing.updated_at),
            })
            if contact is None:
                raise NotFoundError("Contact info", existing.id)
        logger.info(f"Updated contact info {contact.id} by {actor}")
        return contact
