"""
SQL repository (production).

SQLAlchemy async engine over any supported URL; SQLite via aiosqlite by
default, PostgreSQL via asyncpg in deployment. One engine per process,
created in `open()` and disposed in `close()`.
"""

from __future__ import annotations

from collections import defaultdict
import logging
from typing import Any

from sqlalchemy import delete, event, select, update
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

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
from orchlink.storage.tables import (
    AttendanceFormRow,
    Base,
    ConcertRow,
    ContactInfoRow,
    PracticeRow,
    ScoreCommentRow,
    ScoreRow,
)

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SqlRepository(OrchestraRepository):
    """Repository backed by a relational database."""

    def __init__(self, database_url: str, timeout_seconds: float = 5.0, echo: bool = False):
        self.database_url = database_url
        self.timeout_seconds = timeout_seconds
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _engine_options(self) -> dict:
        options: dict = {
            "echo": self.echo,
            "connect_args": {"timeout": self.timeout_seconds},
        }
        if self.is_sqlite:
            if ":memory:" in self.database_url or self.database_url.rstrip("/").endswith(":"):
                # One shared connection, otherwise every session sees an empty DB.
                options["poolclass"] = StaticPool
        else:
            options.update(pool_pre_ping=True, pool_timeout=self.timeout_seconds)
        return options

    async def open(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.database_url, **self._engine_options())
        if self.is_sqlite:
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"SQL repository opened ({self._engine.url.render_as_string(hide_password=True)})")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("SQL repository closed")
        self._engine = None
        self._sessions = None

    def _session(self) -> AsyncSession:
        if self._sessions is None:
            raise RuntimeError("SqlRepository used before open()")
        return self._sessions()

    async def _insert(self, row) -> None:
        async with self._session() as session, session.begin():
            session.add(row)

    @staticmethod
    async def _update(session: AsyncSession, table, row_id: str, values: dict[str, Any]) -> bool:
        """Column-level UPDATE of one row. False when the row is gone."""
        result = await session.execute(
            update(table)
            .where(table.id == row_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def _update_and_get(self, table, row_id: str, values: dict[str, Any]):
        async with self._session() as session:
            async with session.begin():
                if not await self._update(session, table, row_id, values):
                    return None
            return await session.get(table, row_id)

    # =========================================================================
    # Concerts
    # =========================================================================

    async def list_concerts(self, active_only: bool = False) -> list[Concert]:
        query = select(ConcertRow).order_by(ConcertRow.updated_at.desc())
        if active_only:
            query = query.where(ConcertRow.is_active.is_(True))
        async with self._session() as session:
            rows = (await session.scalars(query)).all()
        return [Concert.model_validate(row) for row in rows]

    async def get_concert(self, concert_id: str) -> Concert | None:
        async with self._session() as session:
            row = await session.get(ConcertRow, concert_id)
        return Concert.model_validate(row) if row else None

    async def get_concert_detail(self, concert_id: str) -> ConcertDetail | None:
        async with self._session() as session:
            row = await session.get(ConcertRow, concert_id)
            if row is None:
                return None

            forms = (await session.scalars(
                select(AttendanceFormRow)
                .where(AttendanceFormRow.concert_id == concert_id)
                .order_by(AttendanceFormRow.created_at.desc())
            )).all()
            scores = await self._load_scores(
                session,
                select(ScoreRow)
                .where(ScoreRow.concert_id == concert_id)
                .order_by(ScoreRow.updated_at.desc()),
            )
            practices = (await session.scalars(
                select(PracticeRow)
                .where(PracticeRow.concert_id == concert_id)
                .order_by(PracticeRow.start_time.asc())
            )).all()

        return ConcertDetail(
            concert=Concert.model_validate(row),
            attendance_forms=[AttendanceForm.model_validate(f) for f in forms],
            scores=scores,
            practices=[Practice.model_validate(p) for p in practices],
        )

    async def add_concert(self, concert: Concert) -> Concert:
        await self._insert(ConcertRow(**concert.model_dump()))
        return concert

    async def update_concert(self, concert_id: str, values: dict[str, Any]) -> Concert | None:
        row = await self._update_and_get(ConcertRow, concert_id, values)
        return Concert.model_validate(row) if row else None

    # =========================================================================
    # Attendance forms
    # =========================================================================

    async def list_attendance_forms(self, concert_id: str) -> list[AttendanceForm]:
        async with self._session() as session:
            rows = (await session.scalars(
                select(AttendanceFormRow)
                .where(AttendanceFormRow.concert_id == concert_id)
                .order_by(AttendanceFormRow.created_at.desc())
            )).all()
        return [AttendanceForm.model_validate(row) for row in rows]

    async def get_attendance_form(self, form_id: str) -> AttendanceForm | None:
        async with self._session() as session:
            row = await session.get(AttendanceFormRow, form_id)
        return AttendanceForm.model_validate(row) if row else None

    async def add_attendance_form(self, form: AttendanceForm) -> AttendanceForm:
        await self._insert(AttendanceFormRow(**form.model_dump()))
        return form

    async def update_attendance_form(self, form_id: str, values: dict[str, Any]) -> AttendanceForm | None:
        row = await self._update_and_get(AttendanceFormRow, form_id, values)
        return AttendanceForm.model_validate(row) if row else None

    async def delete_attendance_form(self, form_id: str) -> bool:
        async with self._session() as session, session.begin():
            result = await session.execute(
                delete(AttendanceFormRow).where(AttendanceFormRow.id == form_id)
            )
        return result.rowcount > 0

    # =========================================================================
    # Scores
    # =========================================================================

    async def _load_scores(self, session: AsyncSession, query) -> list[Score]:
        rows = (await session.scalars(query)).all()
        if not rows:
            return []

        comment_rows = (await session.scalars(
            select(ScoreCommentRow)
            .where(ScoreCommentRow.score_id.in_([row.id for row in rows]))
            .order_by(ScoreCommentRow.created_at.desc())
        )).all()
        by_score: dict[str, list[ScoreComment]] = defaultdict(list)
        for comment in comment_rows:
            by_score[comment.score_id].append(ScoreComment.model_validate(comment))

        return [
            Score(
                id=row.id,
                concert_id=row.concert_id,
                title=row.title,
                url=row.url,
                is_valid=row.is_valid,
                created_at=row.created_at,
                updated_at=row.updated_at,
                comments=by_score.get(row.id, []),
            )
            for row in rows
        ]

    async def list_scores(self, concert_id: str) -> list[Score]:
        async with self._session() as session:
            return await self._load_scores(
                session,
                select(ScoreRow)
                .where(ScoreRow.concert_id == concert_id)
                .order_by(ScoreRow.updated_at.desc()),
            )

    async def get_score(self, score_id: str) -> Score | None:
        async with self._session() as session:
            scores = await self._load_scores(session, select(ScoreRow).where(ScoreRow.id == score_id))
        return scores[0] if scores else None

    async def add_score(self, score: Score) -> Score:
        await self._insert(ScoreRow(**score.model_dump(exclude={"comments"})))
        return score.model_copy(update={"comments": []})

    async def update_score(
        self,
        score_id: str,
        values: dict[str, Any],
        comment: ScoreComment | None = None,
    ) -> Score | None:
        async with self._session() as session:
            async with session.begin():
                if not await self._update(session, ScoreRow, score_id, values):
                    return None
                if comment is not None:
                    session.add(ScoreCommentRow(**comment.model_dump()))
            scores = await self._load_scores(session, select(ScoreRow).where(ScoreRow.id == score_id))
        return scores[0] if scores else None

    async def delete_score(self, score_id: str) -> bool:
        async with self._session() as session, session.begin():
            await session.execute(delete(ScoreCommentRow).where(ScoreCommentRow.score_id == score_id))
            result = await session.execute(delete(ScoreRow).where(ScoreRow.id == score_id))
        return result.rowcount > 0

    # =========================================================================
    # Practices
    # =========================================================================

    async def list_practices(self, concert_id: str) -> list[Practice]:
        async with self._session() as session:
            rows = (await session.scalars(
                select(PracticeRow)
                .where(PracticeRow.concert_id == concert_id)
                .order_by(PracticeRow.start_time.asc())
            )).all()
        return [Practice.model_validate(row) for row in rows]

    async def get_practice(self, practice_id: str) -> Practice | None:
        async with self._session() as session:
            row = await session.get(PracticeRow, practice_id)
        return Practice.model_validate(row) if row else None

    async def add_practice(self, practice: Practice) -> Practice:
        await self._insert(PracticeRow(**practice.model_dump()))
        return practice

    async def update_practice(self, practice_id: str, values: dict[str, Any]) -> Practice | None:
        row = await self._update_and_get(PracticeRow, practice_id, values)
        return Practice.model_validate(row) if row else None

    async def delete_practice(self, practice_id: str) -> bool:
        async with self._session() as session, session.begin():
            result = await session.execute(delete(PracticeRow).where(PracticeRow.id == practice_id))
        return result.rowcount > 0

    # =========================================================================
    # Contact info
    # =========================================================================

    async def get_contact_info(self) -> ContactInfo | None:
        async with self._session() as session:
            row = (await session.scalars(
                select(ContactInfoRow).order_by(ContactInfoRow.updated_at.desc()).limit(1)
            )).first()
        return ContactInfo.model_validate(row) if row else None

    async def add_contact_info(self, contact: ContactInfo) -> ContactInfo:
        await self._insert(ContactInfoRow(**contact.model_dump()))
        return contact

    async def update_contact_info(self, contact_id: str, values: dict[str, Any]) -> ContactInfo | None:
        row = await self._update_and_get(ContactInfoRow, contact_id, values)
        return ContactInfo.model_validate(row) if row else None
