"""Relational schema for the SQL repository."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.orm import declarative_base

from orchlink.core.utils import ensure_utc

Base = declarative_base()

ID_LENGTH = 64


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetimes on every backend.

    Values are stored as UTC. SQLite has no zone support, so there they are
    written naive and re-tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = ensure_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return ensure_utc(value)


class ConcertRow(Base):
    __tablename__ = "concerts"

    id = Column(String(ID_LENGTH), primary_key=True)
    title = Column(String(255), nullable=False)
    date = Column(UTCDateTime, nullable=False)
    venue = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index("ix_concerts_active_updated", "is_active", "updated_at"),
    )


class AttendanceFormRow(Base):
    __tablename__ = "attendance_forms"

    id = Column(String(ID_LENGTH), primary_key=True)
    concert_id = Column(String(ID_LENGTH), ForeignKey("concerts.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    url = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)


class ScoreRow(Base):
    __tablename__ = "scores"

    id = Column(String(ID_LENGTH), primary_key=True)
    concert_id = Column(String(ID_LENGTH), ForeignKey("concerts.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    url = Column(Text, nullable=False)
    is_valid = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)


class ScoreCommentRow(Base):
    __tablename__ = "score_comments"

    id = Column(String(ID_LENGTH), primary_key=True)
    score_id = Column(
        String(ID_LENGTH),
        ForeignKey("scores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=False)
    created_at = Column(UTCDateTime, nullable=False)


class PracticeRow(Base):
    __tablename__ = "practices"

    id = Column(String(ID_LENGTH), primary_key=True)
    concert_id = Column(String(ID_LENGTH), ForeignKey("concerts.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=True)
    venue = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    items = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    memo = Column(Text, nullable=True)
    audio_url = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)


class ContactInfoRow(Base):
    __tablename__ = "contact_info"

    id = Column(String(ID_LENGTH), primary_key=True)
    email = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False, index=True)
