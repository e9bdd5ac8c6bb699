"""
Core data models for orchlink.

Two families live here:

- Entities (`Concert`, `AttendanceForm`, `Score`, `ScoreComment`, `Practice`,
  `ContactInfo`) are what the repository stores and the API returns.
- Payloads (`*Create`, `*Update`) are request bodies. They own field-level
  validation: presence, parseable datetimes, URL and email shape.
  Cross-record rules (parent exists, practice window on the merged record)
  are enforced by the service layer.

All models speak camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any, ClassVar

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from orchlink.core.utils import ensure_utc


# =============================================================================
# Field types
# =============================================================================


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    # Validate the shape but keep the caller's exact string.
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError:
        raise ValueError("must be a valid URL") from None
    return value


def _check_email(value: str) -> str:
    if not EMAIL_PATTERN.match(value):
        raise ValueError("must be a valid email address")
    return value


NonEmptyStr = Annotated[str, Field(min_length=1)]
UrlStr = Annotated[str, Field(min_length=1), AfterValidator(_check_url)]
EmailStr = Annotated[str, Field(min_length=1), AfterValidator(_check_email)]
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class DomainModel(BaseModel):
    """Base for stored entities."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_api(self) -> dict[str, Any]:
        """JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Entities
# =============================================================================


class Concert(DomainModel):
    """A performance event. Root of the aggregate; soft-deleted only."""

    id: str
    title: str
    date: datetime
    venue: str
    is_active: bool = True
    updated_at: datetime


class AttendanceForm(DomainModel):
    """Link to an external attendance survey for a concert."""

    id: str
    concert_id: str
    title: str
    url: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class ScoreComment(DomainModel):
    """Immutable entry in a score's change history."""

    id: str
    score_id: str
    content: str
    created_at: datetime


class Score(DomainModel):
    """Link to sheet music, with its comment history newest first."""

    id: str
    concert_id: str
    title: str
    url: str
    is_valid: bool = True
    created_at: datetime
    updated_at: datetime
    comments: list[ScoreComment] = Field(default_factory=list)


class Practice(DomainModel):
    """A rehearsal leading up to a concert."""

    id: str
    concert_id: str
    title: str
    start_time: datetime
    end_time: datetime | None = None
    venue: str
    address: str | None = None
    items: str | None = None
    notes: str | None = None
    memo: str | None = None
    audio_url: str | None = None
    video_url: str | None = None
    created_at: datetime
    updated_at: datetime


class ContactInfo(DomainModel):
    """Where members send questions. Only the latest record is consulted."""

    id: str
    email: str
    description: str
    updated_at: datetime


class ConcertDetail(DomainModel):
    """A concert together with all of its children."""

    concert: Concert
    attendance_forms: list[AttendanceForm] = Field(default_factory=list)
    scores: list[Score] = Field(default_factory=list)
    practices: list[Practice] = Field(default_factory=list)


# =============================================================================
# Request payloads
# =============================================================================


class Payload(BaseModel):
    """Base for request bodies."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class PatchPayload(Payload):
    """
    Merge-patch body.

    Only keys present in the request are applied. An explicit null clears
    an optional field and is rejected for a required one.
    """

    identity_field: ClassVar[str] = ""
    required_fields: ClassVar[frozenset[str]] = frozenset()
    extra_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in sorted(self.required_fields & self.model_fields_set):
            if getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    @property
    def target_id(self) -> str:
        return getattr(self, self.identity_field)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly supplied by the caller, minus the identity."""
        skip = {self.identity_field, *self.extra_fields}
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name not in skip
        }


# Concerts

class ConcertCreate(Payload):
    title: NonEmptyStr
    date: UtcDatetime
    venue: NonEmptyStr
    is_active: bool = True


class ConcertUpdate(PatchPayload):
    identity_field: ClassVar[str] = "concert_id"
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "date", "venue", "is_active"}
    )

    concert_id: NonEmptyStr
    title: NonEmptyStr | None = None
    date: UtcDatetime | None = None
    venue: NonEmptyStr | None = None
    is_active: bool | None = None


# Attendance forms

class AttendanceFormCreate(Payload):
    concert_id: NonEmptyStr
    title: NonEmptyStr
    url: UrlStr
    description: str | None = None


class AttendanceFormUpdate(PatchPayload):
    identity_field: ClassVar[str] = "attendance_form_id"
    required_fields: ClassVar[frozenset[str]] = frozenset({"title", "url"})

    attendance_form_id: NonEmptyStr
    title: NonEmptyStr | None = None
    url: UrlStr | None = None
    description: str | None = None


# Scores

class ScoreCreate(Payload):
    concert_id: NonEmptyStr
    title: NonEmptyStr
    url: UrlStr


class ScoreUpdate(PatchPayload):
    identity_field: ClassVar[str] = "score_id"
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "url", "is_valid"}
    )
    extra_fields: ClassVar[frozenset[str]] = frozenset({"comment"})

    score_id: NonEmptyStr
    title: NonEmptyStr | None = None
    url: UrlStr | None = None
    is_valid: bool | None = None
    # Appended to the history in the same operation when non-blank.
    comment: str | None = None


# Practices

class PracticeCreate(Payload):
    concert_id: NonEmptyStr
    title: NonEmptyStr
    start_time: UtcDatetime
    end_time: UtcDatetime | None = None
    venue: NonEmptyStr
    address: str | None = None
    items: str | None = None
    notes: str | None = None
    memo: str | None = None
    audio_url: str | None = None
    video_url: str | None = None


class PracticeUpdate(PatchPayload):
    identity_field: ClassVar[str] = "practice_id"
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "start_time", "venue"}
    )

    practice_id: NonEmptyStr
    title: NonEmptyStr | None = None
    start_time: UtcDatetime | None = None
    end_time: UtcDatetime | None = None
    venue: NonEmptyStr | None = None
    address: str | None = None
    items: str | None = None
    notes: str | None = None
    memo: str | None = None
    audio_url: str | None = None
    video_url: str | None = None


# Contact

class ContactInfoUpdate(PatchPayload):
    required_fields: ClassVar[frozenset[str]] = frozenset({"email", "description"})

    email: EmailStr | None = None
    description: NonEmptyStr | None = None
