from pydantic import BaseModel, EmailStr, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime, timezone
import re

ISO_8601 = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|z|[+-]\d{2}(:?\d{2})?)?)?$"
)


def check_iso_8601(value):
    """Let through datetimes and ISO 8601 strings only; pydantic alone would also take epoch numbers."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str) and ISO_8601.match(value.strip()):
        return value.strip()
    raise ValueError("must be an ISO 8601 date")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive values are taken to be UTC already (SQLite drops the offset)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        str_strip_whitespace = True


class MessageResponse(CamelModel):
    message: str


# Users

class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)


class LoginRequest(CamelModel):
    """Schema for user login request."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(CamelModel):
    id: str
    email: str
    name: str


class UserDetailOut(UserOut):
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserOut


# Events

class EventCreate(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    date: datetime
    location: str = Field(..., min_length=1)
    max_participants: Optional[int] = Field(None, ge=1)

    @field_validator("date", mode="before")
    @classmethod
    def check_date_format(cls, value):
        return check_iso_8601(value)

    @field_validator("date")
    @classmethod
    def date_in_utc(cls, value):
        return as_utc(value)


class EventUpdate(CamelModel):
    """Partial update; fields left out of the request keep their value."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1)
    max_participants: Optional[int] = Field(None, ge=1)

    @field_validator("date", mode="before")
    @classmethod
    def check_date_format(cls, value):
        return check_iso_8601(value)

    @field_validator("date")
    @classmethod
    def date_in_utc(cls, value):
        return as_utc(value)


class EventOut(CamelModel):
    id: str
    rev: str
    title: str
    description: str
    date: datetime
    location: str
    max_participants: Optional[int] = None
    creator_id: str
    creator_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("date", "created_at", "updated_at")
    def serialize_dates(self, value: datetime) -> str:
        return as_utc(value).isoformat()


class EventDetailOut(EventOut):
    participant_count: int = 0
    available_spots: Optional[int] = None


class EventResponse(CamelModel):
    message: str
    event: EventOut


class EventListResponse(CamelModel):
    events: List[EventOut]


# Participants

class RSVPCreate(CamelModel):
    event_id: str = Field(..., min_length=1)


class ParticipantOut(CamelModel):
    id: str
    rev: str
    event_id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    event_title: Optional[str] = None
    event_date: Optional[datetime] = None
    rsvp_date: datetime

    @field_serializer("event_date", "rsvp_date")
    def serialize_dates(self, value: Optional[datetime]) -> Optional[str]:
        return as_utc(value).isoformat() if value else None


class ParticipantResponse(CamelModel):
    message: str
    participant: ParticipantOut


class ParticipantListResponse(CamelModel):
    participants: List[ParticipantOut]
    count: int


class RSVPListResponse(CamelModel):
    rsvps: List[ParticipantOut]
