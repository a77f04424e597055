"""
Pydantic schemas for events, availability and lifecycle status.
"""

import enum
from datetime import datetime
from typing import ClassVar, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from lutonai.core.timeutils import as_utc
from lutonai.models.event import EventState, EventType


class EventStatus(str, enum.Enum):
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    PAST = "PAST"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"


class _EventFields(BaseModel):
    @field_validator("start_datetime", "end_datetime", "registration_deadline", check_fields=False)
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class EventCreate(_EventFields):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    start_datetime: datetime
    end_datetime: datetime
    event_type: EventType = EventType.IN_PERSON
    venue: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    organizers: Optional[str] = Field(None, max_length=255)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    capacity: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    registration_deadline: Optional[datetime] = None
    state: EventState = EventState.PUBLISHED

    @model_validator(mode="after")
    def _check_window(self) -> "EventCreate":
        if self.end_datetime < self.start_datetime:
            raise ValueError("end_datetime must not be before start_datetime")
        return self


class EventUpdate(_EventFields):
    # nullable columns an update may reset; None elsewhere means "unchanged"
    CLEARABLE_FIELDS: ClassVar[tuple[str, ...]] = ("capacity", "price", "registration_deadline")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    event_type: Optional[EventType] = None
    venue: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    organizers: Optional[str] = Field(None, max_length=255)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    capacity: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    registration_deadline: Optional[datetime] = None
    state: Optional[EventState] = None


class EventAvailability(BaseModel):
    capacity: Optional[int]
    confirmed: int
    remaining: Optional[int]
    is_full: bool
    waitlisted: int
    max_waitlist_size: int
    is_waitlist_available: bool
    registration_deadline: datetime
    is_registration_open: bool


class EventResponse(BaseModel):
    id: int
    title: str
    description: str
    start_datetime: datetime
    end_datetime: datetime
    event_type: EventType
    venue: Optional[str]
    address: Optional[str]
    city: Optional[str]
    country: Optional[str]
    organizers: Optional[str]
    contact_email: Optional[str]
    contact_phone: Optional[str]
    capacity: Optional[int]
    price: Optional[float]
    registration_deadline: Optional[datetime]
    thumbnail: Optional[str]
    state: EventState
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventDetailResponse(EventResponse):
    status: EventStatus
    availability: EventAvailability


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    limit: int
    has_more: bool
    cached: bool = False
