"""
Event model.

Key design decisions:
- `capacity` is optional; NULL means the event has no attendance limit
- registration counts are never stored, they are counted from event_registrations
- `registration_deadline` is optional; when NULL the deadline is derived
  from the start time (see registration_policy)
- `state` is the editorial state; the time-based lifecycle status is derived
"""

import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, Float, Index, CheckConstraint

from lutonai.db.base import Base, TimestampMixin, enum_column


class EventType(str, enum.Enum):
    IN_PERSON = "IN_PERSON"
    ONLINE = "ONLINE"
    HYBRID = "HYBRID"


class EventState(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    start_datetime = Column(DateTime(timezone=True), nullable=False)
    end_datetime = Column(DateTime(timezone=True), nullable=False)
    event_type = enum_column(EventType, nullable=False, default=EventType.IN_PERSON)
    venue = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    organizers = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(30), nullable=True)
    capacity = Column(Integer, nullable=True)
    price = Column(Float, nullable=True)
    registration_deadline = Column(DateTime(timezone=True), nullable=True)
    thumbnail = Column(String(500), nullable=True)
    state = enum_column(EventState, nullable=False, default=EventState.PUBLISHED)

    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="check_event_capacity_non_negative"),
        CheckConstraint("price IS NULL OR price >= 0", name="check_event_price_non_negative"),
        CheckConstraint("end_datetime >= start_datetime", name="check_event_end_after_start"),
        Index("ix_events_start_datetime", "start_datetime"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, capacity={self.capacity})>"
