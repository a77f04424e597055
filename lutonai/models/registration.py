"""
Event registration model.

Status is decided once, when the row is inserted, from the confirmed count
at that moment. Cancelling a confirmed registration does not promote anyone
from the waitlist.
"""

import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Index, UniqueConstraint

from lutonai.db.base import Base, TimestampMixin, enum_column


class RegistrationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    WAITLISTED = "WAITLISTED"


class EventRegistration(Base, TimestampMixin):
    __tablename__ = "event_registrations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    organization = Column(String(100), nullable=True)
    dietary_requirements = Column(String(500), nullable=True)
    special_requirements = Column(String(500), nullable=True)
    status = enum_column(RegistrationStatus, nullable=False, default=RegistrationStatus.CONFIRMED)

    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_event_registration_email"),
        # Covers the confirmed / waitlisted counts per event
        Index("ix_event_registrations_event_status", "event_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<EventRegistration(id={self.id}, event={self.event_id}, status={self.status})>"
