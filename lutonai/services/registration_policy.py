"""
Registration policy: capacity, waitlist and event lifecycle decisions.

CONCURRENCY STRATEGY: Pessimistic row lock on the event
=======================================================

Problem:
  Two people register for the last confirmed spot at the same time.
  Both count confirmed = capacity - 1, both are confirmed.
  Result: capacity overshoot.

Solution:
  evaluate_registration() reads the event with SELECT ... FOR UPDATE before
  counting. The lock lives until the request transaction commits (see
  db.session.get_db), after the new registration row has been inserted.
  A second request for the same event blocks on the lock and then counts
  the committed row.

  Registrations for *different* events never contend, and the critical
  section is a COUNT plus one INSERT, so serialising per event is cheap.
  SQLite ignores FOR UPDATE; it serialises writers on its own.

Everything else here is a pure function of the event row, a few counts and
the current time, so the public pages and the registration flow always
agree on what "full" and "closed" mean.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.config import get_settings
from lutonai.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from lutonai.core.logging import get_logger
from lutonai.core.timeutils import as_utc, utcnow
from lutonai.models.event import Event, EventState
from lutonai.models.registration import EventRegistration, RegistrationStatus
from lutonai.schemas.event import EventAvailability, EventStatus

logger = get_logger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class RegistrationDecision:
    should_waitlist: bool
    confirmed: int
    waitlisted: int

    @property
    def status(self) -> RegistrationStatus:
        return RegistrationStatus.WAITLISTED if self.should_waitlist else RegistrationStatus.CONFIRMED


def registration_deadline(event: Event) -> datetime:
    """Explicit deadline, or REGISTRATION_DEADLINE_HOURS before the start."""
    if event.registration_deadline is not None:
        return as_utc(event.registration_deadline)
    return as_utc(event.start_datetime) - timedelta(hours=settings.REGISTRATION_DEADLINE_HOURS)


def is_registration_open(event: Event, now: Optional[datetime] = None) -> bool:
    now = as_utc(now) or utcnow()
    return now <= registration_deadline(event) and now <= as_utc(event.end_datetime)


def get_event_status(event: Event, now: Optional[datetime] = None) -> EventStatus:
    """Lifecycle status derived from the clock; nothing is persisted."""
    now = as_utc(now) or utcnow()
    start = as_utc(event.start_datetime)
    end = as_utc(event.end_datetime)

    if now > end:
        return EventStatus.PAST
    if start <= now:
        return EventStatus.ONGOING
    if now > registration_deadline(event):
        return EventStatus.REGISTRATION_CLOSED
    return EventStatus.UPCOMING


def compute_availability(
    capacity: Optional[int],
    confirmed: int,
    waitlisted: int,
    deadline: datetime,
    registration_open: bool,
    max_waitlist_size: Optional[int] = None,
) -> EventAvailability:
    """
    Availability projection.

    remaining = max(capacity - confirmed, 0) and is_full = confirmed >= capacity.
    Without a capacity the event can never be full and remaining is None.
    """
    if max_waitlist_size is None:
        max_waitlist_size = settings.MAX_WAITLIST_SIZE

    if capacity is None:
        remaining = None
        is_full = False
    else:
        remaining = max(capacity - confirmed, 0)
        is_full = confirmed >= capacity

    return EventAvailability(
        capacity=capacity,
        confirmed=confirmed,
        remaining=remaining,
        is_full=is_full,
        waitlisted=waitlisted,
        max_waitlist_size=max_waitlist_size,
        is_waitlist_available=is_full and waitlisted < max_waitlist_size,
        registration_deadline=deadline,
        is_registration_open=registration_open,
    )


async def _status_counts(db: AsyncSession, event_id: int) -> tuple[int, int]:
    """(confirmed, waitlisted) registrations for an event."""
    result = await db.execute(
        select(EventRegistration.status, func.count(EventRegistration.id))
        .where(
            EventRegistration.event_id == event_id,
            EventRegistration.status.in_(
                [RegistrationStatus.CONFIRMED, RegistrationStatus.WAITLISTED]
            ),
        )
        .group_by(EventRegistration.status)
    )
    counts = {status: count for status, count in result.all()}
    return (
        counts.get(RegistrationStatus.CONFIRMED, 0),
        counts.get(RegistrationStatus.WAITLISTED, 0),
    )


async def _load_event(db: AsyncSession, event_id: int, lock: bool = False) -> Event:
    query = select(Event).where(Event.id == event_id)
    if lock:
        query = query.with_for_update()
    event = (await db.execute(query)).scalar_one_or_none()
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def availability_for(db: AsyncSession, event: Event, now: Optional[datetime] = None) -> EventAvailability:
    confirmed, waitlisted = await _status_counts(db, event.id)
    return compute_availability(
        capacity=event.capacity,
        confirmed=confirmed,
        waitlisted=waitlisted,
        deadline=registration_deadline(event),
        registration_open=is_registration_open(event, now),
    )


async def get_availability(db: AsyncSession, event_id: int) -> EventAvailability:
    """Recomputed on every call; never cached."""
    event = await _load_event(db, event_id)
    return await availability_for(db, event)


async def evaluate_registration(
    db: AsyncSession,
    event_id: int,
    email: str,
    now: Optional[datetime] = None,
) -> RegistrationDecision:
    """
    Decide whether a new registration is confirmed or waitlisted.

    Must run inside the transaction that inserts the registration: the event
    row stays locked until that transaction ends.
    """
    now = as_utc(now) or utcnow()
    event = await _load_event(db, event_id, lock=True)

    if event.state == EventState.CANCELLED:
        raise ValidationFailed("This event has been cancelled")

    if as_utc(event.end_datetime) < now:
        raise ValidationFailed("Cannot register for past events")

    deadline = registration_deadline(event)
    if now > deadline:
        raise ValidationFailed(
            f"Registration is closed. Registration deadline was {deadline.isoformat()}"
        )

    existing = await db.execute(
        select(EventRegistration.id).where(
            EventRegistration.event_id == event_id,
            func.lower(EventRegistration.email) == email.lower(),
        )
    )
    if existing.first() is not None:
        raise ConflictError("You have already registered for this event")

    confirmed, waitlisted = await _status_counts(db, event_id)
    should_waitlist = event.capacity is not None and confirmed >= event.capacity

    if should_waitlist and waitlisted >= settings.MAX_WAITLIST_SIZE:
        logger.warning(
            "registration_rejected_waitlist_full",
            event_id=event_id,
            confirmed=confirmed,
            waitlisted=waitlisted,
        )
        raise ValidationFailed(
            "Event is full and waitlist is at capacity. "
            "Please try again later or contact us for more information."
        )

    return RegistrationDecision(
        should_waitlist=should_waitlist,
        confirmed=confirmed,
        waitlisted=waitlisted,
    )
