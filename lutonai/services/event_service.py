"""
Event service handling CRUD operations.
"""

from typing import Optional

from fastapi import UploadFile
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import NotFoundError, ValidationFailed
from lutonai.core.logging import get_logger
from lutonai.core.timeutils import as_utc, utcnow
from lutonai.models.event import Event, EventState
from lutonai.models.registration import EventRegistration
from lutonai.schemas.event import EventCreate, EventDetailResponse, EventResponse, EventUpdate
from lutonai.services import registration_policy
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.storage_service import delete_quietly

logger = get_logger(__name__)

UPLOAD_FOLDER = "events"


async def create_event(
    db: AsyncSession,
    event_data: EventCreate,
    thumbnail: UploadFile,
    storage: StorageBackend,
) -> Event:
    """Create an event; the thumbnail is stored first and its URL kept on the row."""
    thumbnail_url = await storage.save(thumbnail, UPLOAD_FOLDER)

    event = Event(**event_data.model_dump(), thumbnail=thumbnail_url)
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title, capacity=event.capacity)
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def get_event_detail(db: AsyncSession, event_id: int) -> EventDetailResponse:
    """Event with its live availability and lifecycle status."""
    event = await get_event(db, event_id)
    availability = await registration_policy.availability_for(db, event)
    return EventDetailResponse(
        **EventResponse.model_validate(event).model_dump(),
        status=registration_policy.get_event_status(event),
        availability=availability,
    )


async def list_events(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    upcoming_only: bool = False,
    state: Optional[EventState] = None,
    search: Optional[str] = None,
) -> tuple[list[Event], int]:
    """List events ordered by start time, with pagination."""
    query = select(Event)

    if upcoming_only:
        query = query.where(Event.end_datetime >= utcnow())
    if state is not None:
        query = query.where(Event.state == state)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Event.title.ilike(pattern),
                Event.description.ilike(pattern),
                Event.city.ilike(pattern),
            )
        )

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    events_query = (
        query
        .order_by(Event.start_datetime.asc(), Event.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(events_query)
    return list(result.scalars().all()), total


async def update_event(
    db: AsyncSession,
    event_id: int,
    changes: EventUpdate,
    storage: StorageBackend,
    thumbnail: Optional[UploadFile] = None,
) -> Event:
    event = await get_event(db, event_id)
    data = {
        field: value
        for field, value in changes.model_dump(exclude_unset=True).items()
        if value is not None or field in EventUpdate.CLEARABLE_FIELDS
    }

    start = data.get("start_datetime", as_utc(event.start_datetime))
    end = data.get("end_datetime", as_utc(event.end_datetime))
    if end < start:
        raise ValidationFailed("end_datetime must not be before start_datetime")

    old_thumbnail = None
    if thumbnail is not None:
        old_thumbnail = event.thumbnail
        data["thumbnail"] = await storage.save(thumbnail, UPLOAD_FOLDER)

    for field, value in data.items():
        setattr(event, field, value)

    await db.flush()
    await db.refresh(event)

    if old_thumbnail and old_thumbnail != event.thumbnail:
        await delete_quietly(storage, old_thumbnail)

    logger.info("event_updated", event_id=event.id, fields=sorted(data))
    return event


async def delete_event(db: AsyncSession, event_id: int, storage: StorageBackend) -> None:
    """Delete an event and its registrations. Thumbnail removal never blocks the delete."""
    event = await get_event(db, event_id)
    thumbnail = event.thumbnail

    await db.execute(delete(EventRegistration).where(EventRegistration.event_id == event_id))
    await db.delete(event)
    await db.flush()

    await delete_quietly(storage, thumbnail)
    logger.info("event_deleted", event_id=event_id)
