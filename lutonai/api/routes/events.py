"""
Event endpoints with Redis caching on list operations.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.logging import get_logger
from lutonai.core.security import require_admin
from lutonai.db.session import get_db
from lutonai.models.event import EventState
from lutonai.schemas.common import MessageResponse, form_body
from lutonai.schemas.event import (
    EventAvailability,
    EventCreate,
    EventDetailResponse,
    EventListResponse,
    EventResponse,
    EventUpdate,
)
from lutonai.services import registration_policy
from lutonai.services.cache_service import (
    get_cached,
    invalidate_event_cache,
    make_event_list_key,
    set_cached,
)
from lutonai.services.event_service import (
    create_event,
    delete_event,
    get_event_detail,
    list_events,
    update_event,
)
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.storage_service import get_storage

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


async def _commit_and_invalidate(db: AsyncSession) -> None:
    """Commit first so a list read between the two steps cannot re-cache old rows."""
    await db.commit()
    await invalidate_event_cache()


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    upcoming_only: bool = Query(False),
    state: Optional[EventState] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List events with pagination.
    Unfiltered-by-search results are cached in Redis until the TTL or the
    next event mutation.
    """
    key = None
    if not search:
        key = make_event_list_key(page, limit, upcoming_only, state.value if state else None)
        cached = await get_cached(key)
        if cached:
            logger.info("events_list_cache_hit", page=page)
            cached["cached"] = True
            return EventListResponse(**cached)

    events, total = await list_events(db, page, limit, upcoming_only, state, search)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump(mode="json") for e in events],
        "total": total,
        "page": page,
        "limit": limit,
        "has_more": page * limit < total,
        "cached": False,
    }

    if key is not None:
        await set_cached(key, response_data)

    return EventListResponse(**response_data)


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Single event with live availability. Not cached."""
    return await get_event_detail(db, event_id)


@router.get("/{event_id}/availability", response_model=EventAvailability)
async def get_availability_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    return await registration_policy.get_availability(db, event_id)


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_event_endpoint(
    event_data: EventCreate = Depends(form_body(EventCreate, files=("thumbnail",))),
    thumbnail: UploadFile = File(...),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    event = await create_event(db, event_data, thumbnail, storage)
    await _commit_and_invalidate(db)
    return event


@router.put("/{event_id}", response_model=EventResponse, dependencies=[Depends(require_admin)])
async def update_event_endpoint(
    event_id: int,
    changes: EventUpdate = Depends(
        form_body(EventUpdate, files=("thumbnail",), clearable=EventUpdate.CLEARABLE_FIELDS)
    ),
    thumbnail: Optional[UploadFile] = File(None),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    event = await update_event(db, event_id, changes, storage, thumbnail)
    await _commit_and_invalidate(db)
    return event


@router.delete("/{event_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_event_endpoint(
    event_id: int,
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event together with its registrations."""
    await delete_event(db, event_id, storage)
    await _commit_and_invalidate(db)
    return MessageResponse(message="Event deleted successfully")
