"""
Event registration service: create, list, admin status changes and export.

Creation runs the registration policy and the INSERT in the same request
transaction, so the policy's lock on the event row covers the new row.
"""

from io import BytesIO
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from openpyxl import Workbook
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import NotFoundError, ValidationFailed
from lutonai.core.logging import get_logger
from lutonai.core.metrics import record_registration_attempt
from lutonai.core.timeutils import as_utc
from lutonai.models.event import Event
from lutonai.models.registration import EventRegistration, RegistrationStatus
from lutonai.schemas.registration import RegistrationCreate, RegistrationQuery
from lutonai.services import registration_policy
from lutonai.services.registration_policy import RegistrationDecision

logger = get_logger(__name__)

WAITLIST_MESSAGE = (
    "You have been added to the waitlist. We will notify you if a spot becomes available."
)
CONFIRMED_MESSAGE = "Registration successful"

_SORT_COLUMNS = {
    "created_at": EventRegistration.created_at,
    "name": EventRegistration.name,
    "email": EventRegistration.email,
}

EXPORT_COLUMNS = [
    "ID", "Name", "Email", "Phone", "Organization",
    "Dietary Requirements", "Special Requirements", "Status", "Registered At",
]


async def create_registration(
    db: AsyncSession,
    data: RegistrationCreate,
) -> tuple[EventRegistration, RegistrationDecision]:
    try:
        decision = await registration_policy.evaluate_registration(db, data.event_id, data.email)
    except Exception:
        record_registration_attempt("rejected")
        raise

    registration = EventRegistration(
        event_id=data.event_id,
        name=data.name,
        email=data.email.lower(),
        phone=data.phone,
        organization=data.organization,
        dietary_requirements=data.dietary_requirements,
        special_requirements=data.special_requirements,
        status=decision.status,
    )
    db.add(registration)
    await db.flush()
    await db.refresh(registration)

    record_registration_attempt(decision.status.value.lower())
    logger.info(
        "registration_created",
        registration_id=registration.id,
        event_id=data.event_id,
        status=registration.status.value,
        confirmed_before=decision.confirmed,
    )
    return registration, decision


async def get_registration(db: AsyncSession, registration_id: int) -> EventRegistration:
    registration = await db.get(EventRegistration, registration_id)
    if registration is None:
        raise NotFoundError("Registration not found")
    return registration


async def list_registrations(
    db: AsyncSession,
    params: RegistrationQuery,
) -> tuple[list[EventRegistration], int]:
    query = select(EventRegistration).where(EventRegistration.event_id == params.event_id)

    if params.search:
        pattern = f"%{params.search}%"
        query = query.where(
            or_(
                EventRegistration.name.ilike(pattern),
                EventRegistration.email.ilike(pattern),
                EventRegistration.organization.ilike(pattern),
            )
        )
    if params.status is not None:
        query = query.where(EventRegistration.status == params.status)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()

    column = _SORT_COLUMNS[params.sort_by]
    order = column.asc() if params.sort_order == "asc" else column.desc()
    result = await db.execute(
        query
        .order_by(order, EventRegistration.id.asc())
        .offset((params.page - 1) * params.limit)
        .limit(params.limit)
    )
    return list(result.scalars().all()), total


async def update_registration_status(
    db: AsyncSession,
    registration_id: int,
    status: RegistrationStatus,
) -> EventRegistration:
    """
    Admin status change. Moving someone to CONFIRMED goes through the event
    lock and capacity check; nothing is promoted automatically.
    """
    registration = await get_registration(db, registration_id)
    previous = registration.status

    if status == RegistrationStatus.CONFIRMED and previous != RegistrationStatus.CONFIRMED:
        event = (
            await db.execute(select(Event).where(Event.id == registration.event_id).with_for_update())
        ).scalar_one()
        availability = await registration_policy.availability_for(db, event)
        if availability.is_full:
            raise ValidationFailed("Event is at capacity; cannot confirm this registration")

    registration.status = status
    await db.flush()
    await db.refresh(registration)

    logger.info(
        "registration_status_changed",
        registration_id=registration.id,
        event_id=registration.event_id,
        previous=previous.value,
        status=status.value,
    )
    return registration


async def delete_registration(db: AsyncSession, registration_id: int) -> None:
    registration = await get_registration(db, registration_id)
    await db.delete(registration)
    await db.flush()
    logger.info("registration_deleted", registration_id=registration_id)


def build_workbook(event: Event, registrations: list[EventRegistration]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Registrations"
    ws.append(EXPORT_COLUMNS)

    for r in registrations:
        created: Optional[str] = None
        if r.created_at is not None:
            created = as_utc(r.created_at).strftime("%Y-%m-%d %H:%M:%S")
        ws.append([
            r.id,
            r.name,
            r.email,
            r.phone or "",
            r.organization or "",
            r.dietary_requirements or "",
            r.special_requirements or "",
            r.status.value,
            created,
        ])

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


async def export_registrations(db: AsyncSession, event_id: int) -> tuple[Event, bytes]:
    """All registrations of an event as an .xlsx workbook, oldest first."""
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")

    result = await db.execute(
        select(EventRegistration)
        .where(EventRegistration.event_id == event_id)
        .order_by(EventRegistration.created_at.asc(), EventRegistration.id.asc())
    )
    registrations = list(result.scalars().all())
    content = await run_in_threadpool(build_workbook, event, registrations)

    logger.info("registrations_exported", event_id=event_id, count=len(registrations))
    return event, content
