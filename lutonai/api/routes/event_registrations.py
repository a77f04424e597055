"""
Event registration endpoints.

POST is public and rate limited; the registration policy decides between
CONFIRMED and WAITLISTED inside the request transaction. Reading one
registration, changing its status, deleting it and exporting are admin-only.
"""

import re
from io import BytesIO
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.logging import get_logger
from lutonai.core.metrics import registration_latency
from lutonai.core.security import require_admin
from lutonai.db.session import get_db
from lutonai.schemas.common import MessageResponse, Pagination
from lutonai.schemas.registration import (
    RegistrationCreate,
    RegistrationCreatedResponse,
    RegistrationListResponse,
    RegistrationQuery,
    RegistrationResponse,
    RegistrationStatusUpdate,
)
from lutonai.services import registration_policy
from lutonai.services.email_service import send_registration_email
from lutonai.services.event_service import get_event
from lutonai.services.rate_limit_service import rate_limited
from lutonai.services.registration_service import (
    CONFIRMED_MESSAGE,
    WAITLIST_MESSAGE,
    create_registration,
    delete_registration,
    export_registrations,
    get_registration,
    list_registrations,
    update_registration_status,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/event-registrations", tags=["Event Registrations"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post(
    "",
    response_model=RegistrationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited("event-registration"))],
)
async def register_for_event(
    data: RegistrationCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """
    Register for an event.

    Full events put the registration on the waitlist; a confirmation or
    waitlist e-mail is sent after the response.
    """
    with registration_latency.time():
        registration, decision = await create_registration(db, data)
        event = await get_event(db, data.event_id)
        availability = await registration_policy.availability_for(db, event)

    background_tasks.add_task(send_registration_email, registration, event)

    return RegistrationCreatedResponse(
        message=WAITLIST_MESSAGE if decision.should_waitlist else CONFIRMED_MESSAGE,
        registration=RegistrationResponse.model_validate(registration),
        availability=availability,
        event_status=registration_policy.get_event_status(event),
    )


@router.get("", response_model=RegistrationListResponse)
async def list_event_registrations(
    params: Annotated[RegistrationQuery, Query()],
    db: AsyncSession = Depends(get_db),
):
    event = await get_event(db, params.event_id)
    registrations, total = await list_registrations(db, params)
    availability = await registration_policy.availability_for(db, event)

    return RegistrationListResponse(
        registrations=[RegistrationResponse.model_validate(r) for r in registrations],
        pagination=Pagination.build(total, params.page, params.limit),
        availability=availability,
        event_status=registration_policy.get_event_status(event),
    )


@router.get("/export", dependencies=[Depends(require_admin)])
async def export_event_registrations(
    event_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """All registrations of an event as an Excel workbook."""
    event, content = await export_registrations(db, event_id)
    slug = re.sub(r"[^A-Za-z0-9]+", "-", event.title).strip("-").lower() or "event"
    filename = f"{slug}-registrations.xlsx"
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/{registration_id}",
    response_model=RegistrationResponse,
    dependencies=[Depends(require_admin)],
)
async def get_event_registration(registration_id: int, db: AsyncSession = Depends(get_db)):
    return await get_registration(db, registration_id)


@router.patch(
    "/{registration_id}",
    response_model=RegistrationResponse,
    dependencies=[Depends(require_admin)],
)
async def update_event_registration(
    registration_id: int,
    data: RegistrationStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Change a registration's status. Cancelling never promotes anyone from the waitlist."""
    return await update_registration_status(db, registration_id, data.status)


@router.delete(
    "/{registration_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_event_registration(registration_id: int, db: AsyncSession = Depends(get_db)):
    await delete_registration(db, registration_id)
    return MessageResponse(message="Registration deleted successfully")
