"""
Sponsor endpoints. Writes are admin-only multipart forms carrying a `logo`.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.security import require_admin
from lutonai.db.session import get_db
from lutonai.schemas.common import MessageResponse, Pagination, form_body
from lutonai.schemas.sponsor import SponsorCreate, SponsorListResponse, SponsorResponse, SponsorUpdate
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.sponsor_service import (
    create_sponsor,
    delete_sponsor,
    get_sponsor,
    list_sponsors,
    update_sponsor,
)
from lutonai.services.storage_service import get_storage

router = APIRouter(prefix="/sponsors", tags=["Sponsors"])


@router.get("", response_model=SponsorListResponse)
async def list_sponsors_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    sponsors, total = await list_sponsors(db, page, limit, search)
    return SponsorListResponse(
        sponsors=[SponsorResponse.model_validate(s) for s in sponsors],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/{sponsor_id}", response_model=SponsorResponse)
async def get_sponsor_endpoint(sponsor_id: int, db: AsyncSession = Depends(get_db)):
    return await get_sponsor(db, sponsor_id)


@router.post(
    "",
    response_model=SponsorResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_sponsor_endpoint(
    data: SponsorCreate = Depends(form_body(SponsorCreate, files=("logo",))),
    logo: UploadFile = File(...),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    return await create_sponsor(db, data, logo, storage)


@router.put("/{sponsor_id}", response_model=SponsorResponse, dependencies=[Depends(require_admin)])
async def update_sponsor_endpoint(
    sponsor_id: int,
    changes: SponsorUpdate = Depends(form_body(SponsorUpdate, files=("logo",))),
    logo: Optional[UploadFile] = File(None),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    return await update_sponsor(db, sponsor_id, changes, storage, logo)


@router.delete("/{sponsor_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_sponsor_endpoint(
    sponsor_id: int,
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    await delete_sponsor(db, sponsor_id, storage)
    return MessageResponse(message="Sponsor deleted successfully")
