"""
Sponsor CRUD. Logos go through the storage backend.
"""

from typing import Optional

from fastapi import UploadFile
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import NotFoundError
from lutonai.core.logging import get_logger
from lutonai.models.sponsor import Sponsor
from lutonai.schemas.sponsor import SponsorCreate, SponsorUpdate
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.storage_service import delete_quietly

logger = get_logger(__name__)

UPLOAD_FOLDER = "sponsors"


async def create_sponsor(
    db: AsyncSession, data: SponsorCreate, logo: UploadFile, storage: StorageBackend
) -> Sponsor:
    logo_url = await storage.save(logo, UPLOAD_FOLDER)
    sponsor = Sponsor(**data.model_dump(), logo=logo_url)
    db.add(sponsor)
    await db.flush()
    await db.refresh(sponsor)
    logger.info("sponsor_created", sponsor_id=sponsor.id, level=sponsor.sponsorship_level.value)
    return sponsor


async def get_sponsor(db: AsyncSession, sponsor_id: int) -> Sponsor:
    sponsor = await db.get(Sponsor, sponsor_id)
    if sponsor is None:
        raise NotFoundError("Sponsor not found")
    return sponsor


async def list_sponsors(
    db: AsyncSession, page: int = 1, limit: int = 20, search: Optional[str] = None
) -> tuple[list[Sponsor], int]:
    """Latest first; search matches name or sponsorship level."""
    query = select(Sponsor)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Sponsor.name.ilike(pattern), cast(Sponsor.sponsorship_level, String).ilike(pattern)))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(Sponsor.created_at.desc(), Sponsor.id.desc()).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total


async def update_sponsor(
    db: AsyncSession,
    sponsor_id: int,
    changes: SponsorUpdate,
    storage: StorageBackend,
    logo: Optional[UploadFile] = None,
) -> Sponsor:
    sponsor = await get_sponsor(db, sponsor_id)
    data = changes.model_dump(exclude_unset=True, exclude_none=True)

    old_logo = None
    if logo is not None:
        old_logo = sponsor.logo
        data["logo"] = await storage.save(logo, UPLOAD_FOLDER)

    for field, value in data.items():
        setattr(sponsor, field, value)
    await db.flush()
    await db.refresh(sponsor)

    if old_logo:
        await delete_quietly(storage, old_logo)
    logger.info("sponsor_updated", sponsor_id=sponsor.id, fields=sorted(data))
    return sponsor


async def delete_sponsor(db: AsyncSession, sponsor_id: int, storage: StorageBackend) -> None:
    sponsor = await get_sponsor(db, sponsor_id)
    logo = sponsor.logo
    await db.delete(sponsor)
    await db.flush()
    await delete_quietly(storage, logo)
    logger.info("sponsor_deleted", sponsor_id=sponsor_id)
