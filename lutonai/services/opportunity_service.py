"""
Opportunity listings. The company logo is an upload; filtering covers
type, category, level and remote availability.
"""

from typing import Optional

from fastapi import UploadFile
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import NotFoundError, ValidationFailed
from lutonai.core.logging import get_logger
from lutonai.core.timeutils import as_utc
from lutonai.models.opportunity import (
    Opportunity,
    OpportunityCategory,
    OpportunityLevel,
    OpportunityType,
)
from lutonai.schemas.opportunity import OpportunityCreate, OpportunityUpdate
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.storage_service import delete_quietly

logger = get_logger(__name__)

UPLOAD_FOLDER = "opportunities"


def _check_dates(start_date, end_date) -> None:
    if start_date is not None and end_date is not None and as_utc(end_date) < as_utc(start_date):
        raise ValidationFailed("End date must be after start date")


async def create_opportunity(
    db: AsyncSession, data: OpportunityCreate, company_logo: UploadFile, storage: StorageBackend
) -> Opportunity:
    _check_dates(data.start_date, data.end_date)
    logo_url = await storage.save(company_logo, UPLOAD_FOLDER)
    opportunity = Opportunity(**data.model_dump(), company_logo=logo_url)
    db.add(opportunity)
    await db.flush()
    await db.refresh(opportunity)
    logger.info("opportunity_created", opportunity_id=opportunity.id, type=opportunity.type.value)
    return opportunity


async def get_opportunity(db: AsyncSession, opportunity_id: int) -> Opportunity:
    opportunity = await db.get(Opportunity, opportunity_id)
    if opportunity is None:
        raise NotFoundError("Opportunity not found")
    return opportunity


async def list_opportunities(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    type: Optional[OpportunityType] = None,
    category: Optional[OpportunityCategory] = None,
    level: Optional[OpportunityLevel] = None,
    remote: Optional[bool] = None,
) -> tuple[list[Opportunity], int]:
    query = select(Opportunity)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Opportunity.title.ilike(pattern),
                Opportunity.description.ilike(pattern),
                Opportunity.location.ilike(pattern),
            )
        )
    if type is not None:
        query = query.where(Opportunity.type == type)
    if category is not None:
        query = query.where(Opportunity.category == category)
    if level is not None:
        query = query.where(Opportunity.level == level)
    if remote is not None:
        query = query.where(Opportunity.remote_available == remote)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(Opportunity.created_at.desc(), Opportunity.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def update_opportunity(
    db: AsyncSession,
    opportunity_id: int,
    changes: OpportunityUpdate,
    storage: StorageBackend,
    company_logo: Optional[UploadFile] = None,
) -> Opportunity:
    opportunity = await get_opportunity(db, opportunity_id)
    data = changes.model_dump(exclude_unset=True, exclude_none=True)
    _check_dates(
        data.get("start_date", opportunity.start_date),
        data.get("end_date", opportunity.end_date),
    )

    old_logo = None
    if company_logo is not None:
        old_logo = opportunity.company_logo
        data["company_logo"] = await storage.save(company_logo, UPLOAD_FOLDER)

    for field, value in data.items():
        setattr(opportunity, field, value)
    await db.flush()
    await db.refresh(opportunity)

    if old_logo:
        await delete_quietly(storage, old_logo)
    logger.info("opportunity_updated", opportunity_id=opportunity.id, fields=sorted(data))
    return opportunity


async def delete_opportunity(db: AsyncSession, opportunity_id: int, storage: StorageBackend) -> None:
    opportunity = await get_opportunity(db, opportunity_id)
    logo = opportunity.company_logo
    await db.delete(opportunity)
    await db.flush()
    await delete_quietly(storage, logo)
    logger.info("opportunity_deleted", opportunity_id=opportunity_id)
