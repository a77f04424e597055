"""
Opportunity endpoints. Writes carry the `company_logo` upload.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.security import require_admin
from lutonai.db.session import get_db
from lutonai.models.opportunity import OpportunityCategory, OpportunityLevel, OpportunityType
from lutonai.schemas.common import MessageResponse, Pagination, form_body
from lutonai.schemas.opportunity import (
    OpportunityCreate,
    OpportunityListResponse,
    OpportunityResponse,
    OpportunityUpdate,
)
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.opportunity_service import (
    create_opportunity,
    delete_opportunity,
    get_opportunity,
    list_opportunities,
    update_opportunity,
)
from lutonai.services.storage_service import get_storage

router = APIRouter(prefix="/opportunities", tags=["Opportunities"])

LOGO_FIELD = "company_logo"


@router.get("", response_model=OpportunityListResponse)
async def list_opportunities_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    type: Optional[OpportunityType] = Query(None),
    category: Optional[OpportunityCategory] = Query(None),
    level: Optional[OpportunityLevel] = Query(None),
    remote: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    opportunities, total = await list_opportunities(
        db, page, limit, search, type, category, level, remote
    )
    return OpportunityListResponse(
        opportunities=[OpportunityResponse.model_validate(o) for o in opportunities],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/{opportunity_id}", response_model=OpportunityResponse)
async def get_opportunity_endpoint(opportunity_id: int, db: AsyncSession = Depends(get_db)):
    return await get_opportunity(db, opportunity_id)


@router.post(
    "",
    response_model=OpportunityResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_opportunity_endpoint(
    data: OpportunityCreate = Depends(form_body(OpportunityCreate, files=(LOGO_FIELD,))),
    company_logo: UploadFile = File(...),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    return await create_opportunity(db, data, company_logo, storage)


@router.put(
    "/{opportunity_id}",
    response_model=OpportunityResponse,
    dependencies=[Depends(require_admin)],
)
async def update_opportunity_endpoint(
    opportunity_id: int,
    changes: OpportunityUpdate = Depends(form_body(OpportunityUpdate, files=(LOGO_FIELD,))),
    company_logo: Optional[UploadFile] = File(None),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    return await update_opportunity(db, opportunity_id, changes, storage, company_logo)


@router.delete(
    "/{opportunity_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_opportunity_endpoint(
    opportunity_id: int,
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    await delete_opportunity(db, opportunity_id, storage)
    return MessageResponse(message="Opportunity deleted successfully")
