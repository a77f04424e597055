"""
Admin dashboard endpoints: stats, community sign-ups and contact messages.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.security import require_admin
from lutonai.db.session import get_db
from lutonai.schemas.common import MessageResponse, Pagination
from lutonai.schemas.community import CommunityMemberResponse, ContactResponse
from lutonai.schemas.stats import AdminStatsResponse
from lutonai.services.community_service import delete_member, list_contacts, list_members
from lutonai.services.stats_service import get_admin_stats

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


class CommunityMemberListResponse(BaseModel):
    registrations: list[CommunityMemberResponse]
    pagination: Pagination


class ContactListResponse(BaseModel):
    contacts: list[ContactResponse]
    pagination: Pagination


@router.get("/stats", response_model=AdminStatsResponse)
async def admin_stats(db: AsyncSession = Depends(get_db)):
    """Dashboard counters. Computed on every request."""
    return await get_admin_stats(db)


@router.get("/registrations", response_model=CommunityMemberListResponse)
async def community_registrations(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    members, total = await list_members(db, page, limit, search)
    return CommunityMemberListResponse(
        registrations=[CommunityMemberResponse.model_validate(m) for m in members],
        pagination=Pagination.build(total, page, limit),
    )


@router.delete("/registrations/{member_id}", response_model=MessageResponse)
async def delete_community_registration(member_id: int, db: AsyncSession = Depends(get_db)):
    await delete_member(db, member_id)
    return MessageResponse(message="Registration deleted successfully")


@router.get("/contacts", response_model=ContactListResponse)
async def contact_messages(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    contacts, total = await list_contacts(db, page, limit)
    return ContactListResponse(
        contacts=[ContactResponse.model_validate(c) for c in contacts],
        pagination=Pagination.build(total, page, limit),
    )
