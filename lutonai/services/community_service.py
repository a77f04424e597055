"""
Community sign-ups and contact form messages.
"""

from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import ConflictError, NotFoundError
from lutonai.core.logging import get_logger
from lutonai.models.community import CommunityMember, ContactMessage
from lutonai.schemas.community import CommunitySignup, ContactCreate

logger = get_logger(__name__)


async def register_member(db: AsyncSession, data: CommunitySignup) -> CommunityMember:
    email = data.email.lower()
    existing = await db.execute(
        select(CommunityMember.id).where(func.lower(CommunityMember.email) == email)
    )
    if existing.first() is not None:
        raise ConflictError("This email is already registered")

    member = CommunityMember(
        name=f"{data.first_name} {data.last_name}",
        email=email,
        organization=data.organization or "",
        area_of_interest=data.area_of_interest or "",
    )
    db.add(member)
    await db.flush()
    await db.refresh(member)
    logger.info("community_member_registered", member_id=member.id)
    return member


async def list_members(
    db: AsyncSession, page: int = 1, limit: int = 20, search: Optional[str] = None
) -> tuple[list[CommunityMember], int]:
    query = select(CommunityMember)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                CommunityMember.name.ilike(pattern),
                CommunityMember.email.ilike(pattern),
                CommunityMember.organization.ilike(pattern),
            )
        )

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(CommunityMember.created_at.desc(), CommunityMember.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def delete_member(db: AsyncSession, member_id: int) -> None:
    member = await db.get(CommunityMember, member_id)
    if member is None:
        raise NotFoundError("Registration not found")
    await db.delete(member)
    await db.flush()
    logger.info("community_member_deleted", member_id=member_id)


async def create_contact(db: AsyncSession, data: ContactCreate) -> ContactMessage:
    message = ContactMessage(**data.model_dump())
    message.email = message.email.lower()
    db.add(message)
    await db.flush()
    await db.refresh(message)
    logger.info("contact_message_received", contact_id=message.id)
    return message


async def list_contacts(
    db: AsyncSession, page: int = 1, limit: int = 20
) -> tuple[list[ContactMessage], int]:
    total = (await db.execute(select(func.count(ContactMessage.id)))).scalar_one()
    result = await db.execute(
        select(ContactMessage)
        .order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total
