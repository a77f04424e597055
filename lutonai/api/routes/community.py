"""
Public community forms: "join us" sign-up and the contact form.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.db.session import get_db
from lutonai.schemas.common import MessageResponse
from lutonai.schemas.community import (
    CommunityMemberResponse,
    CommunitySignup,
    CommunitySignupResponse,
    ContactCreate,
)
from lutonai.services.community_service import create_contact, register_member
from lutonai.services.email_service import send_welcome_email
from lutonai.services.rate_limit_service import rate_limited

router = APIRouter(tags=["Community"])


@router.post(
    "/register",
    response_model=CommunitySignupResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited("community-register"))],
)
async def join_community(
    data: CommunitySignup,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    member = await register_member(db, data)
    background_tasks.add_task(send_welcome_email, member.name, member.email)
    return CommunitySignupResponse(
        message="Registration successful",
        member=CommunityMemberResponse.model_validate(member),
    )


@router.post(
    "/contact",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited("contact"))],
)
async def contact(data: ContactCreate, db: AsyncSession = Depends(get_db)):
    await create_contact(db, data)
    return MessageResponse(message="Message sent successfully")
