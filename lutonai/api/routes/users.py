"""
Admin user management.

Both URL shapes are served: `/users/{id}` and the older `/users` form that
takes the id in the body (PUT) or the query string (DELETE). Every change
that could remove the last admin goes through the last-admin guard.
"""

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.security import require_admin
from lutonai.db.session import get_db
from lutonai.schemas.common import MessageResponse
from lutonai.schemas.user import UserListResponse, UserResponse, UserUpdate, UserUpdateById
from lutonai.services.user_service import delete_user, get_user, list_users, update_user

router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(require_admin)])


@router.get("", response_model=UserListResponse)
async def list_users_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    users, total = await list_users(db, page, limit, search)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        pages=math.ceil(total / limit),
    )


@router.put("", response_model=UserResponse)
async def update_user_by_body(data: UserUpdateById, db: AsyncSession = Depends(get_db)):
    changes = UserUpdate(**data.model_dump(exclude={"id"}, exclude_unset=True))
    return await update_user(db, data.id, changes)


@router.delete("", response_model=MessageResponse)
async def delete_user_by_query(id: int = Query(...), db: AsyncSession = Depends(get_db)):
    await delete_user(db, id)
    return MessageResponse(message="User deleted successfully")


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_endpoint(user_id: int, db: AsyncSession = Depends(get_db)):
    return await get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user_endpoint(
    user_id: int,
    changes: UserUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await update_user(db, user_id, changes)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user_endpoint(user_id: int, db: AsyncSession = Depends(get_db)):
    await delete_user(db, user_id)
    return MessageResponse(message="User deleted successfully")
