"""
User management with last-admin protection.

LAST-ADMIN GUARD
================

Invariant: the system never reaches zero users with the ADMIN role.

The check counts ADMIN rows right before deleting or demoting one. Done as
two separate statements that is a count-then-act race: two requests
removing the last two admins both see count == 2 and both proceed.

ensure_admin_remains() therefore selects the ADMIN rows FOR UPDATE. The row
locks are held until the request transaction commits, so a concurrent
guard on another admin blocks, re-reads, and sees the committed count.

Lock order is fixed: the ADMIN rows (ascending id) before the target row.
Two requests removing different admins then queue on the same first row
instead of each holding a row the other one needs.
"""

import enum
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import ConflictError, LastAdminError, NotFoundError
from lutonai.core.logging import get_logger
from lutonai.core.metrics import last_admin_rejections
from lutonai.models.user import User, UserRole
from lutonai.schemas.user import UserUpdate

logger = get_logger(__name__)


class UserOperation(str, enum.Enum):
    DELETE = "delete"
    UPDATE = "update"


async def get_user(db: AsyncSession, user_id: int, lock: bool = False) -> User:
    query = select(User).where(User.id == user_id)
    if lock:
        # re-read after waiting on the lock, not the identity map copy
        query = query.with_for_update().execution_options(populate_existing=True)
    user = (await db.execute(query)).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


async def list_users(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
) -> tuple[list[User], int]:
    query = select(User)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(User.name.asc(), User.id.asc()).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total


def _removes_admin_role(operation: UserOperation, new_role: Optional[UserRole]) -> bool:
    return operation == UserOperation.DELETE or (
        new_role is not None and new_role != UserRole.ADMIN
    )


async def lock_admin_rows(db: AsyncSession) -> list[int]:
    """Lock every ADMIN row, lowest id first, and return their ids."""
    result = await db.execute(
        select(User.id).where(User.role == UserRole.ADMIN).order_by(User.id).with_for_update()
    )
    return list(result.scalars().all())


async def ensure_admin_remains(
    db: AsyncSession,
    target: User,
    operation: UserOperation,
    new_role: Optional[UserRole] = None,
) -> None:
    """
    Reject a mutation that would leave the system without an admin.

    `new_role` None means the update does not touch the role.
    """
    if target.role != UserRole.ADMIN or not _removes_admin_role(operation, new_role):
        return

    admin_ids = await lock_admin_rows(db)

    if len(admin_ids) <= 1:
        last_admin_rejections.labels(operation=operation.value).inc()
        logger.warning("last_admin_protected", user_id=target.id, operation=operation.value)
        if operation == UserOperation.DELETE:
            raise LastAdminError("Cannot delete the last admin user")
        raise LastAdminError("Cannot change role of the last admin user")


async def update_user(db: AsyncSession, user_id: int, changes: UserUpdate) -> User:
    data = changes.model_dump(exclude_unset=True, exclude_none=True)
    new_role = data.get("role")

    if _removes_admin_role(UserOperation.UPDATE, new_role):
        await lock_admin_rows(db)
    user = await get_user(db, user_id, lock=True)
    await ensure_admin_remains(db, user, UserOperation.UPDATE, new_role=new_role)

    new_email = data.get("email")
    if new_email and new_email.lower() != user.email.lower():
        clash = await db.execute(
            select(User.id).where(func.lower(User.email) == new_email.lower(), User.id != user_id)
        )
        if clash.first() is not None:
            raise ConflictError("Email already registered")

    if new_email:
        data["email"] = new_email.lower()

    for field, value in data.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)
    logger.info("user_updated", user_id=user.id, fields=sorted(data))
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    await lock_admin_rows(db)
    user = await get_user(db, user_id, lock=True)
    await ensure_admin_remains(db, user, UserOperation.DELETE)
    await db.delete(user)
    await db.flush()
    logger.info("user_deleted", user_id=user_id)
