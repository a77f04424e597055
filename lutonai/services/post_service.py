"""
Community posts. Slugs are derived from the title and made unique with a
numeric suffix; posts can be fetched by id or slug.
"""

import re
import unicodedata
from typing import Optional

from fastapi import UploadFile
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import NotFoundError
from lutonai.core.logging import get_logger
from lutonai.models.post import Post, PostCategory
from lutonai.schemas.post import PostCreate, PostUpdate
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.storage_service import delete_quietly

logger = get_logger(__name__)

UPLOAD_FOLDER = "posts"


def slugify(title: str) -> str:
    """URL slug for a title. Never all digits: those paths resolve as post ids."""
    value = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")[:195].rstrip("-")
    if not value:
        return "post"
    if value.isdigit():
        return f"post-{value}"
    return value


async def unique_slug(db: AsyncSession, title: str, exclude_id: Optional[int] = None) -> str:
    base = slugify(title)
    query = select(Post.slug).where(or_(Post.slug == base, Post.slug.like(f"{base}-%")))
    if exclude_id is not None:
        query = query.where(Post.id != exclude_id)
    taken = set((await db.execute(query)).scalars().all())

    slug, n = base, 2
    while slug in taken:
        slug = f"{base}-{n}"
        n += 1
    return slug


async def create_post(
    db: AsyncSession, data: PostCreate, thumbnail: UploadFile, storage: StorageBackend
) -> Post:
    thumbnail_url = await storage.save(thumbnail, UPLOAD_FOLDER)
    post = Post(
        title=data.title,
        slug=await unique_slug(db, data.title),
        content=data.content,
        category=data.category,
        tags=data.tags,
        thumbnail=thumbnail_url,
    )
    db.add(post)
    await db.flush()
    await db.refresh(post)
    logger.info("post_created", post_id=post.id, slug=post.slug)
    return post


async def get_post(db: AsyncSession, id_or_slug: str) -> Post:
    if id_or_slug.isdigit():
        post = await db.get(Post, int(id_or_slug))
    else:
        post = (await db.execute(select(Post).where(Post.slug == id_or_slug))).scalar_one_or_none()
    if post is None:
        raise NotFoundError("Post not found")
    return post


async def list_posts(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    category: Optional[PostCategory] = None,
    tag: Optional[str] = None,
) -> tuple[list[Post], int]:
    """Newest first. Tag filtering happens on the fetched page of JSON tags."""
    query = select(Post)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Post.title.ilike(pattern), Post.content.ilike(pattern)))
    if category is not None:
        query = query.where(Post.category == category)

    if tag:
        # JSON containment differs per backend; filter in Python
        result = await db.execute(query.order_by(Post.created_at.desc(), Post.id.desc()))
        matching = [p for p in result.scalars().all() if tag.lower() in (t.lower() for t in p.tags)]
        start = (page - 1) * limit
        return matching[start:start + limit], len(matching)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(Post.created_at.desc(), Post.id.desc()).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total


async def update_post(
    db: AsyncSession,
    post_id: int,
    changes: PostUpdate,
    storage: StorageBackend,
    thumbnail: Optional[UploadFile] = None,
) -> Post:
    post = await get_post(db, str(post_id))
    data = changes.model_dump(exclude_unset=True, exclude_none=True)

    if "title" in data and data["title"] != post.title:
        data["slug"] = await unique_slug(db, data["title"], exclude_id=post.id)

    old_thumbnail = None
    if thumbnail is not None:
        old_thumbnail = post.thumbnail
        data["thumbnail"] = await storage.save(thumbnail, UPLOAD_FOLDER)

    for field, value in data.items():
        setattr(post, field, value)
    await db.flush()
    await db.refresh(post)

    if old_thumbnail:
        await delete_quietly(storage, old_thumbnail)
    logger.info("post_updated", post_id=post.id, fields=sorted(data))
    return post


async def delete_post(db: AsyncSession, post_id: int, storage: StorageBackend) -> None:
    post = await get_post(db, str(post_id))
    thumbnail = post.thumbnail
    await db.delete(post)
    await db.flush()
    await delete_quietly(storage, thumbnail)
    logger.info("post_deleted", post_id=post_id)
