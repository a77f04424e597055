"""
Community post endpoints. Posts are addressable by id or slug.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.security import require_admin
from lutonai.db.session import get_db
from lutonai.models.post import PostCategory
from lutonai.schemas.common import MessageResponse, Pagination, form_body
from lutonai.schemas.post import PostCreate, PostListResponse, PostResponse, PostUpdate
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.post_service import create_post, delete_post, get_post, list_posts, update_post
from lutonai.services.storage_service import get_storage

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.get("", response_model=PostListResponse)
async def list_posts_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[PostCategory] = Query(None),
    tag: Optional[str] = Query(None, max_length=50),
    db: AsyncSession = Depends(get_db),
):
    posts, total = await list_posts(db, page, limit, search, category, tag)
    return PostListResponse(
        posts=[PostResponse.model_validate(p) for p in posts],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/{id_or_slug}", response_model=PostResponse)
async def get_post_endpoint(id_or_slug: str, db: AsyncSession = Depends(get_db)):
    return await get_post(db, id_or_slug)


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_post_endpoint(
    data: PostCreate = Depends(form_body(PostCreate, files=("thumbnail",))),
    thumbnail: UploadFile = File(...),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    return await create_post(db, data, thumbnail, storage)


@router.put("/{post_id}", response_model=PostResponse, dependencies=[Depends(require_admin)])
async def update_post_endpoint(
    post_id: int,
    changes: PostUpdate = Depends(form_body(PostUpdate, files=("thumbnail",))),
    thumbnail: Optional[UploadFile] = File(None),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    return await update_post(db, post_id, changes, storage, thumbnail)


@router.delete("/{post_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_post_endpoint(
    post_id: int,
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    await delete_post(db, post_id, storage)
    return MessageResponse(message="Post deleted successfully")
