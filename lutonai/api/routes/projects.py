"""
Project endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.security import require_admin
from lutonai.db.session import get_db
from lutonai.schemas.common import MessageResponse, Pagination, form_body
from lutonai.schemas.project import ProjectCreate, ProjectListResponse, ProjectResponse, ProjectUpdate
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.project_service import (
    create_project,
    delete_project,
    get_project,
    list_projects,
    update_project,
)
from lutonai.services.storage_service import get_storage

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=ProjectListResponse)
async def list_projects_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    status: Optional[str] = Query(None, max_length=50),
    db: AsyncSession = Depends(get_db),
):
    projects, total = await list_projects(db, page, limit, search, status)
    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects],
        pagination=Pagination.build(total, page, limit),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project_endpoint(project_id: int, db: AsyncSession = Depends(get_db)):
    return await get_project(db, project_id)


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_project_endpoint(
    data: ProjectCreate = Depends(form_body(ProjectCreate, files=("thumbnail",))),
    thumbnail: UploadFile = File(...),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    return await create_project(db, data, thumbnail, storage)


@router.put("/{project_id}", response_model=ProjectResponse, dependencies=[Depends(require_admin)])
async def update_project_endpoint(
    project_id: int,
    changes: ProjectUpdate = Depends(form_body(ProjectUpdate, files=("thumbnail",))),
    thumbnail: Optional[UploadFile] = File(None),
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    return await update_project(db, project_id, changes, storage, thumbnail)


@router.delete("/{project_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_project_endpoint(
    project_id: int,
    storage: StorageBackend = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    await delete_project(db, project_id, storage)
    return MessageResponse(message="Project deleted successfully")
