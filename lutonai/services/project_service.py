"""
Community project CRUD.
"""

from typing import Optional

from fastapi import UploadFile
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import NotFoundError
from lutonai.core.logging import get_logger
from lutonai.models.project import Project
from lutonai.schemas.project import ProjectCreate, ProjectUpdate
from lutonai.services.interfaces.storage import StorageBackend
from lutonai.services.storage_service import delete_quietly

logger = get_logger(__name__)

UPLOAD_FOLDER = "projects"


async def create_project(
    db: AsyncSession, data: ProjectCreate, thumbnail: UploadFile, storage: StorageBackend
) -> Project:
    thumbnail_url = await storage.save(thumbnail, UPLOAD_FOLDER)
    project = Project(
        title=data.title,
        description=data.description,
        status=data.status,
        partners=[p.model_dump() for p in data.partners],
        thumbnail=thumbnail_url,
    )
    db.add(project)
    await db.flush()
    await db.refresh(project)
    logger.info("project_created", project_id=project.id)
    return project


async def get_project(db: AsyncSession, project_id: int) -> Project:
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


async def list_projects(
    db: AsyncSession,
    page: int = 1,
    limit: int = 12,
    search: Optional[str] = None,
    status: Optional[str] = None,
) -> tuple[list[Project], int]:
    query = select(Project)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Project.title.ilike(pattern), Project.description.ilike(pattern)))
    if status:
        query = query.where(Project.status == status)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(Project.created_at.desc(), Project.id.desc()).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total


async def update_project(
    db: AsyncSession,
    project_id: int,
    changes: ProjectUpdate,
    storage: StorageBackend,
    thumbnail: Optional[UploadFile] = None,
) -> Project:
    project = await get_project(db, project_id)
    data = changes.model_dump(exclude_unset=True, exclude_none=True)

    old_thumbnail = None
    if thumbnail is not None:
        old_thumbnail = project.thumbnail
        data["thumbnail"] = await storage.save(thumbnail, UPLOAD_FOLDER)

    for field, value in data.items():
        setattr(project, field, value)
    await db.flush()
    await db.refresh(project)

    if old_thumbnail:
        await delete_quietly(storage, old_thumbnail)
    logger.info("project_updated", project_id=project.id, fields=sorted(data))
    return project


async def delete_project(db: AsyncSession, project_id: int, storage: StorageBackend) -> None:
    project = await get_project(db, project_id)
    thumbnail = project.thumbnail
    await db.delete(project)
    await db.flush()
    await delete_quietly(storage, thumbnail)
    logger.info("project_deleted", project_id=project_id)
