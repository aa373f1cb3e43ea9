"""Project store operations scoped to a single owner."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from taskflow.core.delete_policy import ProjectDeletePolicy
from taskflow.core.errors import RecordNotFoundError
from taskflow.core.logging import get_logger
from taskflow.core.time import utcnow
from taskflow.db import crud
from taskflow.models.projects import Project
from taskflow.models.tasks import Task
from taskflow.schemas.projects import ProjectRead
from taskflow.services.tasks import next_updated_at

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskflow.schemas.projects import ProjectCreate, ProjectUpdate

logger = get_logger(__name__)


def to_project_read(project: Project) -> ProjectRead:
    return ProjectRead.model_validate(project, from_attributes=True)


async def fetch_projects(session: AsyncSession, *, user_id: str) -> list[ProjectRead]:
    """Return every project owned by *user_id*, newest first."""
    statement = (
        select(Project)
        .where(col(Project.user_id) == user_id)
        .order_by(col(Project.created_at).desc())
    )
    try:
        projects = (await session.exec(statement)).all()
    except SQLAlchemyError as exc:
        raise crud.translate_store_error(exc, action="fetch projects") from exc
    try:
        return [to_project_read(project) for project in projects]
    except ValidationError as exc:
        raise crud.invalid_record_error(exc, entity="project") from exc


async def get_owned_project(
    session: AsyncSession,
    *,
    user_id: str,
    project_id: UUID,
) -> Project:
    """Load a project by id for its owner or raise not-found."""
    try:
        project = (
            await session.exec(
                select(Project).where(
                    col(Project.id) == project_id,
                    col(Project.user_id) == user_id,
                ),
            )
        ).first()
    except SQLAlchemyError as exc:
        raise crud.translate_store_error(exc, action="load project") from exc
    if project is None:
        raise RecordNotFoundError(f"Project {project_id} not found")
    return project


async def insert_project(
    session: AsyncSession,
    *,
    user_id: str,
    payload: ProjectCreate,
) -> Project:
    """Insert a project for *user_id* and return the stored row."""
    project = Project(**payload.model_dump(), user_id=user_id, created_at=utcnow())
    session.add(project)
    await crud.commit(session, action="create project")
    await session.refresh(project)
    return project


async def patch_project(
    session: AsyncSession,
    *,
    user_id: str,
    project_id: UUID,
    payload: ProjectUpdate,
) -> Project:
    """Apply the explicitly set fields of *payload* to an owned project."""
    project = await get_owned_project(session, user_id=user_id, project_id=project_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(project, key, value)
    session.add(project)
    await crud.commit(session, action="update project")
    await session.refresh(project)
    return project


async def remove_project(
    session: AsyncSession,
    *,
    user_id: str,
    project_id: UUID,
    policy: ProjectDeletePolicy = ProjectDeletePolicy.LEAVE_DANGLING,
) -> None:
    """Delete an owned project, handling its tasks according to *policy*."""
    project = await get_owned_project(session, user_id=user_id, project_id=project_id)
    linked_tasks = (
        col(Task.user_id) == user_id,
        col(Task.project_id) == project_id,
    )
    try:
        if policy == ProjectDeletePolicy.NULLIFY:
            for task in (await session.exec(select(Task).where(*linked_tasks))).all():
                task.project_id = None
                task.updated_at = next_updated_at(task.updated_at)
                session.add(task)
        elif policy == ProjectDeletePolicy.CASCADE:
            await session.exec(delete(Task).where(*linked_tasks))
        await session.delete(project)
    except SQLAlchemyError as exc:
        await session.rollback()
        raise crud.translate_store_error(exc, action="delete project") from exc
    await crud.commit(session, action="delete project")
    logger.info(
        "projects.delete project_id=%s policy=%s",
        project_id,
        policy.value,
    )
