"""Task store operations scoped to a single owner."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from taskflow.core.errors import ConstraintViolationError, RecordNotFoundError
from taskflow.core.time import utcnow
from taskflow.db import crud
from taskflow.models.projects import Project
from taskflow.models.tasks import Task
from taskflow.schemas.tasks import TaskProjectRef, TaskRead

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskflow.schemas.tasks import TaskCreate, TaskUpdate


def next_updated_at(previous: datetime) -> datetime:
    """Current time, bumped one microsecond past *previous* if the clock has not moved."""
    now = utcnow()
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def to_task_read(
    task: Task,
    *,
    project_name: str | None = None,
    project_color: str | None = None,
) -> TaskRead:
    """Build the read model, attaching the project projection when present."""
    read = TaskRead.model_validate(task, from_attributes=True)
    if project_name is not None and project_color is not None:
        read.project = TaskProjectRef(name=project_name, color=project_color)
    return read


async def fetch_tasks(session: AsyncSession, *, user_id: str) -> list[TaskRead]:
    """Return every task owned by *user_id*, newest first, with project name/color."""
    statement = (
        select(Task, Project.name, Project.color)
        .join(
            Project,
            and_(
                col(Project.id) == col(Task.project_id),
                col(Project.user_id) == user_id,
            ),
            isouter=True,
        )
        .where(col(Task.user_id) == user_id)
        .order_by(col(Task.created_at).desc())
    )
    try:
        rows = (await session.exec(statement)).all()
    except SQLAlchemyError as exc:
        raise crud.translate_store_error(exc, action="fetch tasks") from exc
    try:
        return [
            to_task_read(task, project_name=name, project_color=color)
            for task, name, color in rows
        ]
    except ValidationError as exc:
        raise crud.invalid_record_error(exc, entity="task") from exc


async def get_owned_task(
    session: AsyncSession,
    *,
    user_id: str,
    task_id: UUID,
) -> Task:
    """Load a task by id for its owner or raise not-found."""
    try:
        task = (
            await session.exec(
                select(Task).where(
                    col(Task.id) == task_id,
                    col(Task.user_id) == user_id,
                ),
            )
        ).first()
    except SQLAlchemyError as exc:
        raise crud.translate_store_error(exc, action="load task") from exc
    if task is None:
        raise RecordNotFoundError(f"Task {task_id} not found")
    return task


async def require_owned_project(
    session: AsyncSession,
    *,
    user_id: str,
    project_id: UUID,
) -> None:
    """Reject a project reference the owner does not hold."""
    try:
        project = (
            await session.exec(
                select(col(Project.id)).where(
                    col(Project.id) == project_id,
                    col(Project.user_id) == user_id,
                ),
            )
        ).first()
    except SQLAlchemyError as exc:
        raise crud.translate_store_error(exc, action="check project") from exc
    if project is None:
        raise ConstraintViolationError(f"Project {project_id} does not exist for this user")


async def insert_task(
    session: AsyncSession,
    *,
    user_id: str,
    payload: TaskCreate,
) -> Task:
    """Insert a task for *user_id* and return the stored row."""
    if payload.project_id is not None:
        await require_owned_project(session, user_id=user_id, project_id=payload.project_id)
    now = utcnow()
    task = Task(
        **payload.model_dump(),
        user_id=user_id,
        created_at=now,
        updated_at=now,
    )
    session.add(task)
    await crud.commit(session, action="create task")
    await session.refresh(task)
    return task


async def patch_task(
    session: AsyncSession,
    *,
    user_id: str,
    task_id: UUID,
    payload: TaskUpdate,
) -> Task:
    """Apply the explicitly set fields of *payload* and stamp ``updated_at``."""
    task = await get_owned_task(session, user_id=user_id, task_id=task_id)
    updates = payload.model_dump(exclude_unset=True)
    project_id = updates.get("project_id")
    if project_id is not None and project_id != task.project_id:
        await require_owned_project(session, user_id=user_id, project_id=project_id)
    for key, value in updates.items():
        setattr(task, key, value)

    task.updated_at = next_updated_at(task.updated_at)

    session.add(task)
    await crud.commit(session, action="update task")
    await session.refresh(task)
    return task


async def remove_task(
    session: AsyncSession,
    *,
    user_id: str,
    task_id: UUID,
) -> None:
    """Delete a task owned by *user_id*."""
    task = await get_owned_task(session, user_id=user_id, task_id=task_id)
    await session.delete(task)
    await crud.commit(session, action="delete task")
