"""Task list, create, update, and delete endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Query

from taskflow.api.deps import (
    DELETE_CONFIRMED_DEP,
    IDENTITY_DEP,
    TASK_REPOSITORY_DEP,
    load_snapshot,
)
from taskflow.schemas.common import OkResponse
from taskflow.schemas.tasks import TaskCreate, TaskListResponse, TaskRead, TaskUpdate
from taskflow.services.filtering import PriorityFilter, StatusFilter, TaskFilter, filter_tasks

if TYPE_CHECKING:
    from taskflow.core.auth import Identity
    from taskflow.services.repositories import TaskRepository

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    search: str = Query(default=""),
    status_filter: StatusFilter = Query(default="all", alias="status"),
    priority: PriorityFilter = Query(default="all"),
    project: str = Query(default="all"),
    identity: Identity = IDENTITY_DEP,
    repository: TaskRepository = TASK_REPOSITORY_DEP,
) -> TaskListResponse:
    """List the caller's tasks, newest first, narrowed by the given filters."""
    tasks = await load_snapshot(repository, identity)
    criteria = TaskFilter(
        search=search,
        status=status_filter,
        priority=priority,
        project=project,
    )
    items = filter_tasks(tasks, criteria)
    return TaskListResponse(items=items, total=len(items), filters_active=criteria.is_active)


@router.post("", response_model=TaskRead)
async def create_task(
    payload: TaskCreate,
    identity: Identity = IDENTITY_DEP,
    repository: TaskRepository = TASK_REPOSITORY_DEP,
) -> TaskRead | None:
    """Create a task owned by the caller."""
    return await repository.create(identity, payload)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    identity: Identity = IDENTITY_DEP,
    repository: TaskRepository = TASK_REPOSITORY_DEP,
) -> TaskRead | None:
    """Patch a task; ``updated_at`` is always refreshed."""
    return await repository.update(identity, task_id, payload)


@router.delete("/{task_id}", response_model=OkResponse, dependencies=[DELETE_CONFIRMED_DEP])
async def delete_task(
    task_id: UUID,
    identity: Identity = IDENTITY_DEP,
    repository: TaskRepository = TASK_REPOSITORY_DEP,
) -> OkResponse:
    """Delete a task after explicit confirmation."""
    await repository.delete(identity, task_id)
    return OkResponse()
