"""Dashboard summary endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from taskflow.api.deps import (
    IDENTITY_DEP,
    PROJECT_REPOSITORY_DEP,
    TASK_REPOSITORY_DEP,
    load_snapshot,
)
from taskflow.schemas.dashboard import DashboardRead
from taskflow.services.metrics import compute_dashboard_metrics

if TYPE_CHECKING:
    from taskflow.core.auth import Identity
    from taskflow.services.repositories import ProjectRepository, TaskRepository

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardRead)
async def get_dashboard(
    identity: Identity = IDENTITY_DEP,
    tasks: TaskRepository = TASK_REPOSITORY_DEP,
    projects: ProjectRepository = PROJECT_REPOSITORY_DEP,
) -> DashboardRead:
    """Return task counts, completion rate, and the most recent tasks."""
    task_list = await load_snapshot(tasks, identity)
    project_list = await load_snapshot(projects, identity)
    metrics = compute_dashboard_metrics(task_list, project_list)
    return DashboardRead(
        total=metrics.total,
        completed=metrics.completed,
        pending=metrics.pending,
        high_priority_pending=metrics.high_priority_pending,
        overdue=metrics.overdue,
        completion_rate=metrics.completion_rate,
        project_count=metrics.project_count,
        recent_tasks=metrics.recent_tasks,
    )
