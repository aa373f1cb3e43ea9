"""Dashboard counts derived from fetched task and project lists."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, time

from taskflow.schemas.projects import ProjectRead
from taskflow.schemas.tasks import TaskRead

RECENT_TASKS_LIMIT = 5


@dataclass(frozen=True)
class DashboardMetrics:
    total: int
    completed: int
    pending: int
    high_priority_pending: int
    overdue: int
    completion_rate: int
    project_count: int
    recent_tasks: list[TaskRead] = field(default_factory=list)


def completed_count(tasks: Sequence[TaskRead]) -> int:
    return sum(1 for task in tasks if task.completed)


def pending_count(tasks: Sequence[TaskRead]) -> int:
    return sum(1 for task in tasks if not task.completed)


def high_priority_pending_count(tasks: Sequence[TaskRead]) -> int:
    return sum(1 for task in tasks if task.priority == "high" and not task.completed)


def is_overdue(task: TaskRead, *, now: datetime) -> bool:
    """A pending task is overdue once the start of its due date (UTC) has passed."""
    if task.completed or task.due_date is None:
        return False
    due_at = datetime.combine(task.due_date, time.min, tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return due_at < now


def overdue_count(tasks: Sequence[TaskRead], *, now: datetime | None = None) -> int:
    current = now or datetime.now(UTC)
    return sum(1 for task in tasks if is_overdue(task, now=current))


def completion_rate(tasks: Sequence[TaskRead]) -> int:
    """Completed share of all tasks in whole percent, halves rounded up; 0 for an empty list."""
    if not tasks:
        return 0
    return math.floor(completed_count(tasks) * 100 / len(tasks) + 0.5)


def compute_dashboard_metrics(
    tasks: Sequence[TaskRead],
    projects: Sequence[ProjectRead],
    *,
    now: datetime | None = None,
) -> DashboardMetrics:
    """Compute every dashboard figure at *now* (wall clock when omitted)."""
    return DashboardMetrics(
        total=len(tasks),
        completed=completed_count(tasks),
        pending=pending_count(tasks),
        high_priority_pending=high_priority_pending_count(tasks),
        overdue=overdue_count(tasks, now=now),
        completion_rate=completion_rate(tasks),
        project_count=len(projects),
        recent_tasks=list(tasks[:RECENT_TASKS_LIMIT]),
    )
