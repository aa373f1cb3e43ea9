"""Task list filtering for the tasks screen."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from taskflow.schemas.tasks import TaskRead

ALL = "all"
StatusFilter = Literal["all", "completed", "pending"]
PriorityFilter = Literal["all", "low", "medium", "high"]


@dataclass(frozen=True)
class TaskFilter:
    """Filter criteria; every field defaults to matching everything."""

    search: str = ""
    status: StatusFilter = ALL
    priority: PriorityFilter = ALL
    project: str = ALL

    @property
    def is_active(self) -> bool:
        return bool(
            self.search
            or self.status != ALL
            or self.priority != ALL
            or self.project != ALL,
        )


def matches_search(task: TaskRead, search: str) -> bool:
    """Case-insensitive substring match on title or description."""
    needle = search.lower()
    if needle in task.title.lower():
        return True
    return task.description is not None and needle in task.description.lower()


def matches_status(task: TaskRead, status: str) -> bool:
    if status == "completed":
        return task.completed
    if status == "pending":
        return not task.completed
    return status == ALL


def matches_project(task: TaskRead, project: str) -> bool:
    """Compare project ids as UUIDs, so letter case and hyphen layout do not matter."""
    if task.project_id is None:
        return False
    try:
        return task.project_id == UUID(project.strip())
    except ValueError:
        return False


def matches(task: TaskRead, criteria: TaskFilter) -> bool:
    """Return whether *task* passes every criterion."""
    if not matches_search(task, criteria.search):
        return False
    if not matches_status(task, criteria.status):
        return False
    if criteria.priority != ALL and task.priority != criteria.priority:
        return False
    if criteria.project != ALL:
        return matches_project(task, criteria.project)
    return True


def filter_tasks(tasks: Iterable[TaskRead], criteria: TaskFilter) -> list[TaskRead]:
    """Return the tasks matching *criteria*, preserving order."""
    return [task for task in tasks if matches(task, criteria)]
