"""Dashboard summary response schema."""

from __future__ import annotations

from sqlmodel import Field, SQLModel

from taskflow.schemas.tasks import TaskRead


class DashboardRead(SQLModel):
    """Counts and recent tasks rendered on the dashboard."""

    total: int
    completed: int
    pending: int
    high_priority_pending: int
    overdue: int
    completion_rate: int = Field(description="Completed share of all tasks, in whole percent.")
    project_count: int
    recent_tasks: list[TaskRead]
