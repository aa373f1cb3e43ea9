"""Task model representing a user's work items."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from taskflow.core.time import utcnow

RUNTIME_ANNOTATION_TYPES = (date, datetime)
TASK_PRIORITIES = ("low", "medium", "high")
DEFAULT_TASK_PRIORITY = "medium"


class Task(SQLModel, table=True):
    """User-owned task with completion state, priority, and optional project link."""

    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType]
    __table_args__ = (
        CheckConstraint(
            "priority IN ('low', 'medium', 'high')",
            name="ck_tasks_priority",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: str = Field(index=True)
    # Plain column: what happens to it when the project goes away is a policy decision.
    project_id: UUID | None = Field(default=None, index=True)

    title: str
    description: str | None = None
    completed: bool = Field(default=False)
    priority: str = Field(default=DEFAULT_TASK_PRIORITY, index=True)
    due_date: date | None = None

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
