"""Project model grouping a user's tasks."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from taskflow.core.time import utcnow

RUNTIME_ANNOTATION_TYPES = (datetime,)
DEFAULT_PROJECT_COLOR = "#3b82f6"


class Project(SQLModel, table=True):
    """User-owned project with a display color."""

    __tablename__ = "projects"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: str = Field(index=True)
    name: str
    description: str | None = None
    color: str = Field(default=DEFAULT_PROJECT_COLOR)
    created_at: datetime = Field(default_factory=utcnow, index=True)
