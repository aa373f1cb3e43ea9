"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from taskflow.models.projects import Project
from taskflow.models.tasks import Task

__all__ = [
    "Project",
    "Task",
]
