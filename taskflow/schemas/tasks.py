"""Schemas for task create, patch, and read payloads."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import field_validator
from sqlmodel import Field, SQLModel

RUNTIME_ANNOTATION_TYPES = (date, datetime, UUID)
TaskPriority = Literal["low", "medium", "high"]


def _clean_title(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("title must not be empty")
    return cleaned


class TaskCreate(SQLModel):
    """Fields a caller may supply when creating a task."""

    title: str
    description: str | None = None
    completed: bool = False
    priority: TaskPriority = "medium"
    due_date: date | None = None
    project_id: UUID | None = None

    @field_validator("title")
    @classmethod
    def _validate_title(cls, value: str) -> str:
        return _clean_title(value)


class TaskUpdate(SQLModel):
    """Partial task patch; only explicitly set fields are written."""

    title: str | None = None
    description: str | None = None
    completed: bool | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    project_id: UUID | None = None

    @field_validator("title")
    @classmethod
    def _validate_title(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("title must not be null")
        return _clean_title(value)

    @field_validator("completed", "priority")
    @classmethod
    def _reject_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("field must not be null")
        return value


class TaskProjectRef(SQLModel):
    """Read-only project projection joined onto fetched tasks."""

    name: str
    color: str


class TaskRead(SQLModel):
    """Task as returned by the store, with the optional project projection."""

    id: UUID
    user_id: str
    title: str
    description: str | None = None
    completed: bool
    priority: TaskPriority
    due_date: date | None = None
    project_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
    project: TaskProjectRef | None = Field(default=None)


class TaskListResponse(SQLModel):
    """Filtered task list for the tasks screen."""

    items: list[TaskRead]
    total: int
    filters_active: bool
