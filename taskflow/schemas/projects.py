"""Schemas for project create, patch, and read payloads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import field_validator
from sqlmodel import SQLModel

from taskflow.models.projects import DEFAULT_PROJECT_COLOR

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


def _clean_required(value: str | None, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError(f"{field} must not be empty")
    return cleaned


class ProjectCreate(SQLModel):
    """Fields a caller may supply when creating a project."""

    name: str
    description: str | None = None
    color: str = DEFAULT_PROJECT_COLOR

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _clean_required(value, "name")

    @field_validator("color")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        return _clean_required(value, "color")


class ProjectUpdate(SQLModel):
    """Partial project patch; only explicitly set fields are written."""

    name: str | None = None
    description: str | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str | None) -> str:
        return _clean_required(value, "name")

    @field_validator("color")
    @classmethod
    def _validate_color(cls, value: str | None) -> str:
        return _clean_required(value, "color")


class ProjectRead(SQLModel):
    """Project as returned by the store."""

    id: UUID
    user_id: str
    name: str
    description: str | None = None
    color: str
    created_at: datetime
