"""Project list, create, update, and delete endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter

from taskflow.api.deps import (
    DELETE_CONFIRMED_DEP,
    IDENTITY_DEP,
    PROJECT_REPOSITORY_DEP,
    load_snapshot,
)
from taskflow.schemas.common import OkResponse
from taskflow.schemas.projects import ProjectCreate, ProjectRead, ProjectUpdate

if TYPE_CHECKING:
    from taskflow.core.auth import Identity
    from taskflow.services.repositories import ProjectRepository

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectRead])
async def list_projects(
    identity: Identity = IDENTITY_DEP,
    repository: ProjectRepository = PROJECT_REPOSITORY_DEP,
) -> list[ProjectRead]:
    """List the caller's projects, newest first."""
    return await load_snapshot(repository, identity)


@router.post("", response_model=ProjectRead)
async def create_project(
    payload: ProjectCreate,
    identity: Identity = IDENTITY_DEP,
    repository: ProjectRepository = PROJECT_REPOSITORY_DEP,
) -> ProjectRead | None:
    """Create a project owned by the caller."""
    return await repository.create(identity, payload)


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: UUID,
    payload: ProjectUpdate,
    identity: Identity = IDENTITY_DEP,
    repository: ProjectRepository = PROJECT_REPOSITORY_DEP,
) -> ProjectRead | None:
    """Patch a project."""
    return await repository.update(identity, project_id, payload)


@router.delete(
    "/{project_id}",
    response_model=OkResponse,
    dependencies=[DELETE_CONFIRMED_DEP],
)
async def delete_project(
    project_id: UUID,
    identity: Identity = IDENTITY_DEP,
    repository: ProjectRepository = PROJECT_REPOSITORY_DEP,
) -> OkResponse:
    """Delete a project after explicit confirmation."""
    await repository.delete(identity, project_id)
    return OkResponse()
