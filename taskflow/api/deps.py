"""Reusable FastAPI dependencies for identity and repository wiring.

Routes get the signed-in identity and fresh repositories from here instead of
building them inline, so the view layer never reads ambient session state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Query, status

from taskflow.core.auth import AuthContext, Identity, get_auth_context
from taskflow.core.config import settings
from taskflow.db.session import get_session_maker
from taskflow.services.repositories import ProjectRepository, TaskRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import async_sessionmaker
    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskflow.services.repositories import ReadT, SnapshotRepository

AUTH_DEP = Depends(get_auth_context)
SESSION_MAKER_DEP = Depends(get_session_maker)


def require_identity(auth: AuthContext = AUTH_DEP) -> Identity:
    """Return the authenticated identity or reject the request."""
    if auth.identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return auth.identity


IDENTITY_DEP = Depends(require_identity)


def get_task_repository(
    session_maker: async_sessionmaker[AsyncSession] = SESSION_MAKER_DEP,
) -> TaskRepository:
    """Build a task repository for the current request."""
    return TaskRepository(session_maker)


def get_project_repository(
    session_maker: async_sessionmaker[AsyncSession] = SESSION_MAKER_DEP,
) -> ProjectRepository:
    """Build a project repository using the configured delete policy."""
    return ProjectRepository(session_maker, delete_policy=settings.project_delete_policy)


TASK_REPOSITORY_DEP = Depends(get_task_repository)
PROJECT_REPOSITORY_DEP = Depends(get_project_repository)


def require_delete_confirmation(
    confirm: bool = Query(
        default=False,
        description="Must be true; destructive deletes are never implicit.",
    ),
) -> None:
    """Refuse deletes the caller has not explicitly confirmed."""
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail="Deletion must be confirmed with confirm=true",
        )


DELETE_CONFIRMED_DEP = Depends(require_delete_confirmation)


async def load_snapshot(
    repository: SnapshotRepository[ReadT],
    identity: Identity,
) -> list[ReadT]:
    """Fetch the caller's list for a read route.

    A request-scoped repository starts with no snapshot, so when the fetch fails
    there is nothing stale to show and the store error is raised instead of
    answering with an empty list.
    """
    items = await repository.fetch_all(identity) or []
    if repository.last_error is not None and not items:
        raise repository.last_error
    return items
