"""Repositories holding the latest per-user snapshot of tasks and projects.

Every mutation is followed by a full re-fetch ("write-then-reload") instead of
patching the in-memory list, so after any successful mutation the snapshot is
exactly what the store returned. The snapshot is replaced wholesale, never
merged.

All operations take the caller's identity explicitly. Without one they return
``None`` and leave both the store and the snapshot untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Generic, TypeVar

from taskflow.core.delete_policy import ProjectDeletePolicy
from taskflow.core.errors import StoreError
from taskflow.core.logging import get_logger
from taskflow.schemas.projects import ProjectCreate, ProjectRead, ProjectUpdate
from taskflow.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from taskflow.services import projects as project_store
from taskflow.services import tasks as task_store

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import async_sessionmaker
    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskflow.core.auth import Identity

logger = get_logger(__name__)
ReadT = TypeVar("ReadT", TaskRead, ProjectRead)


class SnapshotRepository(Generic[ReadT]):
    """Shared fetch/reload bookkeeping for one entity type."""

    entity = "records"

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker
        self.items: list[ReadT] = []
        self.loading = False
        self.last_error: StoreError | None = None

    async def _fetch(self, session: AsyncSession, *, user_id: str) -> list[ReadT]:
        raise NotImplementedError

    async def fetch_all(self, identity: Identity | None) -> list[ReadT] | None:
        """Re-fetch the owner's full list; on failure keep the previous snapshot.

        The failure is kept on ``last_error`` until the next successful fetch.
        """
        if identity is None:
            return None
        self.loading = True
        try:
            async with self._session_maker() as session:
                items = await self._fetch(session, user_id=identity.id)
        except StoreError as exc:
            self.last_error = exc
            logger.exception(
                "%s.fetch.failed user_id=%s kept=%s",
                self.entity,
                identity.id,
                len(self.items),
            )
            return self.items
        finally:
            self.loading = False
        self.items = items
        self.last_error = None
        logger.debug("%s.fetch user_id=%s count=%s", self.entity, identity.id, len(items))
        return items

    async def refetch(self, identity: Identity | None) -> list[ReadT] | None:
        return await self.fetch_all(identity)

    def find(self, record_id: UUID) -> ReadT | None:
        """Look up a record in the current snapshot."""
        for item in self.items:
            if item.id == record_id:
                return item
        return None

    def _log_failure(self, action: str, identity: Identity, exc: StoreError) -> None:
        logger.warning(
            "%s.%s.failed user_id=%s code=%s error=%s",
            self.entity,
            action,
            identity.id,
            exc.code,
            exc.message,
        )


class TaskRepository(SnapshotRepository[TaskRead]):
    """Tasks of one user, each joined with its project's name and color."""

    entity = "tasks"

    @property
    def tasks(self) -> list[TaskRead]:
        return self.items

    async def _fetch(self, session: AsyncSession, *, user_id: str) -> list[TaskRead]:
        return await task_store.fetch_tasks(session, user_id=user_id)

    async def create(
        self,
        identity: Identity | None,
        fields: TaskCreate | Mapping[str, object],
    ) -> TaskRead | None:
        """Insert a task owned by *identity*, reload, and return the created record."""
        if identity is None:
            return None
        payload = fields if isinstance(fields, TaskCreate) else TaskCreate.model_validate(fields)
        try:
            async with self._session_maker() as session:
                task = await task_store.insert_task(session, user_id=identity.id, payload=payload)
        except StoreError as exc:
            self._log_failure("create", identity, exc)
            raise
        await self.fetch_all(identity)
        return self.find(task.id) or task_store.to_task_read(task)

    async def update(
        self,
        identity: Identity | None,
        task_id: UUID,
        patch: TaskUpdate | Mapping[str, object],
    ) -> TaskRead | None:
        """Apply a partial patch (always stamping ``updated_at``) and reload."""
        if identity is None:
            return None
        payload = patch if isinstance(patch, TaskUpdate) else TaskUpdate.model_validate(patch)
        try:
            async with self._session_maker() as session:
                task = await task_store.patch_task(
                    session,
                    user_id=identity.id,
                    task_id=task_id,
                    payload=payload,
                )
        except StoreError as exc:
            self._log_failure("update", identity, exc)
            raise
        await self.fetch_all(identity)
        return self.find(task.id) or task_store.to_task_read(task)

    async def delete(self, identity: Identity | None, task_id: UUID) -> None:
        """Delete an owned task and reload."""
        if identity is None:
            return
        try:
            async with self._session_maker() as session:
                await task_store.remove_task(session, user_id=identity.id, task_id=task_id)
        except StoreError as exc:
            self._log_failure("delete", identity, exc)
            raise
        await self.fetch_all(identity)


class ProjectRepository(SnapshotRepository[ProjectRead]):
    """Projects of one user."""

    entity = "projects"

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        *,
        delete_policy: ProjectDeletePolicy = ProjectDeletePolicy.LEAVE_DANGLING,
    ) -> None:
        super().__init__(session_maker)
        self.delete_policy = delete_policy

    @property
    def projects(self) -> list[ProjectRead]:
        return self.items

    async def _fetch(self, session: AsyncSession, *, user_id: str) -> list[ProjectRead]:
        return await project_store.fetch_projects(session, user_id=user_id)

    async def create(
        self,
        identity: Identity | None,
        fields: ProjectCreate | Mapping[str, object],
    ) -> ProjectRead | None:
        """Insert a project owned by *identity*, reload, and return the created record."""
        if identity is None:
            return None
        payload = (
            fields if isinstance(fields, ProjectCreate) else ProjectCreate.model_validate(fields)
        )
        try:
            async with self._session_maker() as session:
                project = await project_store.insert_project(
                    session,
                    user_id=identity.id,
                    payload=payload,
                )
        except StoreError as exc:
            self._log_failure("create", identity, exc)
            raise
        await self.fetch_all(identity)
        return self.find(project.id) or project_store.to_project_read(project)

    async def update(
        self,
        identity: Identity | None,
        project_id: UUID,
        patch: ProjectUpdate | Mapping[str, object],
    ) -> ProjectRead | None:
        """Apply a partial patch to an owned project and reload."""
        if identity is None:
            return None
        payload = (
            patch if isinstance(patch, ProjectUpdate) else ProjectUpdate.model_validate(patch)
        )
        try:
            async with self._session_maker() as session:
                project = await project_store.patch_project(
                    session,
                    user_id=identity.id,
                    project_id=project_id,
                    payload=payload,
                )
        except StoreError as exc:
            self._log_failure("update", identity, exc)
            raise
        await self.fetch_all(identity)
        return self.find(project.id) or project_store.to_project_read(project)

    async def delete(self, identity: Identity | None, project_id: UUID) -> None:
        """Delete an owned project (tasks handled per ``delete_policy``) and reload."""
        if identity is None:
            return
        try:
            async with self._session_maker() as session:
                await project_store.remove_project(
                    session,
                    user_id=identity.id,
                    project_id=project_id,
                    policy=self.delete_policy,
                )
        except StoreError as exc:
            self._log_failure("delete", identity, exc)
            raise
        await self.fetch_all(identity)
