"""Public schema exports shared across API route modules."""

from taskflow.schemas.auth import IdentityRead
from taskflow.schemas.common import OkResponse
from taskflow.schemas.dashboard import DashboardRead
from taskflow.schemas.projects import ProjectCreate, ProjectRead, ProjectUpdate
from taskflow.schemas.tasks import (
    TaskCreate,
    TaskListResponse,
    TaskProjectRef,
    TaskRead,
    TaskUpdate,
)

__all__ = [
    "DashboardRead",
    "IdentityRead",
    "OkResponse",
    "ProjectCreate",
    "ProjectRead",
    "ProjectUpdate",
    "TaskCreate",
    "TaskListResponse",
    "TaskProjectRef",
    "TaskRead",
    "TaskUpdate",
]
