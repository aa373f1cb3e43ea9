"""Policy values for tasks that reference a deleted project."""

from __future__ import annotations

from enum import Enum


class ProjectDeletePolicy(str, Enum):
    """What happens to a project's tasks when the project is deleted."""

    LEAVE_DANGLING = "leave_dangling"
    NULLIFY = "nullify"
    CASCADE = "cascade"
