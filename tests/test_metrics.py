# ruff: noqa: INP001
"""Dashboard metric computations."""

from __future__ import annotations

from datetime import UTC, date, datetime
from uuid import uuid4

from taskflow.schemas.projects import ProjectRead
from taskflow.schemas.tasks import TaskRead
from taskflow.services.metrics import (
    RECENT_TASKS_LIMIT,
    completion_rate,
    compute_dashboard_metrics,
    high_priority_pending_count,
    is_overdue,
    overdue_count,
)

NOW = datetime(2024, 5, 10, 9, 30, tzinfo=UTC)


def _task(
    *,
    completed: bool = False,
    priority: str = "medium",
    due_date: date | None = None,
    title: str = "Task",
) -> TaskRead:
    stamp = datetime(2024, 5, 1, 12, 0, 0)
    return TaskRead(
        id=uuid4(),
        user_id="user_alice",
        title=title,
        completed=completed,
        priority=priority,  # type: ignore[arg-type]
        due_date=due_date,
        created_at=stamp,
        updated_at=stamp,
    )


def _project(name: str) -> ProjectRead:
    return ProjectRead(
        id=uuid4(),
        user_id="user_alice",
        name=name,
        color="#3b82f6",
        created_at=datetime(2024, 5, 1, 12, 0, 0),
    )


def test_completion_rate_for_empty_list_is_zero() -> None:
    assert completion_rate([]) == 0


def test_completion_rate_rounds_to_whole_percent() -> None:
    tasks = [_task(completed=True), _task(completed=True), _task()]

    assert completion_rate(tasks) == 67


def test_completion_rate_rounds_halves_up() -> None:
    tasks = [_task(completed=True)] + [_task() for _ in range(7)]

    assert completion_rate(tasks) == 13


def test_high_priority_pending_excludes_completed() -> None:
    tasks = [
        _task(priority="high"),
        _task(priority="high", completed=True),
        _task(priority="low"),
    ]

    assert high_priority_pending_count(tasks) == 1


def test_overdue_uses_injected_clock_and_skips_completed() -> None:
    past = _task(due_date=date(2024, 5, 9))
    past_done = _task(due_date=date(2024, 5, 1), completed=True)
    future = _task(due_date=date(2024, 5, 11))
    undated = _task()

    assert is_overdue(past, now=NOW) is True
    assert is_overdue(past_done, now=NOW) is False
    assert is_overdue(future, now=NOW) is False
    assert is_overdue(undated, now=NOW) is False
    assert overdue_count([past, past_done, future, undated], now=NOW) == 1


def test_due_today_is_overdue_once_the_day_has_started() -> None:
    today = _task(due_date=date(2024, 5, 10))

    assert is_overdue(today, now=NOW) is True
    assert is_overdue(today, now=datetime(2024, 5, 10, 0, 0)) is False


def test_compute_dashboard_metrics_summarizes_lists() -> None:
    tasks = [_task(title=f"t{index}") for index in range(6)]
    tasks[0] = _task(title="t0", completed=True)
    tasks[1] = _task(title="t1", priority="high", due_date=date(2024, 5, 1))

    metrics = compute_dashboard_metrics(tasks, [_project("Work"), _project("Home")], now=NOW)

    assert metrics.total == 6
    assert metrics.completed == 1
    assert metrics.pending == 5
    assert metrics.high_priority_pending == 1
    assert metrics.overdue == 1
    assert metrics.completion_rate == 17
    assert metrics.project_count == 2
    assert [task.title for task in metrics.recent_tasks] == ["t0", "t1", "t2", "t3", "t4"]
    assert len(metrics.recent_tasks) == RECENT_TASKS_LIMIT
