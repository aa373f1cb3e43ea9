# ruff: noqa: INP001, SLF001
"""Database URL handling and schema bootstrap."""

from __future__ import annotations

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine

from taskflow.db import session as db_session


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgresql://u:p@db:5432/taskflow", "postgresql+psycopg://u:p@db:5432/taskflow"),
        ("postgres://u:p@db/taskflow", "postgresql+psycopg://u:p@db/taskflow"),
        ("postgresql+psycopg://u:p@db/taskflow", "postgresql+psycopg://u:p@db/taskflow"),
        ("sqlite:///./taskflow.db", "sqlite+aiosqlite:///./taskflow.db"),
        ("not-a-url", "not-a-url"),
    ],
)
def test_normalize_database_url_pins_async_drivers(raw: str, expected: str) -> None:
    assert db_session._normalize_database_url(raw) == expected


def test_alembic_config_points_at_repo_migrations() -> None:
    config = db_session._alembic_config()

    assert config.get_main_option("script_location") == str(db_session.MIGRATIONS_DIR)
    assert config.attributes["configure_logger"] is False


@pytest.mark.asyncio
async def test_create_schema_creates_task_and_project_tables() -> None:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    try:
        await db_session.create_schema(engine)
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    finally:
        await engine.dispose()

    assert {"projects", "tasks"} <= set(tables)
