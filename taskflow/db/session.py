"""Relational store access: async engine, session factory, and schema bootstrap."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from alembic.config import Config
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from taskflow import models as _models
from taskflow.core.config import PROJECT_ROOT, settings
from taskflow.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

# Table metadata must be registered before create_all or Alembic autogenerate.
_MODEL_REGISTRY = _models
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"
ALEMBIC_INI = PROJECT_ROOT / "alembic.ini"

logger = get_logger(__name__)


def _normalize_database_url(database_url: str) -> str:
    """Pin the async driver for bare ``postgresql://`` and ``sqlite://`` URLs."""
    scheme, sep, rest = database_url.partition("://")
    if not sep:
        return database_url
    if scheme in {"postgresql", "postgres"}:
        return f"postgresql+psycopg://{rest}"
    if scheme == "sqlite":
        return f"sqlite+aiosqlite://{rest}"
    return database_url


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


DATABASE_URL = _normalize_database_url(settings.database_url)
async_engine: AsyncEngine = create_async_engine(
    DATABASE_URL,
    pool_pre_ping=not _is_sqlite(DATABASE_URL),
)
async_session_maker = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def _alembic_config() -> Config:
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    # Keep the application's logging setup; alembic.ini would replace it.
    config.attributes["configure_logger"] = False
    return config


def run_migrations() -> None:
    """Upgrade the store schema to the latest Alembic revision."""
    from alembic import command

    logger.info("db.migrate.start url_scheme=%s", DATABASE_URL.split("://", 1)[0])
    command.upgrade(_alembic_config(), "head")
    logger.info("db.migrate.done")


async def create_schema(engine: AsyncEngine | None = None) -> None:
    """Create the ``projects`` and ``tasks`` tables straight from model metadata."""
    target = engine or async_engine
    async with target.connect() as conn, conn.begin():
        await conn.run_sync(SQLModel.metadata.create_all)


async def init_db() -> None:
    """Prepare the schema at startup.

    With ``DB_AUTO_MIGRATE`` on and revisions present, Alembic owns the schema.
    Otherwise tables are created from metadata, which is a no-op for tables that
    already exist.
    """
    if settings.db_auto_migrate and any((MIGRATIONS_DIR / "versions").glob("*.py")):
        await asyncio.to_thread(run_migrations)
        return
    if settings.db_auto_migrate:
        logger.warning("db.migrate.skipped reason=no_revisions")
    await create_schema()
    logger.info("db.schema.ready mode=create_all")


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await async_engine.dispose()
    logger.info("db.engine.disposed")


async def ping_store(session: AsyncSession) -> bool:
    """Return whether the store answers a trivial query."""
    try:
        await session.exec(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("db.ping.failed error=%s", exc.__class__.__name__)
        return False
    return True


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Return the shared session factory repositories open their sessions from."""
    return async_session_maker


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session, rolling back anything left uncommitted."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                try:
                    await session.rollback()
                except SQLAlchemyError:
                    logger.exception("db.session.rollback_failed")
