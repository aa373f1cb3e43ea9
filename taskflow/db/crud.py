"""Commit helpers that translate SQLAlchemy failures into store errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from taskflow.core.errors import (
    ConstraintViolationError,
    InvalidRecordError,
    StoreError,
    StoreUnavailableError,
)

if TYPE_CHECKING:
    from pydantic import ValidationError
    from sqlmodel.ext.asyncio.session import AsyncSession


def translate_store_error(exc: SQLAlchemyError, *, action: str) -> StoreError:
    """Map a SQLAlchemy exception onto the store error taxonomy."""
    if isinstance(exc, IntegrityError):
        return ConstraintViolationError(f"{action} rejected by store: {exc.orig}")
    return StoreUnavailableError(f"{action} failed: {exc.__class__.__name__}")


def invalid_record_error(exc: ValidationError, *, entity: str) -> InvalidRecordError:
    """Report a stored row that no longer fits its read model."""
    fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
    return InvalidRecordError(f"Stored {entity} failed validation: {', '.join(fields)}")


async def commit(session: AsyncSession, *, action: str) -> None:
    """Commit the session, rolling back and raising a store error on failure."""
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise translate_store_error(exc, action=action) from exc
