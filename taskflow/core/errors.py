"""Store-level error types raised by repositories and store operations."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for failures reported by the relational store."""

    status_code = 503
    code = "store_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RecordNotFoundError(StoreError):
    """The id does not exist or belongs to another user."""

    status_code = 404
    code = "not_found"


class ConstraintViolationError(StoreError):
    """The store rejected the write (integrity or ownership constraint)."""

    status_code = 409
    code = "constraint_violation"


class StoreUnavailableError(StoreError):
    """Transient or connection-level failure talking to the store."""

    status_code = 503
    code = "store_unavailable"


class InvalidRecordError(StoreError):
    """A stored row failed read-model validation."""

    status_code = 502
    code = "invalid_record"
