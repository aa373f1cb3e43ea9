"""Identity payloads for the settings screen."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class IdentityRead(SQLModel):
    """Read-only account details of the signed-in user."""

    id: str
    email: str | None = None
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None
