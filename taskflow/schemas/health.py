"""Liveness and readiness probe payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from sqlmodel import SQLModel


class HealthStatusResponse(SQLModel):
    """Liveness payload; the process is up and serving."""

    ok: bool = Field(
        description="Indicates whether the probe check succeeded.",
        examples=[True],
    )


class ReadinessStatusResponse(HealthStatusResponse):
    """Readiness payload including the relational store check."""

    store: Literal["ok", "unavailable"] = Field(
        description="Result of a trivial query against the task store.",
        examples=["ok"],
    )
