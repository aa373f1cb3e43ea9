"""FastAPI application: probes, the ``/api/v1`` routers, and startup wiring."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from taskflow.api.auth import router as auth_router
from taskflow.api.dashboard import router as dashboard_router
from taskflow.api.projects import router as projects_router
from taskflow.api.tasks import router as tasks_router
from taskflow.core.config import settings
from taskflow.core.error_handling import install_error_handling
from taskflow.core.logging import configure_logging, get_logger
from taskflow.db.session import dispose_engine, get_session, init_db, ping_store
from taskflow.schemas.health import HealthStatusResponse, ReadinessStatusResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlmodel.ext.asyncio.session import AsyncSession

configure_logging()
logger = get_logger(__name__)
SESSION_DEP = Depends(get_session)
OPENAPI_TAGS = [
    {"name": "health", "description": "Liveness and readiness probes."},
    {"name": "auth", "description": "Signed-in identity details and sign-out."},
    {"name": "dashboard", "description": "Task counts, completion rate, and recent tasks."},
    {"name": "tasks", "description": "Filtered task listing and task create/update/delete."},
    {"name": "projects", "description": "Project listing and project create/update/delete."},
]


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Prepare the store schema on startup and release the pool on shutdown."""
    logger.info(
        "app.startup environment=%s auth_mode=%s delete_policy=%s",
        settings.environment,
        settings.auth_mode.value,
        settings.project_delete_policy.value,
    )
    await init_db()
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("app.shutdown")


app = FastAPI(
    title="TaskFlow API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
logger.info("app.cors origins=%s", len(cors_origins))

install_error_handling(app)


@app.get("/health", tags=["health"], response_model=HealthStatusResponse)
@app.get("/healthz", tags=["health"], response_model=HealthStatusResponse, include_in_schema=False)
def health() -> HealthStatusResponse:
    """Liveness probe; never touches the store."""
    return HealthStatusResponse(ok=True)


@app.get("/readyz", tags=["health"], response_model=ReadinessStatusResponse)
async def readyz(session: AsyncSession = SESSION_DEP) -> ReadinessStatusResponse:
    """Readiness probe; 503 until the relational store answers."""
    if not await ping_store(session):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ReadinessStatusResponse(ok=False, store="unavailable").model_dump(),
        )
    return ReadinessStatusResponse(ok=True, store="ok")


api_v1 = APIRouter(prefix="/api/v1")
for router in (auth_router, dashboard_router, tasks_router, projects_router):
    api_v1.include_router(router)
app.include_router(api_v1)
