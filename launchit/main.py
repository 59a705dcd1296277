"""FastAPI application factory for the launchit submission service."""
from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

import launchit.db.models  # noqa: F401  registers tables on the metadata
from launchit import __version__
from launchit.api.v1.router import api_router
from launchit.core.config import settings
from launchit.core.exceptions import LaunchitError
from launchit.core.logging import setup_logging
from launchit.db.base import Base
from launchit.db.session import create_engine, create_session_factory
from launchit.services.ai_enrichment import AIEnrichmentClient
from launchit.services.gateway import HttpObjectStorage, SqlProjectGateway
from launchit.services.limits import get_redis
from launchit.services.local_drafts import RedisLocalDraftStore
from launchit.services.media import MediaUploader
from launchit.services.sessions import SessionRegistry
from launchit.services.submission import SubmissionSession
from launchit.services.timers import AsyncioClock

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build shared clients on startup and release them on shutdown."""

    setup_logging()
    engine = create_engine()
    if settings.ENV in {"development", "test"}:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    http_client = httpx.AsyncClient()
    redis_client = await get_redis()

    gateway = SqlProjectGateway(create_session_factory(engine))
    media = MediaUploader(HttpObjectStorage(http_client), http_client)
    ai_client = AIEnrichmentClient(http_client)
    local_drafts = RedisLocalDraftStore(redis_client)
    clock = AsyncioClock()

    def _new_session(user_id: UUID, client_key: Optional[str]) -> SubmissionSession:
        return SubmissionSession(
            gateway,
            media,
            ai_client,
            clock,
            user_id=user_id,
            local_drafts=local_drafts,
            client_key=client_key,
        )

    registry = SessionRegistry(_new_session, idle_ttl_seconds=settings.sessions.idle_ttl_seconds)
    app.state.gateway = gateway
    app.state.registry = registry
    logger.info(f"{settings.PROJECT_NAME} started ({settings.ENV})")
    try:
        yield
    finally:
        app.state.registry.close_all()
        await http_client.aclose()
        await engine.dispose()


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _launchit_error(request: Request, exc: LaunchitError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def create_application() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Startup launch submission service",
        version=__version__,
        lifespan=lifespan,
    )
    application.add_exception_handler(HTTPException, _http_error)
    application.add_exception_handler(LaunchitError, _launchit_error)
    application.include_router(api_router, prefix=settings.API_PREFIX)

    @application.get("/health", tags=["health"])
    async def health():
        return {"status": "ok", "version": __version__}

    return application


app = create_application()
