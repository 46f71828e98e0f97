"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import Depends, FastAPI

from media_review import __version__
from media_review.config import Settings, get_settings
from media_review.logging import configure_logging
from media_review.middleware import BodySizeLimitMiddleware
from media_review.routes import router
from media_review.services.credentials import CredentialsProvider


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create application resources during startup and clean up on shutdown."""

    async with httpx.AsyncClient() as client:
        app.state.http_client = client
        app.state.credentials = CredentialsProvider()
        yield
        del app.state.http_client
        del app.state.credentials


def create_app() -> FastAPI:
    """Application factory."""

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Media Review Form",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    async def version(settings: Settings = Depends(get_settings)) -> dict[str, str]:
        return {
            "version": __version__,
            "environment": settings.environment,
            "model": settings.vertex_model,
        }

    app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.max_body_size)
    app.include_router(router)

    return app


app = create_app()
