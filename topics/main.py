"""FastAPI entrypoint for the topics browser."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from topics.api.routes_health import router as health_router
from topics.api.routes_pages import request_lang, router as pages_router
from topics.config import Settings, get_settings
from topics.exceptions import LoadError
from topics.services.kb.store import TopicStore
from topics.services.render.pages import render_error

logger = logging.getLogger(__name__)


def load_store(settings: Settings) -> TopicStore:
    """Blocking load of the configured source."""
    if not settings.source:
        raise LoadError("No topics source configured (set TOPICS_SOURCE)")
    return TopicStore.from_source(
        settings.source,
        fmt=settings.format,
        depth=settings.tree_depth,
        timeout=settings.request_timeout,
    )


def create_app(settings: Settings | None = None, store: TopicStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    css_href = f"{settings.base_path}/custom.css" if settings.css is not None else None

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        if application.state.store is None:
            application.state.store = await asyncio.to_thread(load_store, settings)
        yield

    application = FastAPI(
        title="Topics",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    application.include_router(health_router)
    application.include_router(pages_router)

    # Built once; request handlers only read these.
    application.state.settings = settings
    application.state.site_config = settings.site_config(css_href=css_href)
    application.state.store = store

    @application.exception_handler(StarletteHTTPException)
    async def html_error(request: Request, exc: StarletteHTTPException) -> HTMLResponse:
        config = request.app.state.site_config
        if exc.status_code >= 500:
            logger.error("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
        body = render_error(exc.status_code, config, request_lang(request, config))
        return HTMLResponse(body, status_code=exc.status_code)

    @application.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> HTMLResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        config = request.app.state.site_config
        body = render_error(500, config, request_lang(request, config))
        return HTMLResponse(body, status_code=500)

    return application


app = create_app()
