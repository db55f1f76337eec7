"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from config import Config
from shortener.common.logging_config import get_logger
from .api import api_router
from .web import web_router
from .context import AppContext, build_context
from .middleware.headers import ForwardedHeadersMiddleware
from .middleware.logging import LoggingMiddleware


def create_app(
    config: Config,
    context: Optional[AppContext] = None,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Configuration instance
        context: Prebuilt application context. When omitted, the lifespan
            builds one on startup and closes it on shutdown.
        logger: Optional logger

    Returns:
        Configured FastAPI app
    """
    logger = logger or get_logger()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_context = app.state.context is None
        if owns_context:
            logger.info("Starting URL shortener service...")
            app.state.context = await build_context(config, logger)
            logger.info("Service started successfully")

        yield

        if owns_context:
            logger.info("Shutting down URL shortener service...")
            await app.state.context.close()
            app.state.context = None
            logger.info("Service stopped")

    app = FastAPI(
        title="URL Shortener",
        description="Shortens long URLs and redirects short codes to them",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.context = context

    app.add_middleware(ForwardedHeadersMiddleware, fallback_host=config.public_host)
    app.add_middleware(LoggingMiddleware, logger=get_logger("url_shortener.web"))

    app.mount("/app/static", StaticFiles(directory=config.static_dir), name="static")

    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])

    return app
