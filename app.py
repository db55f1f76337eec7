#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: requests are handled concurrently by uvicorn/FastAPI on one
event loop; the SQLite store runs its blocking calls in worker threads.

Shutdown: a connection to SHUTDOWN_PORT (or SIGINT/SIGTERM) stops the
server from accepting new requests; in-flight requests get
SHUTDOWN_TIMEOUT_SECONDS to finish before they are cancelled.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - sqlite:///urls.db (default) or postgresql://...
    ENFORCE_UNIQUE_ORIGINAL - Unique index on original URLs (default true)
    REDIS_URL - Redis connection URL (optional)
    USE_HTTPS - 'true' to hand out https:// short URLs
    PUBLIC_HOST - Host for short URLs when the request has no Host header
    HOST / PORT - Listen address
    SHUTDOWN_PORT - Shutdown trigger port (0 disables)
    SHUTDOWN_TIMEOUT_SECONDS - Graceful drain window
    LOG_LEVEL - Logging level
"""

import asyncio
import logging
import sys

import uvicorn

from config import Config, load_config
from shortener.common.logging_config import setup_logging
from web_app import create_app
from web_app.shutdown import ShutdownListener


async def serve(config: Config, logger: logging.Logger) -> bool:
    """Run the HTTP server and the shutdown listener until shutdown completes.

    Returns:
        False if the server never started (store, schema or template failure)
    """
    app = create_app(config=config, logger=logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True,
        lifespan="on",
        timeout_graceful_shutdown=config.shutdown_timeout_seconds,
    )
    server = uvicorn.Server(uvicorn_config)

    def request_shutdown():
        logger.info(
            f"Shutting down server (in-flight requests get {config.shutdown_timeout_seconds}s)..."
        )
        server.should_exit = True

    listener = None
    if config.shutdown_port:
        listener = ShutdownListener(
            on_shutdown=request_shutdown,
            port=config.shutdown_port,
            host=config.shutdown_host,
            logger=logger,
        )
        await listener.start()

    try:
        logger.info(f"Server starting on {config.host}:{config.port}")
        await server.serve()
    finally:
        if listener:
            await listener.close()

    logger.info("Server exiting")
    return server.started


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump()}")

    try:
        started = asyncio.run(serve(config, logger))
    except OSError as e:
        logger.error(f"Failed to bind listener: {e}")
        sys.exit(1)

    # uvicorn returns without raising when application startup fails
    if not started:
        logger.error("Application startup failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
