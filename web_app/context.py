"""Application context shared by every request handler."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from config import Config
from shortener.database import URLStoreBase, RedisCache, create_store
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.common.logging_config import get_logger


@dataclass
class AppContext:
    """Everything built once at startup: config, store, cache, service, templates."""

    config: Config
    logger: logging.Logger
    store: URLStoreBase
    service: URLShortenerService
    templates: Jinja2Templates
    cache: Optional[RedisCache] = None

    async def close(self) -> None:
        """Close store and cache connections."""
        await self.service.close()


def load_templates(template_dir: str) -> Jinja2Templates:
    """Load page templates; a missing index.html raises jinja2.TemplateNotFound."""
    templates = Jinja2Templates(directory=template_dir)
    templates.get_template("index.html")
    return templates


async def build_context(config: Config, logger: Optional[logging.Logger] = None) -> AppContext:
    """Open the store, connect the cache and wire up the service.

    Any failure propagates: the service does not start in a degraded mode.
    """
    logger = logger or get_logger()

    templates = load_templates(config.template_dir)
    logger.info(f"Templates loaded from {config.template_dir}")

    store = create_store(
        config.database_url,
        enforce_unique_original=config.enforce_unique_original,
        logger=logger,
    )
    await store.initialize()

    cache = None
    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    service = URLShortenerService(
        store=store,
        cache=cache,
        short_code_generator=ShortCodeGenerator(),
        logger=logger,
        use_https=config.use_https,
        max_collision_retries=config.max_collision_retries,
    )

    return AppContext(
        config=config,
        logger=logger,
        store=store,
        service=service,
        templates=templates,
        cache=cache,
    )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application context."""
    return request.app.state.context
