"""Business logic service for URL shortener."""

import logging
from typing import Optional, Dict, Any, List

from .shortcode import ShortCodeGenerator
from .errors import (
    ValidationError,
    NotFound,
    StoreError,
    DuplicateShortCodeError,
    DuplicateOriginalError,
)
from .database.base import URLStoreBase
from .database.cache import RedisCache
from .database.models import URLMapping
from .common.validators import is_valid_url
from .common.url_builder import build_short_url


class URLShortenerService:
    """Service layer for the shorten and redirect workflows.

    A new mapping is written in two steps: the row is inserted with a
    random temporary code (the short column is unique and not nullable),
    then the engine-assigned id is encoded and the row updated with the
    final code. The temporary code is never handed to a client.
    """

    def __init__(
        self,
        store: URLStoreBase,
        cache: Optional[RedisCache] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        use_https: bool = False,
        max_collision_retries: int = 5,
    ):
        """Initialize URL shortener service.

        Args:
            store: URL store instance
            cache: Optional redirect cache
            short_code_generator: Optional short code generator
            logger: Optional logger
            use_https: Compose short URLs with https instead of http
            max_collision_retries: Extra attempts when a temporary code is taken
        """
        self.store = store
        self.cache = cache
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.use_https = use_https
        self.max_collision_retries = max_collision_retries

    async def shorten(self, long_url: str, host: str) -> str:
        """Shorten a URL and compose the full short URL.

        Args:
            long_url: The original long URL
            host: Public host the short URL should point at

        Returns:
            Short URL, e.g. http://localhost:8080/26GwX

        Raises:
            ValidationError: long_url is not an absolute http(s) URL
            StoreError: Persistence failed
            GenerationError: No entropy for the temporary code
        """
        short_code = await self.create_short_code(long_url)
        return self.short_url_for(short_code, host)

    def short_url_for(self, short_code: str, host: str) -> str:
        """Compose the public short URL for a code."""
        return build_short_url(short_code, host, use_https=self.use_https)

    async def create_short_code(self, long_url: str) -> str:
        """Look up or create the short code for a URL.

        Shortening the same URL twice returns the same code and keeps a
        single row.

        Raises:
            ValidationError: long_url is not an absolute http(s) URL
            StoreError: Persistence failed
            GenerationError: No entropy for the temporary code
        """
        is_valid, error = is_valid_url(long_url)
        if not is_valid:
            self.logger.info(f"Rejected URL {long_url!r}: {error}")
            raise ValidationError(f"Invalid URL: {error}")

        mapping = await self.store.get_mapping_by_original(long_url)
        if mapping:
            short_code = await self._finalize(mapping)
            self.logger.debug(f"Reusing short code {short_code} for {long_url}")
        else:
            try:
                short_code = await self._allocate(long_url)
            except DuplicateOriginalError:
                # A concurrent request inserted the same URL first
                mapping = await self.store.get_mapping_by_original(long_url)
                if mapping is None:
                    raise StoreError("Mapping vanished after unique conflict")
                short_code = await self._finalize(mapping)
                self.logger.info(f"Lost insert race for {long_url}, reusing {short_code}")

        if self.cache:
            await self.cache.set(short_code, long_url)

        return short_code

    async def resolve(self, short_code: str) -> str:
        """Get the original URL for a short code.

        Raises:
            NotFound: No mapping has this short code
            StoreError: Persistence failed
        """
        if not self.generator.is_valid_format(short_code):
            self.logger.debug(f"Not a short code: {short_code!r}")
            raise NotFound()

        if self.cache:
            cached_url = await self.cache.get(short_code)
            if cached_url:
                self.logger.debug(f"Cache hit for {short_code}")
                return cached_url

        original_url = await self.store.get_original_url(short_code)
        if original_url is None:
            self.logger.warning(f"Short code not found: {short_code}")
            raise NotFound()

        if self.cache:
            await self.cache.set(short_code, original_url)

        self.logger.debug(f"Resolved {short_code} -> {original_url}")
        return original_url

    async def get_url_info(self, short_code: str) -> URLMapping:
        """Get the complete mapping for a short code.

        Raises:
            NotFound: No mapping has this short code
        """
        if not self.generator.is_valid_format(short_code):
            raise NotFound()

        mapping = await self.store.get_url_mapping(short_code)
        if mapping is None:
            raise NotFound()
        return mapping

    async def list_recent_urls(self, limit: int = 100) -> List[URLMapping]:
        return await self.store.list_recent_urls(limit)

    async def get_statistics(self) -> Dict[str, Any]:
        db_stats = await self.store.get_statistics()
        return {
            **db_stats,
            "cache_enabled": self.cache is not None and self.cache.enabled,
        }

    async def health_check(self) -> Dict[str, bool]:
        db_healthy = await self.store.health_check()
        cache_healthy = await self.cache.ping() if self.cache else True

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def _allocate(self, long_url: str) -> str:
        """Insert a row under a temporary code, then swap in the encoded id."""
        for attempt in range(self.max_collision_retries + 1):
            temp_code = self.generator.generate_temp_code()
            try:
                row_id = await self.store.insert_url(long_url, temp_code)
                break
            except DuplicateShortCodeError:
                self.logger.warning(f"Temporary code collision on attempt {attempt + 1}")
        else:
            raise StoreError("Unable to allocate a unique temporary code")

        short_code = self.generator.encode(row_id)
        await self.store.update_short_code(row_id, short_code)

        self.logger.info(f"Created short URL: {short_code} -> {long_url}")
        return short_code

    async def _finalize(self, mapping: URLMapping) -> str:
        """Return the code of an existing mapping, completing it if still temporary.

        The row may still carry its temporary code when the creating
        request has not reached its update yet, or died before it. The
        final code only depends on the id, so writing it here is safe.
        Any other stored code has been handed out already and is kept.
        """
        short_code = self.generator.encode(mapping.id)
        if mapping.short_code == short_code:
            return short_code

        if not self.generator.is_temp_code(mapping.short_code):
            self.logger.warning(
                f"Row {mapping.id} keeps its existing code {mapping.short_code} (expected {short_code})"
            )
            return mapping.short_code

        self.logger.warning(f"Row {mapping.id} still has a temporary code, finalizing")
        await self.store.update_short_code(mapping.id, short_code)
        return short_code

    async def close(self) -> None:
        """Close service connections."""
        await self.store.close()
        if self.cache:
            await self.cache.close()
