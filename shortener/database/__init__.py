"""Database layer for URL shortener."""

import logging
from typing import Optional

from .base import URLStoreBase
from .sqlite import URLShortenerSQLiteDB
from .postgres import URLShortenerPostgresDB
from .cache import RedisCache
from .models import URLMapping


def create_store(
    database_url: str,
    enforce_unique_original: bool = True,
    logger: Optional[logging.Logger] = None,
) -> URLStoreBase:
    """Pick the store engine from the connection URL scheme.

    postgres:// and postgresql:// select PostgreSQL; anything else is
    treated as a SQLite URL or file path.
    """
    if database_url.startswith(("postgres://", "postgresql://")):
        return URLShortenerPostgresDB(
            db_config=database_url,
            enforce_unique_original=enforce_unique_original,
            logger=logger,
        )
    return URLShortenerSQLiteDB(
        db_config=database_url,
        enforce_unique_original=enforce_unique_original,
        logger=logger,
    )


__all__ = [
    "URLStoreBase",
    "URLShortenerSQLiteDB",
    "URLShortenerPostgresDB",
    "RedisCache",
    "URLMapping",
    "create_store",
]
