"""SQLite implementation of the URL store.

sqlite3 is blocking, so every operation runs in a worker thread through
asyncio.to_thread and opens its own connection. SQLite serializes the
writers; the busy timeout makes concurrent writers wait instead of fail.
"""

import asyncio
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from .base import URLStoreBase
from .models import URLMapping
from ..errors import StoreError, DuplicateShortCodeError, DuplicateOriginalError


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS urls (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    original TEXT NOT NULL,
    short TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_original ON urls (original);
"""

UNIQUE_ORIGINAL_SQL = "CREATE UNIQUE INDEX IF NOT EXISTS idx_original_unique ON urls (original);"

SELECT_COLUMNS = "id, original, short, created_at"


def parse_sqlite_path(db_config: str) -> str:
    """Turn sqlite:///relative.db or sqlite:////abs.db (or a bare path) into a file path."""
    if db_config.startswith("sqlite:///"):
        return db_config[len("sqlite:///"):]
    if db_config.startswith("sqlite://"):
        return db_config[len("sqlite://"):]
    return db_config


def _row_to_mapping(row) -> URLMapping:
    created_at = datetime.fromisoformat(row[3]) if row[3] else None
    return URLMapping(id=row[0], original_url=row[1], short_code=row[2], created_at=created_at)


class URLShortenerSQLiteDB(URLStoreBase):
    """SQLite store, the default engine."""

    def __init__(
        self,
        db_config: str = "sqlite:///urls.db",
        enforce_unique_original: bool = True,
        busy_timeout_seconds: float = 10.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize SQLite store.

        Args:
            db_config: sqlite:///path/to/file.db or a plain file path
            enforce_unique_original: Add a unique index on the original URL
            busy_timeout_seconds: How long a connection waits on a locked database
            logger: Optional logger instance
        """
        super().__init__(db_config, enforce_unique_original)
        self.logger = logger or logging.getLogger(__name__)
        self.path = parse_sqlite_path(db_config)
        self.busy_timeout_seconds = busy_timeout_seconds

        if not self.path or self.path == ":memory:":
            raise StoreError("SQLite store needs a file path (in-memory databases are per connection)")

    @contextmanager
    def _get_connection(self):
        """Open a connection for one operation."""
        conn = sqlite3.connect(self.path, timeout=self.busy_timeout_seconds)
        try:
            yield conn
        finally:
            conn.close()

    def _translate_error(self, e: sqlite3.Error, action: str) -> StoreError:
        message = str(e)
        if isinstance(e, sqlite3.IntegrityError):
            if "urls.short" in message:
                return DuplicateShortCodeError()
            if "urls.original" in message:
                return DuplicateOriginalError()
        self.logger.error(f"Error {action}: {e}")
        return StoreError(f"Error {action}")

    # Blocking helpers (run in worker threads)

    def _initialize_sync(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with self._get_connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA_SQL)
            if self.enforce_unique_original:
                conn.execute(UNIQUE_ORIGINAL_SQL)
            conn.commit()

    def _insert_sync(self, original_url: str, short_code: str) -> int:
        created_at = datetime.now(timezone.utc).isoformat()
        with self._get_connection() as conn:
            cur = conn.execute(
                "INSERT INTO urls (original, short, created_at) VALUES (?, ?, ?)",
                (original_url, short_code, created_at),
            )
            conn.commit()
            return cur.lastrowid

    def _update_sync(self, row_id: int, short_code: str) -> int:
        with self._get_connection() as conn:
            cur = conn.execute("UPDATE urls SET short = ? WHERE id = ?", (short_code, row_id))
            conn.commit()
            return cur.rowcount

    def _fetchone_sync(self, query: str, params: tuple):
        with self._get_connection() as conn:
            return conn.execute(query, params).fetchone()

    def _fetchall_sync(self, query: str, params: tuple):
        with self._get_connection() as conn:
            return conn.execute(query, params).fetchall()

    async def _run(self, action: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as e:
            raise self._translate_error(e, action) from e

    # Store contract

    async def initialize(self) -> None:
        self.logger.info(f"Opening SQLite database at {self.path}")
        await self._run("creating schema", self._initialize_sync)
        self.logger.info("Table urls created or already exists")

    async def insert_url(self, original_url: str, short_code: str) -> int:
        row_id = await self._run("saving URL", self._insert_sync, original_url, short_code)
        self.logger.debug(f"Inserted row {row_id}: {short_code} -> {original_url}")
        return row_id

    async def update_short_code(self, row_id: int, short_code: str) -> None:
        updated = await self._run("updating short code", self._update_sync, row_id, short_code)
        if updated != 1:
            self.logger.error(f"Error updating short code: row {row_id} not found")
            raise StoreError(f"Row {row_id} not found")

    async def get_original_url(self, short_code: str) -> Optional[str]:
        row = await self._run(
            "looking up short code",
            self._fetchone_sync,
            "SELECT original FROM urls WHERE short = ?",
            (short_code,),
        )
        return row[0] if row else None

    async def get_url_mapping(self, short_code: str) -> Optional[URLMapping]:
        row = await self._run(
            "looking up short code",
            self._fetchone_sync,
            f"SELECT {SELECT_COLUMNS} FROM urls WHERE short = ?",
            (short_code,),
        )
        return _row_to_mapping(row) if row else None

    async def get_mapping_by_original(self, original_url: str) -> Optional[URLMapping]:
        row = await self._run(
            "looking up URL",
            self._fetchone_sync,
            f"SELECT {SELECT_COLUMNS} FROM urls WHERE original = ? ORDER BY id LIMIT 1",
            (original_url,),
        )
        return _row_to_mapping(row) if row else None

    async def count_urls(self, original_url: Optional[str] = None) -> int:
        if original_url is None:
            row = await self._run("counting URLs", self._fetchone_sync, "SELECT COUNT(*) FROM urls", ())
        else:
            row = await self._run(
                "counting URLs",
                self._fetchone_sync,
                "SELECT COUNT(*) FROM urls WHERE original = ?",
                (original_url,),
            )
        return row[0]

    async def list_recent_urls(self, limit: int = 100) -> List[URLMapping]:
        rows = await self._run(
            "listing URLs",
            self._fetchall_sync,
            f"SELECT {SELECT_COLUMNS} FROM urls ORDER BY id DESC LIMIT ?",
            (limit,),
        )
        return [_row_to_mapping(row) for row in rows]

    async def get_statistics(self) -> Dict[str, Any]:
        return {
            "total_urls": await self.count_urls(),
            "database": "sqlite",
        }

    async def health_check(self) -> bool:
        try:
            await self._run("running health check", self._fetchone_sync, "SELECT 1", ())
            return True
        except StoreError:
            return False

    async def close(self) -> None:
        # Connections are per operation; nothing stays open
        self.logger.debug("SQLite store closed")
