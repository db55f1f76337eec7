"""Pytest configuration and fixtures."""

import pytest
import httpx
from typing import AsyncGenerator

from config import Config
from shortener.database.sqlite import URLShortenerSQLiteDB
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.common.logging_config import setup_logging
from web_app import create_app, build_context


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def db_url(tmp_path) -> str:
    """SQLite URL for a fresh database file."""
    return f"sqlite:///{tmp_path / 'urls.db'}"


@pytest.fixture
async def test_db(db_url, logger) -> AsyncGenerator[URLShortenerSQLiteDB, None]:
    """Create an initialized test database."""
    db = URLShortenerSQLiteDB(db_config=db_url, logger=logger)
    await db.initialize()

    yield db

    await db.close()


@pytest.fixture
def short_code_generator():
    """Create short code generator with the deployment alphabet and offset."""
    return ShortCodeGenerator()


@pytest.fixture
async def service(test_db, short_code_generator, logger) -> URLShortenerService:
    """Create service instance."""
    return URLShortenerService(
        store=test_db,
        cache=None,  # No cache for tests
        short_code_generator=short_code_generator,
        logger=logger,
    )


@pytest.fixture
def config(db_url) -> Config:
    """Configuration pointing at the test database."""
    return Config(
        database_url=db_url,
        redis_url=None,
        use_https=False,
        public_host="localhost:8080",
    )


@pytest.fixture
async def context(config, logger):
    """Application context built the way the lifespan builds it."""
    ctx = await build_context(config, logger)

    yield ctx

    await ctx.close()


@pytest.fixture
def app(config, context, logger):
    """Create test FastAPI app around the prebuilt context."""
    return create_app(config=config, context=context, logger=logger)


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]


class FakeCache:
    """In-memory stand-in for RedisCache."""

    def __init__(self):
        self.enabled = True
        self.data = {}
        self.closed = False

    async def get(self, short_code):
        return self.data.get(short_code)

    async def set(self, short_code, original_url, ttl=None):
        self.data[short_code] = original_url
        return True

    async def ping(self):
        return True

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_cache():
    return FakeCache()
