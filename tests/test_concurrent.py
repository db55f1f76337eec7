"""Tests for concurrent shorten and redirect requests."""

import asyncio

import pytest

from shortener.service import URLShortenerService
from shortener.database.sqlite import URLShortenerSQLiteDB
from shortener.shortcode import encode


@pytest.mark.asyncio
class TestConcurrentRequests:
    """Test the service under concurrent load."""

    async def test_same_url_shares_one_row(self, service, test_db):
        url = "https://example.com/popular"

        codes = await asyncio.gather(*(service.create_short_code(url) for _ in range(20)))

        assert len(set(codes)) == 1
        assert await test_db.count_urls(url) == 1
        assert await service.resolve(codes[0]) == url

    async def test_distinct_urls_get_unique_codes(self, service, test_db):
        urls = [f"https://example.com/page/{i}" for i in range(50)]

        codes = await asyncio.gather(*(service.create_short_code(url) for url in urls))

        assert len(set(codes)) == len(urls)
        assert await test_db.count_urls() == len(urls)
        for url, code in zip(urls, codes):
            mapping = await test_db.get_url_mapping(code)
            assert mapping.original_url == url
            assert code == encode(mapping.id)

    async def test_concurrent_redirects(self, service, sample_urls):
        codes = [await service.create_short_code(url) for url in sample_urls]

        resolved = await asyncio.gather(*(service.resolve(code) for code in codes * 10))

        assert resolved == sample_urls * 10

    async def test_without_unique_original(self, db_url, logger):
        """Without the unique index every code still resolves to the same URL."""
        store = URLShortenerSQLiteDB(db_config=db_url, enforce_unique_original=False, logger=logger)
        await store.initialize()
        service = URLShortenerService(store=store, logger=logger)
        url = "https://example.com/best-effort"

        codes = await asyncio.gather(*(service.create_short_code(url) for _ in range(10)))

        for code in set(codes):
            assert await service.resolve(code) == url
        assert await store.count_urls(url) == len(set(codes))


@pytest.mark.asyncio
class TestConcurrentHTTP:
    """Test concurrent HTTP requests through the app."""

    async def test_concurrent_form_posts(self, client, context):
        responses = await asyncio.gather(
            *(client.post("/app/shorten", data={"url": "https://example.com/same"}) for _ in range(10))
        )

        assert {r.status_code for r in responses} == {303}
        assert len({r.headers["location"] for r in responses}) == 1
        assert await context.store.count_urls() == 1
