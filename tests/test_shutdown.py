"""Tests for the shutdown listener and graceful server shutdown."""

import asyncio
import socket

import httpx
import pytest

from app import serve
from config import Config
from shortener.service import URLShortenerService
from web_app.shutdown import ShutdownListener
from scripts.deployment.trigger_shutdown import trigger_shutdown


@pytest.mark.asyncio
class TestShutdownListener:
    """Test the shutdown port."""

    async def test_connection_triggers_shutdown(self, logger):
        calls = []
        listener = ShutdownListener(on_shutdown=lambda: calls.append(1), port=0, logger=logger)
        await listener.start()

        reader, writer = await asyncio.open_connection("127.0.0.1", listener.port)
        await asyncio.wait_for(listener.wait(), timeout=5)
        writer.close()

        assert calls == [1]
        await listener.close()

    async def test_fires_once(self, logger):
        calls = []
        listener = ShutdownListener(on_shutdown=lambda: calls.append(1), port=0, logger=logger)
        await listener.start()
        port = listener.port

        _, writer = await asyncio.open_connection("127.0.0.1", port)
        await asyncio.wait_for(listener.wait(), timeout=5)
        writer.close()

        # The listener stops accepting after the first trigger
        with pytest.raises(OSError):
            await asyncio.open_connection("127.0.0.1", port)

        assert calls == [1]
        await listener.close()

    async def test_bind_failure(self, logger):
        taken = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        taken.bind(("127.0.0.1", 0))
        taken.listen()
        try:
            listener = ShutdownListener(
                on_shutdown=lambda: None,
                port=taken.getsockname()[1],
                logger=logger,
            )
            with pytest.raises(OSError):
                await listener.start()
        finally:
            taken.close()

    async def test_close_without_start(self, logger):
        listener = ShutdownListener(on_shutdown=lambda: None, port=0, logger=logger)
        await listener.close()
        assert not listener.triggered.is_set()

    async def test_trigger_script(self, logger):
        calls = []
        listener = ShutdownListener(on_shutdown=lambda: calls.append(1), port=0, logger=logger)
        await listener.start()

        await asyncio.to_thread(trigger_shutdown, "127.0.0.1", listener.port, 5.0)
        await asyncio.wait_for(listener.wait(), timeout=5)

        assert calls == [1]
        await listener.close()


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def wait_until_serving(base_url: str, timeout: float = 5.0) -> None:
    """Poll until uvicorn answers requests."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    async with httpx.AsyncClient(base_url=base_url) as client:
        while True:
            try:
                await client.get("/app/static/style.css")
                return
            except httpx.TransportError:
                if loop.time() > deadline:
                    raise
                await asyncio.sleep(0.05)


@pytest.fixture
def server_config(db_url) -> Config:
    """Config for a real server on free local ports."""
    return Config(
        database_url=db_url,
        host="127.0.0.1",
        port=free_port(),
        shutdown_host="127.0.0.1",
        shutdown_port=free_port(),
        shutdown_timeout_seconds=5,
    )


@pytest.mark.asyncio
class TestGracefulShutdown:
    """Test the running server against the shutdown port."""

    async def test_shutdown_port_stops_server(self, server_config, logger):
        base_url = f"http://127.0.0.1:{server_config.port}"
        server = asyncio.create_task(serve(server_config, logger))

        await wait_until_serving(base_url)
        async with httpx.AsyncClient(base_url=base_url) as client:
            response = await client.get("/zzzzz")
        assert response.status_code == 303

        await asyncio.to_thread(trigger_shutdown, "127.0.0.1", server_config.shutdown_port, 5.0)

        started = await asyncio.wait_for(server, timeout=server_config.shutdown_timeout_seconds + 5)
        assert started is True

        # No longer accepting connections
        async with httpx.AsyncClient(base_url=base_url) as client:
            with pytest.raises(httpx.TransportError):
                await client.get("/zzzzz")

    async def test_in_flight_request_completes(self, server_config, logger, monkeypatch):
        entered = asyncio.Event()

        async def slow_resolve(self, short_code):
            entered.set()
            await asyncio.sleep(0.5)
            return "https://example.com/slow"

        monkeypatch.setattr(URLShortenerService, "resolve", slow_resolve)

        base_url = f"http://127.0.0.1:{server_config.port}"
        server = asyncio.create_task(serve(server_config, logger))
        await wait_until_serving(base_url)

        async with httpx.AsyncClient(base_url=base_url) as client:
            pending = asyncio.create_task(client.get("/26GwY"))
            await asyncio.wait_for(entered.wait(), timeout=5)

            await asyncio.to_thread(trigger_shutdown, "127.0.0.1", server_config.shutdown_port, 5.0)
            response = await pending

        assert response.status_code == 301
        assert response.headers["location"] == "https://example.com/slow"
        assert await asyncio.wait_for(server, timeout=server_config.shutdown_timeout_seconds + 5) is True

    async def test_startup_failure_reported(self, server_config, logger, tmp_path):
        server_config.template_dir = str(tmp_path / "no-templates")

        started = await asyncio.wait_for(serve(server_config, logger), timeout=10)

        assert started is False
        # The shutdown listener was released as well
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("127.0.0.1", server_config.shutdown_port))
