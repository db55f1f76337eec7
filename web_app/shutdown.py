"""Shutdown trigger listener.

A bare TCP connection to the internal shutdown port asks the server to
stop accepting requests and drain. The connection is closed right away;
nothing is read from it.
"""

import asyncio
import logging
from typing import Callable, Optional


class ShutdownListener:
    """Accept a single connection on the shutdown port, then fire on_shutdown once."""

    def __init__(
        self,
        on_shutdown: Callable[[], None],
        port: int = 8081,
        host: str = "127.0.0.1",
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize listener.

        Args:
            on_shutdown: Called once when the trigger connection arrives
            port: Port to listen on (0 picks a free port)
            host: Interface to bind
            logger: Optional logger
        """
        self.on_shutdown = on_shutdown
        self.port = port
        self.host = host
        self.logger = logger or logging.getLogger(__name__)
        self.triggered = asyncio.Event()
        self._server: Optional[asyncio.AbstractServer] = None

    async def start(self) -> None:
        """Bind the listener. A bind failure (OSError) propagates."""
        self._server = await asyncio.start_server(self._handle_connection, self.host, self.port)
        self.port = self._server.sockets[0].getsockname()[1]
        self.logger.info(f"Listening for shutdown signal on {self.host}:{self.port}")

    async def _handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError as e:
            self.logger.debug(f"Shutdown connection reset: {e}")

        if self.triggered.is_set():
            return

        self.triggered.set()
        # Stop listening; the one trigger has been received
        self._server.close()
        self.logger.info("Shutdown signal received")
        self.on_shutdown()

    async def wait(self) -> None:
        """Block until the trigger connection has been received."""
        await self.triggered.wait()

    async def close(self) -> None:
        """Stop listening."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
