"""Request logging middleware."""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable, Optional


def client_address(request: Request) -> str:
    """Original client address: first X-Forwarded-For hop, else the socket peer."""
    forwarded_for = getattr(request.state, "forwarded_for", None)
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request, at a level chosen by the status class.

    Server errors log at ERROR and client errors at WARNING, so a store
    outage stands out from a stream of mistyped short codes. Redirects
    carry their target.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("url_shortener.web")

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()

        response = await call_next(request)

        # Read after the inner middleware has stored the forwarded headers
        client = client_address(request)

        duration_ms = (time.perf_counter() - started) * 1000
        status_code = response.status_code
        line = f"{client} {request.method} {request.url.path} -> {status_code} ({duration_ms:.2f}ms)"

        location = response.headers.get("location")
        if location:
            line = f"{line} location={location}"

        if status_code >= 500:
            self.logger.error(line)
        elif status_code >= 400:
            self.logger.warning(line)
        else:
            self.logger.info(line)

        return response
