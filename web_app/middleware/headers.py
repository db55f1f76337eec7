"""Forwarded headers middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from shortener.common.headers import extract_forwarded_headers, resolve_public_host


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Record the forwarded client address and the public host on request state."""

    def __init__(self, app, fallback_host: str = "localhost:8080"):
        super().__init__(app)
        self.fallback_host = fallback_host

    async def dispatch(self, request: Request, call_next: Callable):
        """Resolve the public host once per request."""
        headers = dict(request.headers)
        forwarded = extract_forwarded_headers(headers)

        request.state.forwarded_for = forwarded["forwarded_for"]
        request.state.public_host = resolve_public_host(headers, self.fallback_host)

        response = await call_next(request)
        return response
