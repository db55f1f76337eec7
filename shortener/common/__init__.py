"""Common utilities for URL shortener."""

from .validators import is_valid_url
from .headers import extract_forwarded_headers, resolve_public_host
from .url_builder import build_short_url, build_home_redirect
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "extract_forwarded_headers",
    "resolve_public_host",
    "build_short_url",
    "build_home_redirect",
    "setup_logging",
    "get_logger",
]
