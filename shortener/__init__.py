"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator, encode, generate_temp_code
from .service import URLShortenerService
from .errors import (
    ShortenerError,
    ValidationError,
    NotFound,
    StoreError,
    GenerationError,
)

__all__ = [
    "ShortCodeGenerator",
    "URLShortenerService",
    "encode",
    "generate_temp_code",
    "ShortenerError",
    "ValidationError",
    "NotFound",
    "StoreError",
    "GenerationError",
]
