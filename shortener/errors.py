"""
Error classes for the URL shortener.

The workflows raise these and the HTTP layer maps them to responses.
"""


class ShortenerError(Exception):
    """
    Base error class.

    Attributes:
        message: Error message
    """
    message: str = "URL shortener error"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(ShortenerError):
    """Input URL is malformed."""
    message = "Invalid URL"


class NotFound(ShortenerError):
    """Short code does not resolve to any mapping."""
    message = "Short URL not found"


class StoreError(ShortenerError):
    """Persistence failure (insert, update or query)."""
    message = "Database error"


class DuplicateShortCodeError(StoreError):
    """Insert or update hit the unique constraint on the short code."""
    message = "Short code already exists"


class DuplicateOriginalError(StoreError):
    """Insert hit the unique constraint on the original URL."""
    message = "Original URL already exists"


class GenerationError(ShortenerError):
    """Entropy source failed while generating a temporary code."""
    message = "Error generating temporary code"
