"""Abstract base class for URL store implementations."""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any

from .models import URLMapping


class URLStoreBase(ABC):
    """Abstract base class for URL mapping persistence.

    Implementations translate driver errors into StoreError (or one of
    its duplicate subclasses). A missing row is never an error: lookups
    return None.
    """

    def __init__(self, db_config: str, enforce_unique_original: bool = True):
        """Initialize store.

        Args:
            db_config: Database connection string
            enforce_unique_original: Add a unique index on the original URL
        """
        self.db_config = db_config
        self.enforce_unique_original = enforce_unique_original

    @abstractmethod
    async def initialize(self) -> None:
        """Open the store and create the schema if missing.

        Raises:
            StoreError: If the store cannot be opened or the schema created
        """
        pass

    @abstractmethod
    async def insert_url(self, original_url: str, short_code: str) -> int:
        """Insert a new mapping.

        Args:
            original_url: The original long URL
            short_code: Short code (usually a temporary placeholder)

        Returns:
            The id assigned by the engine

        Raises:
            DuplicateShortCodeError: short_code already exists
            DuplicateOriginalError: original_url already exists (unique index enabled)
            StoreError: Any other failure
        """
        pass

    @abstractmethod
    async def update_short_code(self, row_id: int, short_code: str) -> None:
        """Replace the short code of an existing row.

        Raises:
            DuplicateShortCodeError: short_code already used by another row
            StoreError: Any other failure, including a missing row
        """
        pass

    @abstractmethod
    async def get_original_url(self, short_code: str) -> Optional[str]:
        """Get the original URL for a short code, or None."""
        pass

    @abstractmethod
    async def get_url_mapping(self, short_code: str) -> Optional[URLMapping]:
        """Get the complete mapping for a short code, or None."""
        pass

    @abstractmethod
    async def get_mapping_by_original(self, original_url: str) -> Optional[URLMapping]:
        """Get the complete mapping for an original URL, or None."""
        pass

    @abstractmethod
    async def count_urls(self, original_url: Optional[str] = None) -> int:
        """Count mappings, optionally only those for one original URL."""
        pass

    @abstractmethod
    async def list_recent_urls(self, limit: int = 100) -> List[URLMapping]:
        """List mappings, newest first."""
        pass

    @abstractmethod
    async def get_statistics(self) -> Dict[str, Any]:
        """Get store statistics (total_urls, database)."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the store answers a trivial query."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close database connections."""
        pass
