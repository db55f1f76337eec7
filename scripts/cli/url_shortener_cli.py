#!/usr/bin/env python3
"""
Command-line interface for URL shortener service.

Works directly against the store, so the server does not need to run.

Usage:
    python url_shortener_cli.py shorten <url> [--host HOST]
    python url_shortener_cli.py get <short_code>
    python url_shortener_cli.py info <short_code>
    python url_shortener_cli.py list [--limit N]
    python url_shortener_cli.py health
"""

import argparse
import asyncio
import json
import sys
import os
from typing import Optional

# Add parent directories to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from shortener.database import create_store
from shortener.service import URLShortenerService
from shortener.errors import ValidationError, NotFound, StoreError, GenerationError
from shortener.common.logging_config import setup_logging


class URLShortenerCLI:
    """Command-line interface for URL shortener."""

    def __init__(self, db_url: str, use_https: bool = False, verbose: bool = False):
        """Initialize CLI."""
        self.db_url = db_url
        self.use_https = use_https
        self.verbose = verbose
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service: Optional[URLShortenerService] = None

    async def initialize(self):
        """Open the store and build the service."""
        store = create_store(self.db_url, logger=self.logger)
        await store.initialize()
        self.service = URLShortenerService(
            store=store,
            logger=self.logger,
            use_https=self.use_https,
        )

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    @staticmethod
    def _print(payload: dict, error: bool = False) -> int:
        print(json.dumps(payload, indent=2), file=sys.stderr if error else sys.stdout)
        return 1 if error else 0

    async def shorten(self, url: str, host: str) -> int:
        """Shorten a URL."""
        try:
            short_url = await self.service.shorten(url, host)
        except ValidationError as e:
            return self._print({"success": False, "error": e.message}, error=True)
        except (StoreError, GenerationError) as e:
            return self._print({"success": False, "error": f"Error: {e.message}"}, error=True)

        return self._print({
            "success": True,
            "short_url": short_url,
            "original_url": url,
        })

    async def get(self, short_code: str) -> int:
        """Get original URL for a short code."""
        try:
            original_url = await self.service.resolve(short_code)
        except NotFound:
            return self._print({"success": False, "error": f"Short code '{short_code}' not found"}, error=True)
        except StoreError as e:
            return self._print({"success": False, "error": f"Error: {e.message}"}, error=True)

        return self._print({
            "success": True,
            "short_code": short_code,
            "original_url": original_url,
        })

    async def info(self, short_code: str) -> int:
        """Show the stored mapping for a short code."""
        try:
            mapping = await self.service.get_url_info(short_code)
        except NotFound:
            return self._print({"success": False, "error": f"Short code '{short_code}' not found"}, error=True)
        except StoreError as e:
            return self._print({"success": False, "error": f"Error: {e.message}"}, error=True)

        return self._print({"success": True, **mapping.to_dict()})

    async def list_urls(self, limit: int = 100) -> int:
        """List recent URLs."""
        try:
            mappings = await self.service.list_recent_urls(limit)
        except StoreError as e:
            return self._print({"success": False, "error": f"Error: {e.message}"}, error=True)

        return self._print({
            "success": True,
            "count": len(mappings),
            "urls": [mapping.to_dict() for mapping in mappings],
        })

    async def health(self) -> int:
        """Check store health."""
        health_status = await self.service.health_check()
        try:
            stats = await self.service.get_statistics()
        except StoreError as e:
            stats = {"error": e.message}

        self._print({
            "success": health_status["overall"],
            "health": health_status,
            "statistics": stats,
        })
        return 0 if health_status["overall"] else 1


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="URL Shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url --host sho.rt

  # Get original URL
  %(prog)s get 26GwX

  # Show the stored row
  %(prog)s info 26GwX

  # List recent URLs
  %(prog)s list --limit 10

  # Check health
  %(prog)s health
        """
    )

    parser.add_argument(
        "--db-url",
        default=os.getenv("DATABASE_URL", "sqlite:///urls.db"),
        help="Database URL (default: from DATABASE_URL env or sqlite:///urls.db)"
    )

    parser.add_argument(
        "--https",
        action="store_true",
        default=os.getenv("USE_HTTPS", "").lower() == "true",
        help="Print https:// short URLs (default: from USE_HTTPS env)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument(
        "--host",
        default=os.getenv("PUBLIC_HOST", "localhost:8080"),
        help="Host for the printed short URL (default: from PUBLIC_HOST env or localhost:8080)"
    )

    get_parser = subparsers.add_parser("get", help="Get original URL")
    get_parser.add_argument("short_code", help="Short code to lookup")

    info_parser = subparsers.add_parser("info", help="Show the stored mapping")
    info_parser.add_argument("short_code", help="Short code to lookup")

    list_parser = subparsers.add_parser("list", help="List recent URLs")
    list_parser.add_argument("--limit", type=int, default=100, help="Maximum number to return")

    subparsers.add_parser("health", help="Check store health")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    cli = URLShortenerCLI(
        db_url=args.db_url,
        use_https=args.https,
        verbose=args.verbose,
    )

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url, args.host)
        elif args.command == "get":
            return await cli.get(args.short_code)
        elif args.command == "info":
            return await cli.info(args.short_code)
        elif args.command == "list":
            return await cli.list_urls(args.limit)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
