#!/usr/bin/env python3
"""
Ask a running URL shortener to shut down gracefully.

Opens one connection to the shutdown port and closes it again. The
server stops accepting requests and drains the ones in flight.

Usage:
    python trigger_shutdown.py [--host 127.0.0.1] [--port 8081]
"""

import argparse
import os
import socket
import sys


def trigger_shutdown(host: str, port: int, timeout: float = 5.0) -> None:
    """Connect to the shutdown listener and hang up. Raises OSError if unreachable."""
    with socket.create_connection((host, port), timeout=timeout):
        pass


def main() -> int:
    parser = argparse.ArgumentParser(description="Trigger graceful shutdown of the URL shortener")
    parser.add_argument("--host", default="127.0.0.1", help="Shutdown listener host")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("SHUTDOWN_PORT", "8081")),
        help="Shutdown listener port (default: from SHUTDOWN_PORT env or 8081)"
    )
    args = parser.parse_args()

    try:
        trigger_shutdown(args.host, args.port)
    except OSError as e:
        print(f"Could not reach shutdown listener at {args.host}:{args.port}: {e}", file=sys.stderr)
        return 1

    print(f"Shutdown signal sent to {args.host}:{args.port}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
