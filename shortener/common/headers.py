"""Header parsing utilities for URL shortener."""

from typing import Dict, Optional


def extract_forwarded_headers(headers: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Extract the X-Forwarded-Host and X-Forwarded-For headers.

    Args:
        headers: Request headers dictionary

    Returns:
        Dictionary with forwarded_host and forwarded_for
    """
    # Convert headers to lowercase for case-insensitive lookup
    headers_lower = {k.lower(): v for k, v in headers.items()}

    return {
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
    }


def resolve_public_host(headers: Dict[str, str], fallback_host: str) -> str:
    """Pick the host clients used to reach the service.

    Priority:
    1. X-Forwarded-Host (first entry when a proxy chain appended several)
    2. Host header
    3. Fallback host from config

    Args:
        headers: Request headers
        fallback_host: Host (with optional port) from configuration

    Returns:
        Host, e.g. "sho.rt" or "localhost:8080"
    """
    forwarded_host = extract_forwarded_headers(headers)["forwarded_host"]
    if forwarded_host:
        host = forwarded_host.split(",")[0].strip()
        if host:
            return host

    for k, v in headers.items():
        if k.lower() == "host" and v:
            return v.strip()

    return fallback_host
