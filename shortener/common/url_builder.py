"""URL building utilities for URL shortener."""

from urllib.parse import quote_plus


def build_short_url(short_code: str, host: str, use_https: bool = False) -> str:
    """Build complete short URL.

    Args:
        short_code: The short code
        host: Public host, e.g. sho.rt or localhost:8080
        use_https: Use https instead of http

    Returns:
        Complete short URL, e.g. https://sho.rt/26GwX
    """
    scheme = "https" if use_https else "http"
    return f"{scheme}://{host.rstrip('/')}/{short_code}"


def build_home_redirect(short_url: str = None, error: str = None) -> str:
    """Build the landing page path carrying a short URL or an error message.

    Args:
        short_url: Short URL to display
        error: Error message to display

    Returns:
        Path such as /?short=http%3A%2F%2Fsho.rt%2F26GwX (form-style escaping)
    """
    if short_url is not None:
        return "/?short=" + quote_plus(short_url)
    if error is not None:
        return "/?error=" + quote_plus(error)
    return "/"
