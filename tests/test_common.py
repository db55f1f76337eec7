"""Tests for common utilities."""

import json
import logging
from urllib.parse import urlsplit, parse_qs

from shortener.common.validators import is_valid_url
from shortener.common.headers import extract_forwarded_headers, resolve_public_host
from shortener.common.url_builder import build_short_url, build_home_redirect
from shortener.common.logging_config import setup_logging, get_logger


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        """Test valid URL validation."""
        valid, _ = is_valid_url("https://example.com")
        assert valid

        valid, _ = is_valid_url("http://example.com/path")
        assert valid

        valid, _ = is_valid_url("https://sub.example.com:8080/path?query=value#frag")
        assert valid

        valid, _ = is_valid_url("http://127.0.0.1/x")
        assert valid

    def test_invalid_urls(self):
        """Test invalid URL validation."""
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url(None)
        assert not valid

        valid, error = is_valid_url("not-a-url")
        assert not valid

        valid, error = is_valid_url("example.com/missing-scheme")
        assert not valid

        valid, error = is_valid_url("ftp://example.com")
        assert not valid
        assert "http" in error.lower()

        valid, error = is_valid_url("javascript:alert(1)")
        assert not valid

        valid, error = is_valid_url("http://")
        assert not valid
        assert "domain" in error.lower()

    def test_rejects_whitespace_and_bad_port(self):
        valid, _ = is_valid_url("https://exa mple.com")
        assert not valid

        valid, _ = is_valid_url("https://example.com/\n")
        assert not valid

        valid, error = is_valid_url("https://example.com:99999/")
        assert not valid
        assert "format" in error.lower()

    def test_too_long(self):
        valid, error = is_valid_url("https://example.com/" + "a" * 2048)
        assert not valid
        assert "too long" in error.lower()


class TestHeaders:
    """Test header utilities."""

    def test_extract_forwarded_headers(self):
        """Test forwarded header extraction."""
        headers = {
            "X-Forwarded-Host": "example.com",
            "X-Forwarded-For": "1.2.3.4",
        }

        result = extract_forwarded_headers(headers)
        assert set(result) == {"forwarded_host", "forwarded_for"}
        assert result["forwarded_host"] == "example.com"
        assert result["forwarded_for"] == "1.2.3.4"

    def test_public_host_prefers_forwarded_host(self):
        headers = {"Host": "internal:8080", "X-Forwarded-Host": "sho.rt, proxy.local"}
        assert resolve_public_host(headers, "fallback") == "sho.rt"

    def test_public_host_from_host_header(self):
        assert resolve_public_host({"host": "localhost:8080"}, "fallback") == "localhost:8080"

    def test_public_host_fallback(self):
        assert resolve_public_host({}, "localhost:9999") == "localhost:9999"


class TestURLBuilder:
    """Test URL building utilities."""

    def test_build_short_url_http(self):
        url = build_short_url(short_code="26GwX", host="localhost:8080")
        assert url == "http://localhost:8080/26GwX"

    def test_build_short_url_https(self):
        url = build_short_url(short_code="26GwX", host="sho.rt", use_https=True)
        assert url == "https://sho.rt/26GwX"

    def test_home_redirect_with_short_url(self):
        location = build_home_redirect(short_url="http://sho.rt/26GwX")
        parts = urlsplit(location)
        assert parts.path == "/"
        assert parse_qs(parts.query) == {"short": ["http://sho.rt/26GwX"]}

    def test_home_redirect_with_error(self):
        location = build_home_redirect(error="Short URL not found")
        assert location == "/?error=Short+URL+not+found"

    def test_home_redirect_plain(self):
        assert build_home_redirect() == "/"


class TestLogging:
    """Test logging setup."""

    def test_setup_logging_level(self):
        logger = setup_logging(level="WARNING")
        assert logger.name == "url_shortener"
        assert logger.level == logging.WARNING

    def test_setup_logging_is_idempotent(self):
        setup_logging(level="INFO")
        logger = setup_logging(level="INFO")
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "service.log"
        logger = setup_logging(level="INFO", log_file=str(log_file))
        logger.info("hello from test")
        for handler in logger.handlers:
            handler.flush()

        assert "hello from test" in log_file.read_text()
        setup_logging(level="INFO")

    def test_child_logger(self):
        parent = setup_logging(level="INFO")
        assert get_logger("url_shortener.web").parent is parent

    def test_json_lines(self, tmp_path):
        log_file = tmp_path / "service.json"
        logger = setup_logging(level="INFO", log_file=str(log_file), json_format=True)
        logger.info('Created short URL: 26GwY -> https://example.com/?q="quoted"')
        for handler in logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip())
        assert entry["level"] == "INFO"
        assert entry["logger"] == "url_shortener"
        assert entry["message"].endswith('?q="quoted"')
        setup_logging(level="INFO")
