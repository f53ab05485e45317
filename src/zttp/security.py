"""URL validation applied before a request is built."""

from __future__ import annotations

from urllib.parse import urlparse

from .exceptions import ConfigurationError


def validate_url(url: str) -> None:
    """Reject URLs the transport cannot dispatch."""
    if "\x00" in url:
        raise ConfigurationError("Invalid URL")
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ConfigurationError(f"URL must include scheme and host: {url!r}")
    if parsed.scheme not in {"http", "https"}:
        raise ConfigurationError(f"Unsupported URL scheme: {parsed.scheme}")
