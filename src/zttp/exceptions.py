"""Zttp exceptions."""

from __future__ import annotations


class ZttpError(Exception):
    """Base exception for all Zttp failures."""

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.method is None or self.url is None:
            return str(self.args[0])
        return f"{self.args[0]} ({self.method} {self.url})"


class ConfigurationError(ZttpError, ValueError):
    """Raised when request options are malformed or mutually exclusive."""


class ConnectionFailure(ZttpError):
    """Raised when the transport could not complete the exchange.

    Never raised for a received HTTP status, 4xx and 5xx included.
    """


class TimeoutFailure(ConnectionFailure):
    """Raised when a request exceeds the configured timeout."""


class DecodeFailure(ZttpError, ValueError):
    """Raised by ``ZttpResponse.json()`` when the body is not valid JSON."""

    def __init__(self, message: str, *, body: str = "", cause: Exception | None = None) -> None:
        super().__init__(message, cause=cause)
        self.body = body
