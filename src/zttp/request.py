"""The fully built request handed to pre-send hooks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

from .exceptions import ConfigurationError
from .headers import HeaderInput, Headers, HeaderValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZttpRequest:
    """Read-only view of a request about to be dispatched.

    Hooks produce a modified request through the ``with_*`` helpers, which
    return new instances.
    """

    method: str
    url: str
    headers: Headers = field(default_factory=Headers)
    content: bytes = b""

    def header(self, name: str) -> str | None:
        return self.headers.get(name)

    def body(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def with_url(self, url: str) -> "ZttpRequest":
        return replace(self, url=str(url))

    def with_method(self, method: str) -> "ZttpRequest":
        return replace(self, method=method.upper())

    def with_header(self, name: str, value: HeaderValue) -> "ZttpRequest":
        return replace(self, headers=self.headers.set(name, value))

    def with_headers(self, headers: HeaderInput) -> "ZttpRequest":
        return replace(self, headers=self.headers.merge(headers))

    def without_header(self, name: str) -> "ZttpRequest":
        return replace(self, headers=self.headers.remove(name))

    def with_body(self, content: bytes | str) -> "ZttpRequest":
        if isinstance(content, str):
            content = content.encode()
        return replace(self, content=bytes(content))


def run_before_sending_hooks(hooks: Iterable[Any], request: ZttpRequest) -> ZttpRequest:
    """Run ``hooks`` in order, threading replacements through.

    Exceptions raised by a hook propagate unchanged.
    """
    for hook in hooks:
        result = hook(request)
        if result is None:
            continue
        if not isinstance(result, ZttpRequest):
            raise ConfigurationError(
                f"before_sending hook {getattr(hook, '__name__', hook)!r} returned "
                f"{type(result).__name__}, expected ZttpRequest or None"
            )
        if result is not request:
            logger.debug("before_sending hook replaced request %s %s", result.method, result.url)
        request = result
    return request
