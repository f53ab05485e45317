"""Response wrapper with status predicates, lazy JSON and named extensions."""

from __future__ import annotations

import functools
import json
import threading
from typing import Any, Callable

from .cookies import CookieJar
from .exceptions import DecodeFailure
from .headers import Headers
from .transport import RawResponse

_UNSET = object()


class _MacroRegistry:
    """Process-wide registry of named response accessors."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._macros: dict[str, Callable[..., Any]] = {}

    def register(self, name: str, callback: Callable[..., Any]) -> None:
        if not name or not name.isidentifier() or name.startswith("_"):
            raise ValueError(f"Invalid macro name: {name!r}")
        if not callable(callback):
            raise TypeError("macro callback must be callable")
        with self._lock:
            self._macros[name] = callback

    def get(self, name: str) -> Callable[..., Any] | None:
        with self._lock:
            return self._macros.get(name)

    def remove(self, name: str) -> None:
        with self._lock:
            self._macros.pop(name, None)

    def clear(self) -> None:
        with self._lock:
            self._macros.clear()


_macros = _MacroRegistry()


class ZttpResponse:
    def __init__(self, raw: RawResponse, *, cookies: CookieJar | None = None) -> None:
        self.raw = raw
        self._request_cookies = cookies or CookieJar()
        self._decoded: Any = _UNSET
        self._cookies: CookieJar | None = None

    @classmethod
    def macro(cls, name: str, callback: Callable[..., Any]) -> None:
        """Register ``callback(response, *args, **kwargs)`` under ``name``.

        Registered names become callable on every response; the last
        registration for a name wins. Built-in attributes always take
        precedence over macros.
        """
        _macros.register(name, callback)

    @classmethod
    def has_macro(cls, name: str) -> bool:
        return _macros.get(name) is not None

    @classmethod
    def forget_macro(cls, name: str) -> None:
        _macros.remove(name)

    @classmethod
    def flush_macros(cls) -> None:
        _macros.clear()

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not found through normal lookup.
        if name.startswith("_"):
            raise AttributeError(name)
        callback = _macros.get(name)
        if callback is None:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute or macro {name!r}")
        return functools.partial(callback, self)

    def status(self) -> int:
        return self.raw.status_code

    def content(self) -> bytes:
        return self.raw.content

    def body(self) -> str:
        return self.raw.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        if self._decoded is _UNSET:
            try:
                self._decoded = json.loads(self.raw.content)
            except ValueError as exc:
                # UnicodeDecodeError is a ValueError too
                raise DecodeFailure(f"Response body is not valid JSON: {exc}", body=self.body(), cause=exc) from exc
        return self._decoded

    def header(self, name: str) -> str | None:
        return self.raw.headers.get(name)

    def headers(self) -> Headers:
        """Every header with only its first value kept."""
        return Headers((name, value) for name, value in self.raw.headers.items())

    def cookies(self) -> CookieJar:
        if self._cookies is None:
            jar = self._request_cookies
            for url, header in self.raw.set_cookies:
                jar = jar.with_set_cookie_headers([header], url)
            self._cookies = jar
        return self._cookies

    def effective_uri(self) -> str:
        return self.raw.url

    def is_success(self) -> bool:
        return 200 <= self.status() < 300

    def is_ok(self) -> bool:
        return self.is_success()

    def is_redirect(self) -> bool:
        return 300 <= self.status() < 400

    def is_client_error(self) -> bool:
        return 400 <= self.status() < 500

    def is_server_error(self) -> bool:
        return 500 <= self.status() < 600

    def __str__(self) -> str:
        return self.body()

    def __repr__(self) -> str:
        return f"<ZttpResponse [{self.status()}] {self.effective_uri()}>"
