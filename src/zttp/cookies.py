"""Cookie jar shared between a response and later requests."""

from __future__ import annotations

from datetime import datetime, timezone
from http import cookiejar
from typing import Iterable, Iterator, Mapping, Union

import httpx

from .exceptions import ConfigurationError
from .models import Cookie

CookiesInput = Union["CookieJar", httpx.Cookies, Mapping[str, str], Iterable[Cookie], None]


def _to_model(cookie: cookiejar.Cookie) -> Cookie:
    expires = None
    if cookie.expires is not None:
        expires = datetime.fromtimestamp(cookie.expires, tz=timezone.utc)
    return Cookie(
        name=cookie.name,
        value=cookie.value or "",
        domain=cookie.domain.lstrip(".") or None,
        path=cookie.path or "/",
        expires=expires,
        secure=bool(cookie.secure),
        http_only=cookie.has_nonstandard_attr("HttpOnly") or cookie.has_nonstandard_attr("httponly"),
        same_site=cookie.get_nonstandard_attr("SameSite") or cookie.get_nonstandard_attr("samesite"),
        host_only=bool(cookie.domain) and not cookie.domain_specified,
    )


def _to_stored(cookie: Cookie) -> cookiejar.Cookie:
    domain = cookie.domain or ""
    if domain and not cookie.host_only:
        domain = "." + domain.lstrip(".")
    rest: dict[str, str | None] = {}
    if cookie.http_only:
        rest["HttpOnly"] = None
    if cookie.same_site:
        rest["SameSite"] = cookie.same_site
    return cookiejar.Cookie(
        version=0,
        name=cookie.name,
        value=cookie.value,
        port=None,
        port_specified=False,
        domain=domain,
        domain_specified=domain.startswith("."),
        domain_initial_dot=domain.startswith("."),
        path=cookie.path,
        path_specified=True,
        secure=cookie.secure,
        expires=int(cookie.expires.timestamp()) if cookie.expires is not None else None,
        discard=cookie.expires is None,
        comment=None,
        comment_url=None,
        rest=rest,
    )


class CookieJar(Mapping[str, str]):
    """Immutable cookie collection backed by ``httpx.Cookies``.

    As a mapping, each name resolves to the first matching cookie in jar
    order. Updates return a new jar; the receiver is never changed. Cookies
    given as a plain mapping carry no domain until :meth:`bound_to` ties
    them to the host of the request they are sent with.
    """

    __slots__ = ("_jar",)

    def __init__(self, cookies: CookiesInput = None) -> None:
        jar = httpx.Cookies()
        for cookie in _iter_cookies(cookies):
            jar.jar.set_cookie(cookie)
        self._jar = jar

    @classmethod
    def _wrap(cls, jar: httpx.Cookies) -> "CookieJar":
        instance = cls.__new__(cls)
        instance._jar = jar
        return instance

    def __getitem__(self, name: str) -> str:
        for cookie in self._jar.jar:
            if cookie.name == name:
                return cookie.value or ""
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for cookie in self._jar.jar:
            if cookie.name not in seen:
                seen.add(cookie.name)
                yield cookie.name

    def __len__(self) -> int:
        return len({cookie.name for cookie in self._jar.jar})

    def __repr__(self) -> str:
        return f"CookieJar({dict(self)!r})"

    @property
    def cookies(self) -> tuple[Cookie, ...]:
        return tuple(_to_model(cookie) for cookie in self._jar.jar)

    def get_cookie(self, name: str) -> Cookie | None:
        for cookie in self._jar.jar:
            if cookie.name == name:
                return _to_model(cookie)
        return None

    def to_httpx(self) -> httpx.Cookies:
        """A mutable copy for seeding an ``httpx.Client``."""
        return httpx.Cookies(self._jar)

    def with_cookie(self, cookie: Cookie) -> "CookieJar":
        """Return a jar where ``cookie`` replaces any cookie with the same identity.

        An expired cookie removes the stored one instead.
        """
        jar = self.to_httpx()
        stored = _to_stored(cookie)
        if not cookie.is_expired():
            jar.jar.set_cookie(stored)
        elif any(
            (existing.domain, existing.path, existing.name) == (stored.domain, stored.path, stored.name)
            for existing in jar.jar
        ):
            jar.jar.clear(stored.domain, stored.path, stored.name)
        return CookieJar._wrap(jar)

    def merge(self, cookies: CookiesInput) -> "CookieJar":
        jar = self.to_httpx()
        for cookie in _iter_cookies(cookies):
            jar.jar.set_cookie(cookie)
        return CookieJar._wrap(jar)

    def bound_to(self, url: str | httpx.URL) -> "CookieJar":
        """Return a jar where cookies without a domain belong to ``url``'s host only."""
        if all(cookie.domain for cookie in self._jar.jar):
            return self
        host = httpx.URL(url).host.lower()
        if "." not in host:
            # http.cookiejar files dotless hosts under "<host>.local"
            host += ".local"
        jar = httpx.Cookies()
        for cookie in self._jar.jar:
            if not cookie.domain:
                model = _to_model(cookie).model_copy(update={"domain": host, "host_only": True})
                cookie = _to_stored(model)
            jar.jar.set_cookie(cookie)
        return CookieJar._wrap(jar)

    def extract(self, response: httpx.Response) -> "CookieJar":
        """Return a jar updated with every ``Set-Cookie`` of ``response``.

        ``response.request`` decides which domains and paths the cookies bind
        to, and a cookie set again by the server replaces the stored one.
        """
        jar = self.bound_to(response.request.url).to_httpx()
        jar.extract_cookies(response)
        return CookieJar._wrap(jar)

    def with_set_cookie_headers(self, headers: Iterable[str], url: str | httpx.URL) -> "CookieJar":
        response = httpx.Response(
            200,
            headers=[("set-cookie", header) for header in headers],
            request=httpx.Request("GET", url),
        )
        return self.extract(response)

    def cookie_header(self, url: str | httpx.URL) -> str | None:
        """Build the ``Cookie`` header value to send to ``url``."""
        request = httpx.Request("GET", url)
        self._jar.set_cookie_header(request)
        return request.headers.get("cookie")


def _iter_cookies(cookies: CookiesInput) -> Iterator[cookiejar.Cookie]:
    if cookies is None:
        return
    if isinstance(cookies, CookieJar):
        yield from cookies._jar.jar
        return
    if isinstance(cookies, httpx.Cookies):
        yield from cookies.jar
        return
    if isinstance(cookies, Mapping):
        for name, value in cookies.items():
            if not isinstance(name, str) or not name:
                raise ConfigurationError("cookie names must be non-empty strings")
            yield _to_stored(Cookie(name=name, value=str(value), domain=None, host_only=False))
        return
    for cookie in cookies:
        if not isinstance(cookie, Cookie):
            raise ConfigurationError(f"Expected Cookie instances, got {type(cookie).__name__}")
        if not cookie.is_expired():
            yield _to_stored(cookie)
