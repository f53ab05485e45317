"""Transport adapter performing the network exchange through httpx."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from .cookies import CookieJar
from .exceptions import ConnectionFailure, TimeoutFailure
from .headers import Headers
from .request_options import Auth, AuthScheme

logger = logging.getLogger(__name__)

DEFAULT_MAX_REDIRECTS = 5


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and body as received, after any redirects."""

    status_code: int
    headers: Headers = field(default_factory=Headers)
    content: bytes = b""
    url: str = ""
    # (url the header was received from, raw Set-Cookie value), every hop included
    set_cookies: tuple[tuple[str, str], ...] = ()


class TransportAdapter(Protocol):
    def execute(
        self,
        method: str,
        url: str,
        *,
        headers: Headers,
        body: bytes = b"",
        timeout: float,
        allow_redirects: bool = True,
        auth: Auth | None = None,
        verify: bool = True,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        cookies: CookieJar | None = None,
    ) -> RawResponse:
        ...


def _httpx_auth(auth: Auth | None) -> httpx.Auth | None:
    if auth is None:
        return None
    if auth.scheme is AuthScheme.DIGEST:
        return httpx.DigestAuth(auth.username, auth.password)
    return httpx.BasicAuth(auth.username, auth.password)


def _decode_raw_headers(raw: list[tuple[bytes, bytes]]) -> Headers:
    return Headers([(key.decode("latin-1"), value.decode("latin-1")) for key, value in raw])


class HttpxTransport:
    """Executes requests with a short-lived ``httpx.Client``.

    Each call gets its own client, seeded with the request's cookie jar, so
    httpx applies those cookies on every redirect hop without carrying them
    into an unrelated request. Pass ``transport`` to route
    requests through a specific ``httpx.BaseTransport`` (``httpx.MockTransport``
    in tests); it is shared by every call and left open.
    """

    def __init__(self, transport: httpx.BaseTransport | None = None, *, trust_env: bool = False) -> None:
        self._transport = transport
        self.trust_env = trust_env

    def _client(self, *, verify: bool, max_redirects: int, cookies: CookieJar | None) -> httpx.Client:
        kwargs: dict[str, object] = {
            "cookies": cookies.to_httpx() if cookies is not None else None,
            "verify": verify,
            "max_redirects": max_redirects,
            "trust_env": self.trust_env,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.Client(**kwargs)

    def execute(
        self,
        method: str,
        url: str,
        *,
        headers: Headers,
        body: bytes = b"",
        timeout: float,
        allow_redirects: bool = True,
        auth: Auth | None = None,
        verify: bool = True,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        cookies: CookieJar | None = None,
    ) -> RawResponse:
        client = self._client(verify=verify, max_redirects=max_redirects, cookies=cookies)
        try:
            response = client.request(
                method,
                url,
                headers=headers.multi_items(),
                content=body or None,
                timeout=timeout,
                follow_redirects=allow_redirects,
                auth=_httpx_auth(auth),
            )
        except httpx.TimeoutException as exc:
            logger.debug("Request timed out after %ss: %s %s", timeout, method, url)
            raise TimeoutFailure("Request timed out", method=method, url=url, cause=exc) from exc
        except httpx.RequestError as exc:
            logger.debug("Transport failure for %s %s: %r", method, url, exc)
            raise ConnectionFailure(f"Connection failed: {exc}", method=method, url=url, cause=exc) from exc
        finally:
            if self._transport is None:
                client.close()

        set_cookies = tuple(
            (str(hop.url), value)
            for hop in [*response.history, response]
            for value in hop.headers.get_list("set-cookie")
        )
        return RawResponse(
            status_code=response.status_code,
            headers=_decode_raw_headers(response.headers.raw),
            content=response.content,
            url=str(response.url),
            set_cookies=set_cookies,
        )
