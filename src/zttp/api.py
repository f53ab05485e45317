"""Module-level shortcuts that start a fresh ``PendingZttpRequest``.

    >>> import zttp
    >>> zttp.with_headers({"X-Trace": "1"}).get("https://example.com/get", {"page": 2})
"""

from __future__ import annotations

from typing import Any, Mapping

from .client import PendingZttpRequest
from .cookies import CookiesInput
from .headers import HeaderInput
from .request_options import BeforeSendHook, BodyFormat
from .response import ZttpResponse


def new() -> PendingZttpRequest:
    return PendingZttpRequest()


def get(url: str, query: Mapping[str, Any] | None = None) -> ZttpResponse:
    return new().get(url, query)


def delete(url: str, query: Mapping[str, Any] | None = None) -> ZttpResponse:
    return new().delete(url, query)


def post(url: str, payload: Any = None) -> ZttpResponse:
    return new().post(url, payload)


def put(url: str, payload: Any = None) -> ZttpResponse:
    return new().put(url, payload)


def patch(url: str, payload: Any = None) -> ZttpResponse:
    return new().patch(url, payload)


def with_options(options: Mapping[str, Any]) -> PendingZttpRequest:
    return new().with_options(options)


def with_headers(headers: HeaderInput) -> PendingZttpRequest:
    return new().with_headers(headers)


def accept(content_type: str) -> PendingZttpRequest:
    return new().accept(content_type)


def content_type(content_type: str) -> PendingZttpRequest:
    return new().content_type(content_type)


def body_format(body_format: BodyFormat | str) -> PendingZttpRequest:
    return new().body_format(body_format)


def as_json() -> PendingZttpRequest:
    return new().as_json()


def as_form_params() -> PendingZttpRequest:
    return new().as_form_params()


def as_multipart() -> PendingZttpRequest:
    return new().as_multipart()


def with_basic_auth(username: str, password: str) -> PendingZttpRequest:
    return new().with_basic_auth(username, password)


def with_digest_auth(username: str, password: str) -> PendingZttpRequest:
    return new().with_digest_auth(username, password)


def with_cookies(cookies: CookiesInput) -> PendingZttpRequest:
    return new().with_cookies(cookies)


def without_redirecting() -> PendingZttpRequest:
    return new().without_redirecting()


def without_verifying() -> PendingZttpRequest:
    return new().without_verifying()


def timeout(seconds: float) -> PendingZttpRequest:
    return new().timeout(seconds)


def before_sending(callback: BeforeSendHook) -> PendingZttpRequest:
    return new().before_sending(callback)
