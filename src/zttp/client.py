"""Fluent request builder and verb dispatch."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

import httpx

from .config import get_config
from .cookies import CookiesInput
from .encoding import encode_body, flatten_params
from .exceptions import ConfigurationError
from .headers import Headers, HeaderInput
from .request import ZttpRequest, run_before_sending_hooks
from .request_options import Auth, AuthScheme, BeforeSendHook, BodyFormat, RequestOptions
from .response import ZttpResponse
from .security import validate_url
from .transport import HttpxTransport, TransportAdapter

logger = logging.getLogger(__name__)

READ_METHODS = frozenset({"GET", "HEAD", "DELETE", "OPTIONS"})

# Values never written to the debug log.
SECRET_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "x-api-key"})


def _merge_url_query(url: str, query: list[tuple[str, str]]) -> str:
    if not query:
        return url
    return str(httpx.URL(url).copy_merge_params(query))


def _basic_authorization(auth: Auth) -> str:
    token = base64.b64encode(f"{auth.username}:{auth.password}".encode()).decode("ascii")
    return f"Basic {token}"


@dataclass(frozen=True)
class PendingZttpRequest:
    """A request configuration waiting for a verb.

    Every configuration method returns a new instance, so a partially
    configured request can be reused as the base of several others.
    """

    options: RequestOptions = field(default_factory=RequestOptions)
    transport: TransportAdapter | None = None

    def _with(self, options: RequestOptions) -> "PendingZttpRequest":
        return replace(self, options=options)

    def with_options(self, options: Mapping[str, Any]) -> "PendingZttpRequest":
        return self._with(self.options.merge(options))

    def with_headers(self, headers: HeaderInput) -> "PendingZttpRequest":
        return self._with(self.options.with_headers(headers))

    def accept(self, content_type: str) -> "PendingZttpRequest":
        return self.with_headers({"Accept": content_type})

    def content_type(self, content_type: str) -> "PendingZttpRequest":
        return self.with_headers({"Content-Type": content_type})

    def body_format(self, body_format: BodyFormat | str) -> "PendingZttpRequest":
        return self._with(self.options.with_body_format(body_format))

    def as_json(self) -> "PendingZttpRequest":
        return self.body_format(BodyFormat.JSON)

    def as_form_params(self) -> "PendingZttpRequest":
        return self.body_format(BodyFormat.FORM)

    def as_multipart(self) -> "PendingZttpRequest":
        return self.body_format(BodyFormat.MULTIPART)

    def with_basic_auth(self, username: str, password: str) -> "PendingZttpRequest":
        return self.with_options({"auth": Auth(AuthScheme.BASIC, username, password)})

    def with_digest_auth(self, username: str, password: str) -> "PendingZttpRequest":
        return self.with_options({"auth": Auth(AuthScheme.DIGEST, username, password)})

    def with_cookies(self, cookies: CookiesInput) -> "PendingZttpRequest":
        return self.with_options({"cookies": cookies})

    def without_redirecting(self) -> "PendingZttpRequest":
        return self.with_options({"allow_redirects": False})

    def with_redirecting(self) -> "PendingZttpRequest":
        return self.with_options({"allow_redirects": True})

    def without_verifying(self) -> "PendingZttpRequest":
        return self.with_options({"verify": False})

    def timeout(self, seconds: float) -> "PendingZttpRequest":
        return self.with_options({"timeout": seconds})

    def before_sending(self, callback: BeforeSendHook) -> "PendingZttpRequest":
        return self.with_options({"before_send_hooks": [callback]})

    def with_transport(self, transport: TransportAdapter) -> "PendingZttpRequest":
        return replace(self, transport=transport)

    def get(self, url: str, query: Mapping[str, Any] | None = None) -> ZttpResponse:
        return self.send("GET", url, query=query)

    def delete(self, url: str, query: Mapping[str, Any] | None = None) -> ZttpResponse:
        return self.send("DELETE", url, query=query)

    def post(self, url: str, payload: Any = None) -> ZttpResponse:
        return self.send("POST", url, payload=payload)

    def put(self, url: str, payload: Any = None) -> ZttpResponse:
        return self.send("PUT", url, payload=payload)

    def patch(self, url: str, payload: Any = None) -> ZttpResponse:
        return self.send("PATCH", url, payload=payload)

    def build_request(
        self,
        method: str,
        url: str,
        *,
        query: Mapping[str, Any] | None = None,
        payload: Any = None,
    ) -> ZttpRequest:
        """Materialize the request exactly as hooks will see it."""
        method = method.upper()
        url = str(url)
        validate_url(url)
        options = self.options
        config = get_config()

        params = [(key, value) for key, value in options.query]
        if method in READ_METHODS:
            extra = payload if payload is not None else query
            if extra is not None and not isinstance(extra, Mapping):
                raise ConfigurationError(f"{method} payload must be a mapping of query parameters")
            if extra:
                params.extend(extra.items())
            encoded_body = None
        else:
            if query:
                params.extend(query.items())
            body = payload if payload is not None else options.body
            encoded_body = encode_body(options.body_format, body)
        url = _merge_url_query(url, flatten_params(dict(params)))

        headers = Headers({"User-Agent": config.user_agent, "Accept": config.accept}).merge(options.headers)
        if encoded_body is not None and encoded_body.content_type:
            if encoded_body.force_content_type:
                headers = headers.set("Content-Type", encoded_body.content_type)
            else:
                headers = headers.setdefault("Content-Type", encoded_body.content_type)
        elif encoded_body is None:
            headers = headers.remove("Content-Type")

        if options.auth is not None and options.auth.scheme is AuthScheme.BASIC:
            headers = headers.set("Authorization", _basic_authorization(options.auth))

        if options.cookies:
            cookie_header = options.cookies.cookie_header(url)
            if cookie_header:
                headers = headers.set("Cookie", cookie_header)

        return ZttpRequest(
            method=method,
            url=url,
            headers=headers,
            content=encoded_body.content if encoded_body is not None else b"",
        )

    def send(
        self,
        method: str,
        url: str,
        *,
        query: Mapping[str, Any] | None = None,
        payload: Any = None,
    ) -> ZttpResponse:
        options = self.options
        config = get_config()
        request = self.build_request(method, url, query=query, payload=payload)
        request = run_before_sending_hooks(options.before_send_hooks, request)
        timeout = options.timeout if options.timeout is not None else config.timeout
        cookies = options.cookies.bound_to(request.url) if options.cookies else None

        logged_headers = [
            (name, "[REDACTED]" if name.lower() in SECRET_HEADERS else value)
            for name, value in request.headers.multi_items()
        ]
        logger.debug("Sending %s %s headers=%s", request.method, request.url, logged_headers)
        transport = self.transport or HttpxTransport()
        raw = transport.execute(
            request.method,
            request.url,
            headers=request.headers,
            body=request.content,
            timeout=timeout,
            allow_redirects=options.allow_redirects,
            auth=options.auth if options.auth is not None and options.auth.scheme is AuthScheme.DIGEST else None,
            verify=options.verify,
            max_redirects=config.max_redirects,
            cookies=cookies,
        )
        logger.debug("Received %s from %s", raw.status_code, raw.url)
        return ZttpResponse(raw, cookies=cookies)
