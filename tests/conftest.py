from __future__ import annotations

import base64
import hashlib
import json
import re
from email import policy
from email.parser import BytesParser
from http.cookies import SimpleCookie
from typing import Any, Callable
from urllib.parse import parse_qs

import httpx
import pytest

from zttp import HttpxTransport, PendingZttpRequest, ZttpResponse, reset_config

BASE_URL = "http://zttp.test"
DIGEST_REALM = "zttp"
DIGEST_NONCE = "dcd98b7102dd2f0e8b11d0f600bfb0c093"
DIGEST_OPAQUE = "5ccc069c403ebaf9f0171e9517f40e41"
USERNAME = "zttp"
PASSWORD = "secret"


def _md5(value: str) -> str:
    return hashlib.md5(value.encode()).hexdigest()


def _echo(request: httpx.Request) -> dict[str, Any]:
    headers: dict[str, list[str]] = {}
    for key, value in request.headers.multi_items():
        headers.setdefault(key.lower(), []).append(value)

    content_type = request.headers.get("content-type", "")
    body = request.content.decode()
    decoded_json = None
    form_params: dict[str, Any] = {}
    if body and content_type.startswith("application/json"):
        decoded_json = json.loads(body)
    elif body and content_type.startswith("application/x-www-form-urlencoded"):
        for key, values in parse_qs(body, keep_blank_values=True).items():
            form_params[key] = values[0] if len(values) == 1 else values

    cookies = SimpleCookie()
    cookies.load(request.headers.get("cookie", ""))
    return {
        "method": request.method,
        "headers": headers,
        "query": dict(request.url.params.items()),
        "json": decoded_json,
        "form_params": form_params,
        "body": body,
        "cookies": {name: morsel.value for name, morsel in cookies.items()},
    }


def _multipart(request: httpx.Request) -> dict[str, Any]:
    message = BytesParser(policy=policy.HTTP).parsebytes(
        b"Content-Type: " + request.headers["content-type"].encode() + b"\r\n\r\n" + request.content
    )
    fields: dict[str, str] = {}
    files: dict[str, dict[str, str]] = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        payload = part.get_payload(decode=True)
        filename = part.get_filename()
        if filename is None:
            fields[name] = payload.decode()
        else:
            files[name] = {
                "filename": filename,
                "content": payload.decode(),
                "content_type": part.get_content_type(),
            }
    first_file = next(iter(files.values()), None)
    return {
        "headers": {key.lower(): [value] for key, value in request.headers.items()},
        "body_content": fields,
        "files": files,
        "has_file": first_file is not None,
        "file_content": first_file["content"] if first_file else None,
    }


def _digest_auth(request: httpx.Request) -> httpx.Response:
    challenge = httpx.Response(
        401,
        headers={
            "WWW-Authenticate": (
                f'Digest realm="{DIGEST_REALM}", qop="auth", '
                f'nonce="{DIGEST_NONCE}", opaque="{DIGEST_OPAQUE}"'
            )
        },
    )
    authorization = request.headers.get("authorization", "")
    if not authorization.startswith("Digest "):
        return challenge
    params = {
        key: quoted if quoted else bare
        for key, quoted, bare in re.findall(r'(\w+)=(?:"([^"]*)"|([^\s,]+))', authorization)
    }
    ha1 = _md5(f"{USERNAME}:{DIGEST_REALM}:{PASSWORD}")
    ha2 = _md5(f"{request.method}:{params.get('uri', '')}")
    expected = _md5(f"{ha1}:{DIGEST_NONCE}:{params.get('nc')}:{params.get('cnonce')}:auth:{ha2}")
    if params.get("username") != USERNAME or params.get("response") != expected:
        return challenge
    return httpx.Response(200, json={"authenticated": True})


def echo_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    status = int(request.headers.get("z-status", 200))

    if path in {"/get", "/post", "/put", "/patch", "/delete"}:
        return httpx.Response(status, json=_echo(request))
    if path == "/multi-part":
        return httpx.Response(200, json=_multipart(request))
    if path == "/simple-response":
        return httpx.Response(200, text="A simple string response")
    if path == "/not-json":
        return httpx.Response(200, text="<html>nope</html>", headers={"Content-Type": "text/html"})
    if path == "/redirect":
        return httpx.Response(302, headers={"Location": f"{BASE_URL}/redirected"})
    if path == "/redirect-with-cookie":
        return httpx.Response(
            302,
            headers=[("Location", f"{BASE_URL}/redirected"), ("Set-Cookie", "hop=1; Path=/")],
        )
    if path == "/redirect-to-get":
        return httpx.Response(302, headers={"Location": f"{BASE_URL}/get"})
    if path == "/redirected":
        return httpx.Response(200, text="Redirected!")
    if path == "/set-cookie":
        return httpx.Response(200, headers={"Set-Cookie": "foo=bar; Path=/"}, json={})
    if path == "/set-another-cookie":
        return httpx.Response(200, headers={"Set-Cookie": "baz=qux; Path=/"}, json={})
    if path == "/expire-cookie":
        return httpx.Response(200, headers={"Set-Cookie": "foo=; Path=/; Max-Age=0"}, json={})
    if path == "/multi-header":
        return httpx.Response(
            200,
            headers=[("X-Multi", "one"), ("X-Multi", "two"), ("Content-Type", "text/plain")],
            text="ok",
        )
    if path == "/basic-auth":
        expected = "Basic " + base64.b64encode(f"{USERNAME}:{PASSWORD}".encode()).decode()
        if request.headers.get("authorization") == expected:
            return httpx.Response(200, json={"authenticated": True})
        return httpx.Response(401, headers={"WWW-Authenticate": 'Basic realm="zttp"'})
    if path == "/digest-auth":
        return _digest_auth(request)
    if path == "/timeout":
        raise httpx.ReadTimeout("timed out", request=request)
    if path == "/refused":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(404, json={"error": "not found"})


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch):
    for name in ("ZTTP_TIMEOUT", "ZTTP_USER_AGENT", "ZTTP_MAX_REDIRECTS"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    ZttpResponse.flush_macros()
    monkeypatch.undo()
    reset_config()


@pytest.fixture
def url() -> Callable[[str], str]:
    def build(path: str) -> str:
        return f"{BASE_URL}/{path.lstrip('/')}"

    return build


@pytest.fixture
def echo_transport() -> HttpxTransport:
    return HttpxTransport(httpx.MockTransport(echo_handler))


@pytest.fixture
def zttp(echo_transport: HttpxTransport) -> PendingZttpRequest:
    return PendingZttpRequest(transport=echo_transport)
