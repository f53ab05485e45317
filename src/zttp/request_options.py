"""Immutable per-request configuration accumulated by chaining."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from .cookies import CookieJar
from .exceptions import ConfigurationError
from .headers import Headers


class BodyFormat(str, Enum):
    JSON = "json"
    FORM = "form_params"
    MULTIPART = "multipart"


class AuthScheme(str, Enum):
    BASIC = "basic"
    DIGEST = "digest"


@dataclass(frozen=True)
class Auth:
    scheme: AuthScheme
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Auth(scheme={self.scheme.value!r}, username={self.username!r}, password='***')"


# A hook receives the pending ``ZttpRequest`` and may return a replacement.
BeforeSendHook = Callable[[Any], Optional[Any]]

CONTENT_TYPES = {
    BodyFormat.JSON: "application/json",
    BodyFormat.FORM: "application/x-www-form-urlencoded",
}


@dataclass(frozen=True)
class RequestOptions:
    headers: Headers = field(default_factory=Headers)
    query: tuple[tuple[str, Any], ...] = ()
    body: Any = None
    body_format: BodyFormat = BodyFormat.JSON
    auth: Auth | None = None
    timeout: float | None = None
    allow_redirects: bool = True
    verify: bool = True
    cookies: CookieJar | None = None
    before_send_hooks: tuple[BeforeSendHook, ...] = ()

    def merge(self, options: Mapping[str, Any]) -> "RequestOptions":
        """Apply ``options`` on top of this configuration.

        ``headers`` and ``query`` are merged key by key and
        ``before_send_hooks`` are appended; every other key overrides.
        """
        if not isinstance(options, Mapping):
            raise ConfigurationError("options must be a mapping")
        unknown = sorted(set(options) - set(_COERCERS))
        if unknown:
            raise ConfigurationError(f"Unrecognized request options: {', '.join(map(str, unknown))}")

        merged = self
        for key, value in options.items():
            coerced = _COERCERS[key](value)
            if key == "headers":
                merged = replace(merged, headers=merged.headers.merge(coerced))
            elif key == "query":
                merged = replace(merged, query=_merge_query(merged.query, coerced))
            elif key == "before_send_hooks":
                merged = replace(merged, before_send_hooks=merged.before_send_hooks + coerced)
            elif key == "body_format":
                merged = merged.with_body_format(coerced)
            else:
                merged = replace(merged, **{key: coerced})
        return merged

    def with_headers(self, headers: Any) -> "RequestOptions":
        return self.merge({"headers": headers})

    def without_header(self, name: str) -> "RequestOptions":
        return replace(self, headers=self.headers.remove(name))

    def with_body_format(self, body_format: BodyFormat | str) -> "RequestOptions":
        body_format = _coerce_body_format(body_format)
        headers = self.headers.remove("Content-Type")
        content_type = CONTENT_TYPES.get(body_format)
        if content_type is not None:
            headers = headers.set("Content-Type", content_type)
        return replace(self, body_format=body_format, headers=headers)


def _merge_query(existing: tuple[tuple[str, Any], ...], new: tuple[tuple[str, Any], ...]) -> tuple[tuple[str, Any], ...]:
    replaced = {key for key, _ in new}
    kept = tuple((key, value) for key, value in existing if key not in replaced)
    return kept + new


def _coerce_headers(value: Any) -> Headers:
    if value is None:
        return Headers()
    try:
        return Headers(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("headers must be a mapping of names to values", cause=exc) from exc


def _coerce_query(value: Any) -> tuple[tuple[str, Any], ...]:
    if value is None:
        return ()
    if not isinstance(value, Mapping):
        raise ConfigurationError("query must be a mapping")
    return tuple((str(key), item) for key, item in value.items())


def _coerce_body_format(value: Any) -> BodyFormat:
    try:
        return BodyFormat(value)
    except ValueError:
        allowed = ", ".join(member.value for member in BodyFormat)
        raise ConfigurationError(f"body_format must be one of: {allowed}") from None


def _coerce_auth(value: Any) -> Auth | None:
    if value is None or isinstance(value, Auth):
        return value
    if isinstance(value, (list, tuple)) and len(value) in (2, 3):
        scheme = AuthScheme.BASIC
        if len(value) == 3:
            try:
                scheme = AuthScheme(str(value[2]).lower())
            except ValueError:
                raise ConfigurationError(f"Unsupported auth scheme: {value[2]!r}") from None
        return Auth(scheme=scheme, username=str(value[0]), password=str(value[1]))
    raise ConfigurationError("auth must be (username, password) or (username, password, scheme)")


def _coerce_timeout(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError("timeout must be a number of seconds")
    if value <= 0:
        raise ConfigurationError("timeout must be greater than 0")
    return float(value)


def _coerce_flag(name: str) -> Callable[[Any], bool]:
    def coerce(value: Any) -> bool:
        if not isinstance(value, bool):
            raise ConfigurationError(f"{name} must be a boolean")
        return value

    return coerce


def _coerce_cookies(value: Any) -> CookieJar | None:
    if value is None:
        return None
    try:
        return CookieJar(value)
    except TypeError as exc:
        raise ConfigurationError("cookies must be a CookieJar or a mapping", cause=exc) from exc


def _coerce_hooks(value: Any) -> tuple[BeforeSendHook, ...]:
    hooks = (value,) if callable(value) else tuple(value or ())
    for hook in hooks:
        if not callable(hook):
            raise ConfigurationError("before_send_hooks must contain callables")
    return hooks


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "headers": _coerce_headers,
    "query": _coerce_query,
    "body": lambda value: value,
    "body_format": _coerce_body_format,
    "auth": _coerce_auth,
    "timeout": _coerce_timeout,
    "allow_redirects": _coerce_flag("allow_redirects"),
    "verify": _coerce_flag("verify"),
    "cookies": _coerce_cookies,
    "before_send_hooks": _coerce_hooks,
}
