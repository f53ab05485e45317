"""A fluent wrapper around httpx for everyday HTTP requests."""

from .api import (
    accept,
    as_form_params,
    as_json,
    as_multipart,
    before_sending,
    body_format,
    content_type,
    delete,
    get,
    new,
    patch,
    post,
    put,
    timeout,
    with_basic_auth,
    with_cookies,
    with_digest_auth,
    with_headers,
    with_options,
    without_redirecting,
    without_verifying,
)
from .client import PendingZttpRequest
from .config import ZttpConfig, __version__, configure, get_config, reset_config
from .cookies import CookieJar
from .exceptions import (
    ConfigurationError,
    ConnectionFailure,
    DecodeFailure,
    TimeoutFailure,
    ZttpError,
)
from .headers import Headers
from .models import Cookie, MultipartPart
from .request import ZttpRequest
from .request_options import Auth, AuthScheme, BodyFormat, RequestOptions
from .response import ZttpResponse
from .transport import HttpxTransport, RawResponse, TransportAdapter

__all__ = [
    "Auth",
    "AuthScheme",
    "BodyFormat",
    "ConfigurationError",
    "ConnectionFailure",
    "Cookie",
    "CookieJar",
    "DecodeFailure",
    "Headers",
    "HttpxTransport",
    "MultipartPart",
    "PendingZttpRequest",
    "RawResponse",
    "RequestOptions",
    "TimeoutFailure",
    "TransportAdapter",
    "ZttpConfig",
    "ZttpError",
    "ZttpRequest",
    "ZttpResponse",
    "__version__",
    "accept",
    "as_form_params",
    "as_json",
    "as_multipart",
    "before_sending",
    "body_format",
    "configure",
    "content_type",
    "delete",
    "get",
    "get_config",
    "new",
    "patch",
    "post",
    "put",
    "reset_config",
    "timeout",
    "with_basic_auth",
    "with_cookies",
    "with_digest_auth",
    "with_headers",
    "with_options",
    "without_redirecting",
    "without_verifying",
]
