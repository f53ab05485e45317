"""Request body serialization for the JSON, form and multipart formats."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Sequence
from urllib.parse import urlencode

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .models import MultipartPart
from .request_options import CONTENT_TYPES, BodyFormat

FILE_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class EncodedBody:
    content: bytes
    content_type: str | None = None
    # Multipart boundaries are part of the body; callers must not override them.
    force_content_type: bool = False


def encode_body(body_format: BodyFormat, payload: Any) -> EncodedBody:
    if payload is None:
        return EncodedBody(b"")
    if isinstance(payload, (bytes, bytearray)):
        return EncodedBody(bytes(payload))
    if isinstance(payload, str):
        return EncodedBody(payload.encode())
    if body_format is BodyFormat.FORM:
        return EncodedBody(encode_form(payload).encode(), CONTENT_TYPES[BodyFormat.FORM])
    if body_format is BodyFormat.MULTIPART:
        content, boundary = encode_multipart(payload)
        return EncodedBody(content, f"multipart/form-data; boundary={boundary}", force_content_type=True)
    return EncodedBody(encode_json(payload), CONTENT_TYPES[BodyFormat.JSON])


def encode_json(payload: Any) -> bytes:
    try:
        return json.dumps(payload, separators=(",", ":")).encode()
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Payload is not JSON serializable: {exc}", cause=exc) from exc


def flatten_params(payload: Mapping[str, Any], prefix: str | None = None) -> list[tuple[str, str]]:
    """Flatten nested mappings and lists into bracketed key/value pairs.

    ``{"a": [1, 2], "b": {"c": "d"}}`` becomes
    ``[("a[]", "1"), ("a[]", "2"), ("b[c]", "d")]``.
    """
    if not isinstance(payload, Mapping):
        raise ConfigurationError("form payload must be a mapping")
    pairs: list[tuple[str, str]] = []
    for key, value in payload.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        pairs.extend(_flatten_value(name, value))
    return pairs


def _flatten_value(name: str, value: Any) -> Iterator[tuple[str, str]]:
    if value is None:
        return
    if isinstance(value, Mapping):
        yield from flatten_params(value, name)
    elif isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, Mapping):
                yield from flatten_params(item, f"{name}[]")
            else:
                yield from _flatten_value(f"{name}[]", item)
    elif isinstance(value, bool):
        yield name, "1" if value else "0"
    else:
        yield name, str(value)


def encode_form(payload: Mapping[str, Any]) -> str:
    return urlencode(flatten_params(payload))


def _multipart_parts(payload: Any) -> list[MultipartPart]:
    if isinstance(payload, Mapping):
        payload = [{"name": key, "contents": value} for key, value in payload.items()]
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        raise ConfigurationError("multipart payload must be a sequence of part descriptors")
    parts = []
    for index, part in enumerate(payload):
        if isinstance(part, MultipartPart):
            parts.append(part)
            continue
        if not isinstance(part, Mapping):
            raise ConfigurationError(f"multipart part {index} must be a mapping")
        try:
            parts.append(MultipartPart.model_validate(dict(part)))
        except ValidationError as exc:
            fields = ", ".join(".".join(map(str, error["loc"])) for error in exc.errors())
            raise ConfigurationError(f"multipart part {index} is invalid: {fields}", cause=exc) from exc
    return parts


def _quote_param(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', "%22").replace("\r", "%0D").replace("\n", "%0A")


def encode_multipart(payload: Any, boundary: str | None = None) -> tuple[bytes, str]:
    """Render ``payload`` as ``multipart/form-data`` and return ``(body, boundary)``."""
    parts = _multipart_parts(payload)
    boundary = boundary or os.urandom(16).hex()
    delimiter = f"--{boundary}\r\n".encode()
    chunks: list[bytes] = []
    for part in parts:
        disposition = f'form-data; name="{_quote_param(part.name)}"'
        if part.filename is not None:
            disposition += f'; filename="{_quote_param(part.filename)}"'
        headers = {"Content-Disposition": disposition}
        if part.is_file:
            headers["Content-Type"] = FILE_CONTENT_TYPE
        for name, value in (part.headers or {}).items():
            for existing in [key for key in headers if key.lower() == name.lower()]:
                del headers[existing]
            headers[name] = value
        chunks.append(delimiter)
        chunks.extend(f"{name}: {value}\r\n".encode() for name, value in headers.items())
        chunks.append(b"\r\n")
        chunks.append(part.content_bytes())
        chunks.append(b"\r\n")
    chunks.append(f"--{boundary}--\r\n".encode())
    return b"".join(chunks), boundary
