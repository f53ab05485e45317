"""Typed payload models validated before a request is dispatched."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ZttpModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)


class MultipartPart(ZttpModel):
    """One MIME part of a multipart body."""

    name: str = Field(min_length=1)
    contents: Any
    filename: str | None = None
    headers: Mapping[str, str] | None = None

    @field_validator("contents")
    @classmethod
    def _contents_present(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("contents is required")
        return value

    @property
    def is_file(self) -> bool:
        return self.filename is not None

    def content_bytes(self) -> bytes:
        value = self.contents
        if hasattr(value, "read"):
            value = value.read()
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, bool):
            return b"1" if value else b"0"
        return str(value).encode()


class Cookie(ZttpModel):
    """Read-only view of one cookie held by a :class:`~zttp.CookieJar`."""

    name: str = Field(min_length=1)
    value: str = ""
    domain: str | None = None
    path: str = "/"
    expires: datetime | None = None
    secure: bool = False
    http_only: bool = False
    same_site: str | None = None
    host_only: bool = True

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires = self.expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return expires <= now
