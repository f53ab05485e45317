"""Process-wide defaults for outgoing requests."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, fields, replace
from typing import Any

from .exceptions import ConfigurationError

__version__ = "1.0.0"

TIMEOUT_ENV_VAR = "ZTTP_TIMEOUT"
USER_AGENT_ENV_VAR = "ZTTP_USER_AGENT"
MAX_REDIRECTS_ENV_VAR = "ZTTP_MAX_REDIRECTS"


@dataclass(frozen=True)
class ZttpConfig:
    timeout: float = 30.0
    user_agent: str = f"zttp-python/{__version__}"
    accept: str = "application/json"
    max_redirects: int = 5

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be greater than 0")
        if self.max_redirects < 0:
            raise ConfigurationError("max_redirects must be non-negative")

    @classmethod
    def from_env(cls) -> "ZttpConfig":
        values: dict[str, Any] = {}
        raw_timeout = os.getenv(TIMEOUT_ENV_VAR)
        if raw_timeout:
            try:
                values["timeout"] = float(raw_timeout)
            except ValueError:
                raise ConfigurationError(f"{TIMEOUT_ENV_VAR} must be a number, got {raw_timeout!r}") from None
        user_agent = os.getenv(USER_AGENT_ENV_VAR)
        if user_agent:
            values["user_agent"] = user_agent
        raw_redirects = os.getenv(MAX_REDIRECTS_ENV_VAR)
        if raw_redirects:
            try:
                values["max_redirects"] = int(raw_redirects)
            except ValueError:
                raise ConfigurationError(
                    f"{MAX_REDIRECTS_ENV_VAR} must be an integer, got {raw_redirects!r}"
                ) from None
        return cls(**values)


_lock = threading.Lock()
_config: ZttpConfig | None = None


def get_config() -> ZttpConfig:
    global _config
    with _lock:
        if _config is None:
            _config = ZttpConfig.from_env()
        return _config


def configure(**changes: Any) -> ZttpConfig:
    """Replace fields of the process-wide configuration and return the result."""
    known = {f.name for f in fields(ZttpConfig)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
    global _config
    current = get_config()
    with _lock:
        _config = replace(current, **changes)
        return _config


def reset_config() -> ZttpConfig:
    """Drop overrides and reload defaults from the environment."""
    global _config
    with _lock:
        _config = ZttpConfig.from_env()
        return _config
