from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from bagsfm._version import __version__
from bagsfm.errors import ConfigurationError

DEFAULT_BASE_URL = "https://public-api-v2.bags.fm/api/v1/"
DEFAULT_USER_AGENT = f"bagsfm-python/{__version__}"
DEFAULT_TIMEOUT_SEC = 30.0


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Immutable configuration for a Bags API client.

    Security notes:
    - api_key is sent on every request and must never be logged.
    - base_url is validated so relative paths always land under its prefix.

    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_sec: float = DEFAULT_TIMEOUT_SEC

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError("api key is required")
        parts = urlsplit(self.base_url or "")
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"base_url must be an absolute http(s) URL: {self.base_url!r}")
        if not self.timeout_sec or self.timeout_sec <= 0:
            raise ConfigurationError("timeout_sec must be positive")

    @classmethod
    def from_env(cls, **overrides: object) -> "ClientConfig":
        """Build a config from BAGS_* environment variables.

        Explicit keyword overrides win over the environment; None overrides are
        ignored.
        """

        values = {
            "api_key": os.environ.get("BAGS_API_KEY", ""),
            "base_url": os.environ.get("BAGS_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            "user_agent": os.environ.get("BAGS_USER_AGENT", DEFAULT_USER_AGENT),
            "timeout_sec": _env_float("BAGS_TIMEOUT_SEC", DEFAULT_TIMEOUT_SEC),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]


def _env_float(name: str, default: float) -> float:
    """Read a float environment variable, falling back to the default when malformed."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError:
        return float(default)
