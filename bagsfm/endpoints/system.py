from __future__ import annotations

from typing import Optional

from bagsfm.client.http import BagsHttpClient
from bagsfm.errors import UnexpectedResponseError


def ping(http: BagsHttpClient, *, timeout: Optional[float] = None) -> None:
    """Check connectivity and the API key; the API answers ``{"message": "pong"}``."""

    data = http.get("ping", timeout=timeout)
    message = data.get("message") if isinstance(data, dict) else None
    if not isinstance(message, str) or message.lower() != "pong":
        raise UnexpectedResponseError(f"unexpected ping response: {message!r}")
