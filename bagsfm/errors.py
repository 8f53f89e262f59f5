from __future__ import annotations

from typing import Optional


class BagsError(Exception):
    """
    Base exception for all bagsfm client failures.
    """

    pass


class ConfigurationError(BagsError):
    """
    Raised when the client is configured with invalid values.
    """

    pass


class ValidationError(BagsError, ValueError):
    """
    Raised before any network activity when a request is missing required
    fields or carries out-of-range values.
    """

    pass


class BagsAPIError(BagsError):
    """Structured error decoded from a non-2xx API response.

    The API answers failures with ``{"success": false, "error": "...",
    "status": 400}``; ``status`` is optional on the wire and falls back to the
    HTTP status code.
    """

    def __init__(self, status: Optional[int], message: str):
        self.status = int(status) if status else 400
        self.message = message
        super().__init__(f"bags api error ({self.status}): {message}")


class HTTPStatusError(BagsError):
    """
    Raised for a non-2xx response whose body is not a recognisable error
    envelope. Carries the status line and a bounded body snippet.
    """

    def __init__(self, status: int, reason: str, snippet: str):
        self.status = status
        self.reason = reason
        self.snippet = snippet
        super().__init__(f"bags api error: {status} {reason}: {snippet}")


class DecodeError(BagsError):
    """
    Raised when a 2xx response body is not valid JSON.
    """

    pass


class UnexpectedResponseError(BagsError):
    """
    Raised when the envelope reports success but the payload is missing or
    empty where the operation requires a value.
    """

    pass
