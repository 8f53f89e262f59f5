from __future__ import annotations

import ssl
import time
from dataclasses import dataclass
from typing import Any, BinaryIO, Mapping, Optional, Protocol, Union
from urllib.error import HTTPError
from urllib.request import HTTPSHandler, OpenerDirector, Request, build_opener

Body = Union[None, bytes, BinaryIO]
READ_CHUNK = 64 * 1024


def check_deadline(deadline: float) -> None:
    if time.monotonic() >= deadline:
        raise TimeoutError("bags api call deadline exceeded")


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """HTTP response handed back by a transport.

    The body is an open stream; whoever receives the response is responsible
    for closing it.

    Security notes:
    - Treat `body` as untrusted.

    """

    status: int
    reason: str
    headers: Mapping[str, str]
    body: Any

    def read(self, limit: int = -1, deadline: Optional[float] = None) -> bytes:
        """Read up to ``limit`` bytes (all when negative).

        With a ``deadline`` (a ``time.monotonic()`` value) the body is read in
        pieces and TimeoutError is raised once the deadline has passed, so a
        server that trickles bytes cannot hold the call open.
        """

        if deadline is None:
            return self.body.read(limit) if limit >= 0 else self.body.read()
        read1 = getattr(self.body, "read1", None) or self.body.read
        out = bytearray()
        while limit < 0 or len(out) < limit:
            check_deadline(deadline)
            want = READ_CHUNK if limit < 0 else min(READ_CHUNK, limit - len(out))
            chunk = read1(want)
            if not chunk:
                break
            out += chunk
        return bytes(out)

    def drain(self, chunk_size: int = READ_CHUNK, deadline: Optional[float] = None) -> None:
        """Consume and discard the rest of the body."""

        read1 = getattr(self.body, "read1", None) or self.body.read
        while True:
            if deadline is not None:
                check_deadline(deadline)
            if not read1(chunk_size):
                break

    def close(self) -> None:
        close = getattr(self.body, "close", None)
        if close is not None:
            close()


class Transport(Protocol):
    """Sends one HTTP request and returns the raw response.

    Non-2xx statuses are returned, not raised; network failures are raised.
    Implementations must be safe for concurrent use.
    """

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: Body = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse: ...


class UrllibTransport:
    """Transport backed by an ``urllib.request.OpenerDirector``.

    A custom opener can be injected (proxies, test handlers). Streaming bodies
    (objects with ``read``) are sent with chunked transfer encoding.

    Security notes:
    - The default opener uses the default SSL context (verification ON).

    """

    def __init__(self, opener: Optional[OpenerDirector] = None):
        self.opener = opener or build_opener(HTTPSHandler(context=ssl.create_default_context()))

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: Body = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        req = Request(url=url, data=body, method=method)
        for name, value in headers.items():
            req.add_header(name, value)
        try:
            resp = self.opener.open(req, timeout=timeout)
        except HTTPError as e:
            return HttpResponse(
                status=int(e.code or 0),
                reason=str(e.reason or ""),
                headers=dict(getattr(e, "headers", {}) or {}),
                body=e,
            )
        return HttpResponse(
            status=int(resp.status),
            reason=str(getattr(resp, "reason", "") or ""),
            headers={k: v for k, v in resp.headers.items()},
            body=resp,
        )
