from __future__ import annotations

import json
import logging
import posixpath
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from bagsfm.client.config import ClientConfig
from bagsfm.client.multipart import MultipartUpload
from bagsfm.client.transport import Body, HttpResponse, Transport, UrllibTransport
from bagsfm.errors import BagsAPIError, BagsError, DecodeError, HTTPStatusError, ValidationError
from bagsfm.models import ApiErrorPayload

log = logging.getLogger("bagsfm.client")

API_KEY_HEADER = "x-api-key"
MAX_ERROR_BODY_BYTES = 1 << 20
MAX_ERROR_SNIPPET_CHARS = 512

_ALLOWED_METHODS = ("GET", "POST")
_PATH_SAFE = "/:@-._~!$&'()*+,;=%"


def join_api_path(base_url: str, path: str, query: Optional[Mapping[str, Any]] = None) -> str:
    """Join a relative endpoint path under the base URL's path prefix.

    ``.`` and ``..`` segments are resolved before joining, and resolution
    stops at the prefix: ``../../x`` against ``/api/v1/`` yields ``/api/v1/x``.
    A leading ``/`` on ``path`` does not replace the prefix.

    Security notes:
    - Absolute URLs (scheme or host present) are rejected so a caller-supplied
      path can never redirect the API key to another host.

    """

    if not isinstance(path, str) or not path.strip():
        raise ValidationError("relative path is required")
    rel = urlsplit(path.strip())
    if rel.scheme or rel.netloc:
        raise ValidationError(f"path must be relative, got {path!r}")

    base = urlsplit(base_url)
    prefix = "/" + base.path.strip("/")
    tail = posixpath.normpath("/" + rel.path.lstrip("/"))
    if tail == "/":
        joined = prefix.rstrip("/") + "/"
    else:
        joined = prefix.rstrip("/") + tail

    query_parts = []
    if rel.query:
        query_parts.append(rel.query)
    if query:
        query_parts.append(urlencode({k: v for k, v in query.items() if v is not None}))
    return urlunsplit(
        (base.scheme, base.netloc, quote(joined, safe=_PATH_SAFE), "&".join(query_parts), "")
    )


class BagsHttpClient:
    """Request/response pipeline for the Bags REST API.

    Every call issues exactly one request through the transport (no retries)
    and either returns the decoded JSON body or raises:

    - BagsAPIError for a non-2xx response carrying an error envelope
    - HTTPStatusError for a non-2xx response with any other body
    - DecodeError for a 2xx response with malformed JSON
    - the transport's own exception for network failures, unchanged

    Security notes:
    - The API key is sent as a header and never logged.
    - Error bodies are read with a cap; only a short snippet is kept.

    """

    def __init__(self, config: ClientConfig, transport: Optional[Transport] = None):
        self.config = config
        self.transport: Transport = transport or UrllibTransport()

    def timeout_for(self, timeout: Optional[float]) -> float:
        return float(timeout) if timeout is not None else self.config.timeout_sec

    def url_for(self, path: str, query: Optional[Mapping[str, Any]] = None) -> str:
        return join_api_path(self.config.base_url, path, query)

    def _headers(self, content_type: Optional[str]) -> Dict[str, str]:
        headers = {
            API_KEY_HEADER: self.config.api_key,
            "Accept": "application/json",
        }
        ua = (self.config.user_agent or "").strip()
        if ua:
            headers["User-Agent"] = ua
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def send(
        self,
        method: str,
        path: str,
        *,
        query: Optional[Mapping[str, Any]] = None,
        body: Body = None,
        content_type: Optional[str] = None,
        expect_json: bool = True,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send one request and decode the response.

        With ``expect_json=False`` a 2xx body is drained and None returned.
        ``timeout`` is a deadline for the whole call: the transport gets it as
        its socket timeout and the body is read against it, raising
        TimeoutError once it passes.
        """

        method = (method or "").upper()
        if method not in _ALLOWED_METHODS:
            raise ValidationError(f"unsupported HTTP method: {method!r}")
        url = self.url_for(path, query)
        headers = self._headers(content_type if method == "POST" else None)

        timeout = self.timeout_for(timeout)
        start = time.monotonic()
        deadline = start + timeout
        resp = self.transport.send(method, url, headers=headers, body=body, timeout=timeout)
        try:
            log.debug(
                "bags_request",
                extra={
                    "method": method,
                    "path": urlsplit(url).path,
                    "status_code": resp.status,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )
            if not 200 <= resp.status < 300:
                raise decode_error_response(resp, deadline)
            if not expect_json:
                resp.drain(deadline=deadline)
                return None
            return decode_json(resp.read(deadline=deadline))
        finally:
            resp.close()

    def get(
        self,
        path: str,
        *,
        query: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """HTTP GET."""

        return self.send("GET", path, query=query, timeout=timeout)

    def post_json(self, path: str, payload: Any, *, timeout: Optional[float] = None) -> Any:
        """HTTP POST with a JSON body; pydantic models are dumped by alias."""

        body = None
        if payload is not None:
            if isinstance(payload, BaseModel):
                payload = payload.model_dump(by_alias=True)
            body = json.dumps(payload).encode("utf-8")
        return self.send("POST", path, body=body, content_type="application/json", timeout=timeout)

    def post_multipart(
        self, path: str, upload: MultipartUpload, *, timeout: Optional[float] = None
    ) -> Any:
        """HTTP POST multipart/form-data, streamed through a bounded pipe.

        The producer side is shut down on every exit path, including when the
        transport fails before reading the whole body.
        """

        timeout = self.timeout_for(timeout)
        stream = upload.open(deadline=time.monotonic() + timeout)
        try:
            return self.send(
                "POST", path, body=stream, content_type=upload.content_type, timeout=timeout
            )
        finally:
            stream.close()


def decode_json(data: bytes) -> Any:
    """Decode a success body as JSON."""

    try:
        return json.loads(data.decode("utf-8", errors="strict"))
    except ValueError as e:
        raise DecodeError(f"decode response json: {e}") from e


def decode_error_response(resp: HttpResponse, deadline: Optional[float] = None) -> BagsError:
    """Turn a non-2xx response into the matching error.

    A body is accepted as an error envelope when it parses and either says
    ``success: false`` or carries a non-empty ``error`` message.
    """

    data = resp.read(MAX_ERROR_BODY_BYTES, deadline=deadline)
    try:
        payload: Optional[ApiErrorPayload] = ApiErrorPayload.model_validate_json(data)
    except PydanticValidationError:
        payload = None
    if payload is not None and (payload.error or not payload.success):
        return BagsAPIError(payload.status or resp.status, payload.error)

    snippet = data.decode("utf-8", errors="replace")
    if len(snippet) > MAX_ERROR_SNIPPET_CHARS:
        snippet = snippet[:MAX_ERROR_SNIPPET_CHARS] + "…"
    return HTTPStatusError(resp.status, resp.reason, snippet)
