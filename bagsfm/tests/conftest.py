from __future__ import annotations

import io
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest

from bagsfm.client.config import ClientConfig
from bagsfm.client.http import BagsHttpClient
from bagsfm.client.service import BagsClient
from bagsfm.client.transport import HttpResponse


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[bytes]
    timeout: Optional[float]


class FakeTransport:
    """In-memory transport: records requests, replays queued responses.

    Streaming bodies are read to the end like a real connection would, so
    errors raised by the body stream surface from ``send``.
    """

    def __init__(self) -> None:
        self.requests: List[RecordedRequest] = []
        self.bodies: List[io.BytesIO] = []
        self._queue: List[tuple] = []
        self.raise_on_send: Optional[BaseException] = None

    def queue(self, status: int = 200, body: bytes = b"", reason: str = "OK") -> None:
        self._queue.append((status, reason, body))

    def queue_json(self, payload: Any, status: int = 200, reason: str = "OK") -> None:
        self.queue(status, json.dumps(payload).encode("utf-8"), reason)

    def send(self, method, url, *, headers, body=None, timeout=None) -> HttpResponse:
        if self.raise_on_send is not None:
            raise self.raise_on_send
        data = body
        if body is not None and hasattr(body, "read"):
            chunks = []
            while True:
                chunk = body.read(8192)
                if not chunk:
                    break
                chunks.append(chunk)
            data = b"".join(chunks)
        self.requests.append(RecordedRequest(method, url, dict(headers), data, timeout))
        assert self._queue, "no response queued"
        status, reason, payload = self._queue.pop(0)
        stream = io.BytesIO(payload)
        self.bodies.append(stream)
        return HttpResponse(status=status, reason=reason, headers={}, body=stream)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_key="test-key", user_agent="bagsfm-tests/1.0", timeout_sec=5.0)


@pytest.fixture
def http(config: ClientConfig, transport: FakeTransport) -> BagsHttpClient:
    return BagsHttpClient(config, transport)


@pytest.fixture
def client(config: ClientConfig, transport: FakeTransport) -> BagsClient:
    return BagsClient(config=config, transport=transport)
