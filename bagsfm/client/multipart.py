from __future__ import annotations

import threading
import time
import uuid
from typing import Iterable, List, Optional, Tuple

from bagsfm.errors import ValidationError

DEFAULT_FILE_MIME = "application/octet-stream"
PIPE_CAPACITY = 64 * 1024
COPY_CHUNK = 64 * 1024
PRODUCER_JOIN_TIMEOUT = 1.0

_CRLF = b"\r\n"


class BoundedPipe:
    """In-process byte pipe with a fixed-size buffer.

    One producer thread writes, one consumer reads. ``write`` blocks while the
    buffer is full and ``read`` blocks until data arrives or the writer side
    is closed, so memory stays bounded by ``capacity`` whatever the payload
    size.

    Closing rules:
    - ``close_writer(error)`` ends the stream; a non-None error is re-raised
      to the reader once buffered bytes are consumed.
    - ``close_reader()`` makes pending and future writes raise
      BrokenPipeError so the producer can never block forever.
    - with a ``deadline`` (a ``time.monotonic()`` value) a read that would
      still be waiting past it raises TimeoutError.

    """

    def __init__(self, capacity: int = PIPE_CAPACITY, deadline: Optional[float] = None):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._buf = bytearray()
        self._cond = threading.Condition()
        self._writer_closed = False
        self._reader_closed = False
        self._error: Optional[BaseException] = None
        self._deadline = deadline

    # writer side

    def write(self, data: bytes) -> int:
        view = memoryview(data)
        total = len(view)
        while view:
            with self._cond:
                while len(self._buf) >= self._capacity and not self._reader_closed:
                    self._cond.wait()
                if self._reader_closed:
                    raise BrokenPipeError("pipe reader closed")
                if self._writer_closed:
                    raise ValueError("write to closed pipe")
                room = self._capacity - len(self._buf)
                self._buf += view[:room]
                view = view[room:]
                self._cond.notify_all()
        return total

    def close_writer(self, error: Optional[BaseException] = None) -> None:
        with self._cond:
            if self._writer_closed:
                return
            self._writer_closed = True
            self._error = error
            self._cond.notify_all()

    # reader side

    def read(self, size: int = -1) -> bytes:
        with self._cond:
            while not self._buf and not self._writer_closed:
                if self._reader_closed:
                    raise ValueError("read from closed pipe")
                if self._deadline is None:
                    self._cond.wait()
                    continue
                remaining = self._deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError("multipart body not produced before deadline")
                self._cond.wait(remaining)
            if not self._buf:
                if self._error is not None:
                    raise self._error
                return b""
            if size is None or size < 0 or size >= len(self._buf):
                size = len(self._buf)
            out = bytes(self._buf[:size])
            del self._buf[:size]
            self._cond.notify_all()
            return out

    def close_reader(self) -> None:
        with self._cond:
            self._reader_closed = True
            self._buf.clear()
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._reader_closed


class PipeReader:
    """File-like read end of a BoundedPipe, suitable as a streamed request body."""

    def __init__(self, pipe: BoundedPipe, on_close=None):
        self._pipe = pipe
        self._on_close = on_close

    def read(self, size: int = -1) -> bytes:
        return self._pipe.read(size)

    def readable(self) -> bool:
        return True

    def close(self) -> None:
        self._pipe.close_reader()
        if self._on_close is not None:
            self._on_close()

    @property
    def closed(self) -> bool:
        return self._pipe.closed


class MultipartUpload:
    """Streams text fields and one file as multipart/form-data.

    ``open()`` starts a producer thread that encodes into a BoundedPipe and
    returns the read end. Blank text fields are not sent. The file is copied
    from ``source`` in chunks, so it is never held in memory whole.

    Security notes:
    - Field names and the filename are quoted; embedded quotes and line
      breaks are escaped so they cannot inject extra headers.

    """

    def __init__(
        self,
        *,
        fields: Iterable[Tuple[str, Optional[str]]],
        file_field: str,
        filename: str,
        source,
        content_type: Optional[str] = None,
        boundary: Optional[str] = None,
        capacity: int = PIPE_CAPACITY,
    ):
        if source is None or not callable(getattr(source, "read", None)):
            raise ValidationError("a readable file source is required")
        if not filename or not filename.strip():
            raise ValidationError("filename is required")
        if not file_field or not file_field.strip():
            raise ValidationError("file field name is required")

        self.fields: List[Tuple[str, str]] = [
            (name, value) for name, value in fields if value is not None and value.strip()
        ]
        self.file_field = file_field
        self.filename = filename
        self.source = source
        self.file_content_type = (content_type or "").strip() or DEFAULT_FILE_MIME
        self.boundary = boundary or "----bagsfm-" + uuid.uuid4().hex
        self._capacity = capacity
        self._pipe: Optional[BoundedPipe] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def open(self, deadline: Optional[float] = None) -> PipeReader:
        """Start encoding and return the readable body stream.

        Reads waiting on a slow source past ``deadline`` raise TimeoutError.
        """

        if self._pipe is not None:
            raise RuntimeError("multipart body already opened")
        self._pipe = BoundedPipe(self._capacity, deadline)
        self._thread = threading.Thread(
            target=self._produce, args=(self._pipe,), name="bagsfm-multipart", daemon=True
        )
        self._thread.start()
        return PipeReader(self._pipe, on_close=self._join)

    def close(self) -> None:
        if self._pipe is not None:
            self._pipe.close_reader()
        self._join()

    def _join(self) -> None:
        # A source blocked in read() cannot be interrupted; the daemon thread
        # is left to finish on its own after the timeout.
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(PRODUCER_JOIN_TIMEOUT)

    def _produce(self, pipe: BoundedPipe) -> None:
        error: Optional[BaseException] = None
        try:
            for name, value in self.fields:
                pipe.write(self._part_header(name))
                pipe.write(value.encode("utf-8"))
                pipe.write(_CRLF)

            pipe.write(self._part_header(self.file_field, self.filename, self.file_content_type))
            while True:
                chunk = self.source.read(COPY_CHUNK)
                if not chunk:
                    break
                pipe.write(chunk)
            pipe.write(_CRLF)
            pipe.write(f"--{self.boundary}--\r\n".encode("utf-8"))
        except BrokenPipeError:
            # Consumer went away; nobody is left to report to.
            pass
        except Exception as e:
            error = e
        finally:
            pipe.close_writer(error)

    def _part_header(
        self, name: str, filename: Optional[str] = None, content_type: Optional[str] = None
    ) -> bytes:
        disp = f'form-data; name="{_quote(name)}"'
        if filename is not None:
            disp += f'; filename="{_quote(filename)}"'
        lines = [f"--{self.boundary}", f"Content-Disposition: {disp}"]
        if content_type is not None:
            lines.append(f"Content-Type: {content_type}")
        return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


def _quote(value: str) -> str:
    return value.replace('"', "%22").replace("\r", "%0D").replace("\n", "%0A")
