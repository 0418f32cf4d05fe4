"""Byte streams over message transports and a hub that pipes user and agent streams together."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Protocol

TEXT_MESSAGE = 1
BINARY_MESSAGE = 2
COPY_BUFFER_SIZE = 1024 * 1024


class StreamNotFound(LookupError):
    """No stream is registered under the given id."""

    def __init__(self, stream_id: str) -> None:
        super().__init__(f"stream not found: {stream_id}")
        self.stream_id = stream_id


class _ReadWriteCloser(Protocol):
    def read(self, size: int = -1) -> bytes: ...

    def write(self, data: bytes) -> int: ...

    def close(self) -> None: ...


class _MessageStream(Protocol):
    def recv(self) -> bytes | None: ...

    def send(self, data: bytes) -> Any: ...


class _MessageConn(Protocol):
    def read_message(self) -> tuple[int, bytes]: ...

    def write_message(self, message_type: int, data: bytes) -> Any: ...


class IOStreamWrapper:
    """File-like access to a stream that carries data in discrete messages.

    The stream's recv() returns the next message's bytes; None or EOFError mean the end.
    Empty messages are keep-alives and are skipped.
    """

    def __init__(self, stream: _MessageStream) -> None:
        self.stream = stream
        self._buffer = b""
        self._closed = threading.Event()

    def _receive(self) -> bytes:
        while True:
            try:
                data = self.stream.recv()
            except EOFError:
                return b""
            if data is None:
                return b""
            if data:
                return bytes(data)

    def read(self, size: int = -1) -> bytes:
        """Return up to size bytes; b"" at the end of the stream."""
        if size == 0:
            return b""
        if not self._buffer:
            self._buffer = self._receive()
        if size is None or size < 0:
            size = len(self._buffer)
        chunk, self._buffer = self._buffer[:size], self._buffer[size:]
        return chunk

    def write(self, data: bytes) -> int:
        self.stream.send(bytes(data))
        return len(data)

    def close(self) -> None:
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def wait(self) -> None:
        """Block until close() has been called."""
        self._closed.wait()

    def __enter__(self) -> IOStreamWrapper:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class WebSocketConn:
    """File-like access to a websocket with serialised writes.

    Text messages are user input and are delivered with a leading zero byte.
    """

    def __init__(self, conn: _MessageConn) -> None:
        self.conn = conn
        self._write_lock = threading.Lock()
        self._buffer = b""

    def write(self, data: bytes) -> int:
        with self._write_lock:
            self.conn.write_message(BINARY_MESSAGE, bytes(data))
        return len(data)

    def write_message(self, message_type: int, data: bytes) -> None:
        with self._write_lock:
            self.conn.write_message(message_type, bytes(data))

    def read(self, size: int = -1) -> bytes:
        """Return up to size bytes; b"" at the end of the connection."""
        if size == 0:
            return b""
        if not self._buffer:
            try:
                message_type, data = self.conn.read_message()
            except EOFError:
                return b""
            data = bytes(data)
            if message_type == TEXT_MESSAGE:
                data = b"\x00" + data
            self._buffer = data
        if size is None or size < 0:
            size = len(self._buffer)
        chunk, self._buffer = self._buffer[:size], self._buffer[size:]
        return chunk

    def close(self) -> None:
        closer = getattr(self.conn, "close", None)
        if callable(closer):
            closer()


@dataclass
class _StreamContext:
    user_io: _ReadWriteCloser | None = None
    agent_io: _ReadWriteCloser | None = None
    user_ready: threading.Event = field(default_factory=threading.Event)
    agent_ready: threading.Event = field(default_factory=threading.Event)


def _copy(dst: _ReadWriteCloser, src: _ReadWriteCloser) -> None:
    while True:
        chunk = src.read(COPY_BUFFER_SIZE)
        if not chunk:
            return
        dst.write(chunk)


class StreamHub:
    """Registry of pending streams that joins a user side with an agent side."""

    def __init__(self, localizer: Any = None) -> None:
        self.localizer = localizer
        self._streams: dict[str, _StreamContext] = {}
        self._lock = threading.Lock()

    def _t(self, message: str) -> str:
        return self.localizer.t(message) if self.localizer is not None else message

    def create_stream(self, stream_id: str) -> None:
        with self._lock:
            self._streams[stream_id] = _StreamContext()

    def get_stream(self, stream_id: str) -> _StreamContext:
        with self._lock:
            try:
                return self._streams[stream_id]
            except KeyError:
                raise StreamNotFound(stream_id) from None

    def close_stream(self, stream_id: str) -> None:
        """Close both sides of a stream and forget it; unknown ids are ignored."""
        with self._lock:
            ctx = self._streams.pop(stream_id, None)
        if ctx is None:
            return
        if ctx.user_io is not None:
            ctx.user_io.close()
        if ctx.agent_io is not None:
            ctx.agent_io.close()

    def user_connected(self, stream_id: str, user_io: _ReadWriteCloser) -> None:
        ctx = self.get_stream(stream_id)
        ctx.user_io = user_io
        ctx.user_ready.set()

    def agent_connected(self, stream_id: str, agent_io: _ReadWriteCloser) -> None:
        ctx = self.get_stream(stream_id)
        ctx.agent_io = agent_io
        ctx.agent_ready.set()

    def start_stream(self, stream_id: str, timeout: float) -> None:
        """Wait up to timeout seconds for both sides, then pipe them until one direction ends."""
        ctx = self.get_stream(stream_id)
        deadline = time.monotonic() + timeout
        ctx.user_ready.wait(max(0.0, deadline - time.monotonic()))
        ctx.agent_ready.wait(max(0.0, deadline - time.monotonic()))

        user_io, agent_io = ctx.user_io, ctx.agent_io
        if user_io is None and agent_io is None:
            raise TimeoutError(self._t("timeout: no connection established"))
        if user_io is None:
            raise TimeoutError(self._t("timeout: user connection not established"))
        if agent_io is None:
            raise TimeoutError(self._t("timeout: agent connection not established"))

        done = threading.Event()
        errors: list[BaseException] = []

        def pump(dst: _ReadWriteCloser, src: _ReadWriteCloser) -> None:
            try:
                _copy(dst, src)
            except Exception as exc:
                errors.append(exc)
            finally:
                done.set()

        for dst, src in ((user_io, agent_io), (agent_io, user_io)):
            threading.Thread(target=pump, args=(dst, src), daemon=True).start()

        done.wait()
        if errors:
            raise errors[0]