"""Readings sinks (append-only text destinations)."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, TextIO


class ReadingsSink(Protocol):
    """A synchronous, append-only text sink.

    The probe hands each sink one complete chunk per line (header included on
    the first line) and flushes right after, so a crash never loses a line that
    `write` already returned for.
    """

    def write(self, text: str) -> None:
        """Append `text`."""

    def flush(self) -> None:
        """Push buffered data to the underlying storage."""

    def close(self) -> None:
        """Close any underlying resources."""


class StreamSink:
    """Sink over an already open text stream (e.g. `sys.stdout`).

    The stream is not closed on `close()` unless `owns_stream` is set.
    """

    def __init__(self, stream: TextIO, *, owns_stream: bool = False) -> None:
        """Wrap `stream`; set `owns_stream` to close it together with the sink."""
        self._stream = stream
        self._owns_stream = owns_stream

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def write(self, text: str) -> None:
        self._stream.write(text)

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        if self._owns_stream:
            self._stream.close()
        else:
            self._stream.flush()


class FileSink(StreamSink):
    """File-backed sink, the usual destination (`readings.out`)."""

    def __init__(self, path: str | Path, *, append: bool = False) -> None:
        """Open (truncating unless `append`) the file at `path`."""
        self.path = Path(path)
        stream = self.path.open("a" if append else "w", encoding="utf-8", newline="\n")
        super().__init__(stream, owns_stream=True)


class InMemorySink:
    """In-memory sink for tests and local debugging."""

    def __init__(self) -> None:
        """Create an empty in-memory sink."""
        self._lock = threading.Lock()
        self._pending: list[str] = []
        self._chunks: list[str] = []
        self.closed = False

    def write(self, text: str) -> None:
        """Buffer `text` until the next flush (thread-safe)."""
        with self._lock:
            if self.closed:
                raise ValueError("write to closed sink")
            self._pending.append(text)

    def flush(self) -> None:
        with self._lock:
            self._chunks.extend(self._pending)
            self._pending.clear()

    def close(self) -> None:
        self.flush()
        with self._lock:
            self.closed = True

    def getvalue(self) -> str:
        """Return everything flushed so far."""
        with self._lock:
            return "".join(self._chunks)

    def snapshot(self) -> Sequence[str]:
        """Return a point-in-time copy of all flushed lines."""
        return self.getvalue().splitlines()
