"""The readings probe: metric registry, line writer and heartbeat under one lock.

A probe moves from *unstarted* (no line written, metrics may be registered)
to *started* on its first successfully written line. There is no way back.

    probe = Probe.open("readings.out")
    progress = probe.register("progress")
    probe.spawn_heartbeat(1.0)
    ...
    progress.store(12)
    probe.log_event("about to get crazy")

Metric updates (`progress.store`) never take the probe lock, so client code
can update them at high frequency while lines are written concurrently.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager, suppress
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

import psutil

from . import alloc
from .errors import LateRegistration, ReadingsError, RecorderUnavailable, SinkWriteFailed
from .heartbeat import Heartbeat
from .metrics import Metric, MetricRegistry, normalize_name
from .platforms import OsReadingsProvider, default_provider
from .sinks import FileSink, ReadingsSink
from .writer import MARKER, format_header, format_line

if TYPE_CHECKING:
    from .config import ReadingsConfig

logger = logging.getLogger(__name__)

SPAWNED_HEARTBEAT = "spawned_heartbeat"


def _to_seconds(interval: float | timedelta) -> float:
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class Probe:
    """Records process vitals and user metrics as lines on a sink."""

    def __init__(
        self,
        sink: ReadingsSink,
        *,
        provider: OsReadingsProvider | None = None,
        clock: Callable[[], float] = time.monotonic,
        cores: int | None = None,
        lookup_timeout: float = 0.1,
    ) -> None:
        """Create a probe writing to `sink` and emit the format marker.

        Args:
            sink: Append-only text destination (see `readings.sinks`).
            provider: OS readings source; defaults to the running platform's.
            clock: Monotonic clock in seconds, used for elapsed time and the
                heartbeat grid.
            cores: Core count recorded on every line; sampled when omitted.
            lookup_timeout: Longest wait for the lock in `get_metric`.

        Raises:
            SinkWriteFailed: the marker could not be written.
        """
        self._sink = sink
        self._provider = provider or default_provider()
        self._clock = clock
        self._cores = cores if cores is not None else (psutil.cpu_count(logical=True) or 1)
        self._lookup_timeout = lookup_timeout

        self._lock = threading.Lock()
        self._origin: float | None = None
        self._registry = MetricRegistry()
        self._heartbeats: list[Heartbeat] = []
        self._lines = 0
        self._closed = False
        self._poisoned = False

        self._emit(f"{MARKER}\n")

    @classmethod
    def open(cls, path: str | Path, *, append: bool = False, **kwargs) -> Probe:
        """Create a probe writing to the file at `path`."""
        try:
            sink = FileSink(path, append=append)
        except OSError as exc:
            raise SinkWriteFailed(f"Unable to open readings file {path}: {exc}") from exc
        try:
            return cls(sink, **kwargs)
        except BaseException:
            with suppress(OSError, ValueError):
                sink.close()
            raise

    @classmethod
    def from_config(cls, config: ReadingsConfig, *, metrics: Iterable[str] = ()) -> Probe:
        """Build a probe from configuration.

        Registers `metrics` (plus any configured ones), enables allocator
        instrumentation when asked, and spawns the heartbeat unless its
        interval is zero. On failure the file is closed and an allocator hook
        installed here is removed again.
        """
        instrumented = config.instrument_allocator and not alloc.is_instrumented()
        if instrumented:
            alloc.instrument_allocator()
        probe = None
        try:
            probe = cls.open(config.output, append=config.append)
            for name in [*config.metrics, *metrics]:
                probe.register(name)
            if config.heartbeat_ms > 0:
                probe.spawn_heartbeat(timedelta(milliseconds=config.heartbeat_ms))
        except BaseException:
            if probe is not None:
                with suppress(ReadingsError):
                    probe.close()
            if instrumented:
                alloc.uninstrument_allocator()
            raise
        return probe

    # -- state -------------------------------------------------------------

    @property
    def cores(self) -> int:
        return self._cores

    @property
    def origin(self) -> float | None:
        """Clock value of the first written line (None while unstarted)."""
        return self._origin

    @property
    def started(self) -> bool:
        return self._origin is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def lines_written(self) -> int:
        """Number of data lines written so far."""
        return self._lines

    @property
    def metric_names(self) -> list[str]:
        with self._locked():
            return self._registry.names

    @property
    def heartbeats(self) -> list[Heartbeat]:
        return list(self._heartbeats)

    @contextmanager
    def _locked(self, timeout: float = -1) -> Iterator[None]:
        """Hold the probe lock; poison the probe if an unexpected error escapes."""
        if not self._lock.acquire(timeout=timeout):
            raise RecorderUnavailable("Timed out waiting for the probe lock")
        try:
            if self._poisoned:
                raise RecorderUnavailable("Probe state is inconsistent after an earlier failure")
            if self._closed:
                raise RecorderUnavailable("Probe is closed")
            try:
                yield
            except ReadingsError:
                raise
            except Exception:
                self._poisoned = True
                raise
        finally:
            self._lock.release()

    # -- public operations ---------------------------------------------------

    def register(self, name: str) -> Metric:
        """Register an integer metric and return its shared handle.

        Must be called before the first `log_event` or `spawn_heartbeat`.

        Raises:
            LateRegistration: a line has already been written.
            DuplicateMetric: the normalized name is already registered.
            ValueError: the name is empty.
        """
        normalized = normalize_name(name)
        if not normalized:
            raise ValueError("Metric name must not be empty")
        with self._locked():
            if self._origin is not None:
                raise LateRegistration(normalized)
            return self._registry.add(normalized)

    register_metric = register

    def get_metric(self, name: str) -> Metric | None:
        """Recover a registered metric by name, or None.

        Keeping the handle around is cheaper than calling this at every
        update; this exists so intermediate code only has to carry the probe.
        Returns None rather than blocking when the probe is busy or unavailable.
        """
        try:
            with self._locked(timeout=self._lookup_timeout):
                return self._registry.lookup(name)
        except RecorderUnavailable:
            return None

    def log_event(self, label: str) -> None:
        """Write one line labelled `label` (whitespace becomes underscores)."""
        self._write_line(normalize_name(label))

    def spawn_heartbeat(self, interval: float | timedelta) -> Heartbeat:
        """Start recording a line every `interval` on a background thread.

        Logs a `spawned_heartbeat` event first, so the probe is started when
        this returns. The returned handle cancels the heartbeat.
        """
        seconds = _to_seconds(interval)
        if seconds <= 0:
            raise ValueError(f"interval must be > 0. Got: {interval!r}")
        self.log_event(SPAWNED_HEARTBEAT)
        with self._locked():
            origin = self._origin
            if origin is None:
                raise RecorderUnavailable("Probe has no origin after spawning the heartbeat")
            heartbeat = Heartbeat(
                lambda: self.log_event(""),
                origin=origin,
                interval=seconds,
                clock=self._clock,
            )
            self._heartbeats = [hb for hb in self._heartbeats if not (hb.cancelled or hb.finished)]
            self._heartbeats.append(heartbeat)
        return heartbeat.start()

    def close(self) -> None:
        """Stop heartbeats, then flush and close the sink. Safe to call twice.

        Every later call on the probe raises `RecorderUnavailable`.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            heartbeats, self._heartbeats = self._heartbeats, []
            for heartbeat in heartbeats:
                heartbeat.cancel()
            try:
                self._sink.close()
            except (OSError, ValueError) as exc:
                raise SinkWriteFailed(f"Closing readings sink failed: {exc}") from exc
        logger.debug("Probe closed after %d lines", self._lines)

    def __enter__(self) -> Probe:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- writing -------------------------------------------------------------

    def _emit(self, text: str) -> None:
        """Write and flush one chunk, mapping sink errors."""
        try:
            self._sink.write(text)
            self._sink.flush()
        except (OSError, ValueError) as exc:
            raise SinkWriteFailed(f"Writing readings failed: {exc}") from exc

    def _write_line(self, reason: str) -> None:
        with self._locked():
            now = self._clock()
            # Sample before touching the sink so a failure leaves no partial row.
            readings = self._provider.sample()
            allocated, freed = alloc.read_counters()

            origin = self._origin
            header = ""
            if origin is None:
                header = format_header(self._registry.names)
                origin = now
            line = format_line(
                elapsed=now - origin,
                cores=self._cores,
                readings=readings,
                allocated=allocated,
                freed=freed,
                values=self._registry.values(),
                label=reason,
            )
            self._emit(header + line)
            self._origin = origin
            self._lines += 1
