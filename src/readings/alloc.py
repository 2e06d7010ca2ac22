"""Process-wide allocator counters.

Two monotonically increasing counters, `allocated` and `freed` (bytes), shared
by every probe in the process. They are fed by an allocation hook:

- Code that manages its own buffers may call `on_alloc` / `on_free` /
  `on_realloc` directly.
- `instrument_allocator()` starts `tracemalloc` and, on every sample, converts
  the change in traced memory since the previous sample into alloc/free
  increments.

The counters are monitoring data: approximate and racy by design.
"""

from __future__ import annotations

import logging
import threading
import tracemalloc

logger = logging.getLogger(__name__)


class AllocatorCounters:
    """A pair of monotonic byte counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._allocated = 0
        self._freed = 0

    def on_alloc(self, size: int) -> None:
        """Record a successful allocation of `size` bytes."""
        if size <= 0:
            return
        with self._lock:
            self._allocated += size

    def on_free(self, size: int) -> None:
        """Record the release of a `size` bytes block."""
        if size <= 0:
            return
        with self._lock:
            self._freed += size

    def on_realloc(self, old_size: int, new_size: int) -> None:
        """Record a reallocation as a free of the old block then an allocation of the new one."""
        with self._lock:
            if old_size > 0:
                self._freed += old_size
            if new_size > 0:
                self._allocated += new_size

    @property
    def allocated(self) -> int:
        return self._allocated

    @property
    def freed(self) -> int:
        return self._freed

    def snapshot(self) -> tuple[int, int]:
        """Return `(allocated, freed)`."""
        return self._allocated, self._freed


class TracemallocHook:
    """Feeds `AllocatorCounters` from `tracemalloc` traced-memory deltas."""

    def __init__(self, counters: AllocatorCounters) -> None:
        self._counters = counters
        self._lock = threading.Lock()
        self._last = 0
        self._started_tracing = False

    def install(self) -> None:
        if not tracemalloc.is_tracing():
            tracemalloc.start()
            self._started_tracing = True
        self._last, _peak = tracemalloc.get_traced_memory()

    def uninstall(self) -> None:
        if self._started_tracing and tracemalloc.is_tracing():
            tracemalloc.stop()
        self._started_tracing = False

    def poll(self) -> None:
        """Fold the traced-memory change since the last poll into the counters."""
        if not tracemalloc.is_tracing():
            return
        current, _peak = tracemalloc.get_traced_memory()
        with self._lock:
            delta = current - self._last
            self._last = current
        if delta > 0:
            self._counters.on_alloc(delta)
        elif delta < 0:
            self._counters.on_free(-delta)


COUNTERS = AllocatorCounters()

_hook: TracemallocHook | None = None
_hook_lock = threading.Lock()


def on_alloc(size: int) -> None:
    COUNTERS.on_alloc(size)


def on_free(size: int) -> None:
    COUNTERS.on_free(size)


def on_realloc(old_size: int, new_size: int) -> None:
    COUNTERS.on_realloc(old_size, new_size)


def instrument_allocator() -> None:
    """Start tracking Python allocations through `tracemalloc`.

    Optional: OS readings already report vsz/rsz. Tracing has a noticeable
    runtime cost. Calling it twice is a no-op.
    """
    global _hook
    with _hook_lock:
        if _hook is not None:
            return
        hook = TracemallocHook(COUNTERS)
        hook.install()
        _hook = hook
    logger.info("Allocator instrumentation enabled (tracemalloc)")


def uninstrument_allocator() -> None:
    """Stop the `tracemalloc` hook. Counter values are kept."""
    global _hook
    with _hook_lock:
        hook, _hook = _hook, None
    if hook is not None:
        hook.uninstall()


def is_instrumented() -> bool:
    return _hook is not None


def read_counters() -> tuple[int, int]:
    """Return `(allocated, freed)`, polling the hook first when installed."""
    hook = _hook
    if hook is not None:
        hook.poll()
    return COUNTERS.snapshot()
