"""Drift-corrected periodic heartbeat.

Ticks are scheduled on an absolute grid `origin + step * interval` rather than
by sleeping `interval` after each tick, so tick latency never accumulates.
A wake that arrives late fires right away. After every tick the schedule
resumes at the first grid point still in the future, so missed ticks are not
replayed.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable

from .errors import ReadingsError, RecorderUnavailable

logger = logging.getLogger(__name__)


def next_step(origin: float, interval: float, step: int, now: float) -> int:
    """Return the grid step to wait for after `step` has fired at `now`."""
    following = step + 1
    if origin + following * interval > now:
        return following
    # Overrun: skip to the first grid point strictly after `now`.
    first_future = math.floor((now - origin) / interval) + 1
    while origin + first_future * interval <= now:
        first_future += 1
    return max(following, first_future)


class Heartbeat:
    """Background task calling `tick()` on a fixed wall-clock cadence.

    Returned by `Probe.spawn_heartbeat`; `cancel()` stops it at the next wake.
    """

    def __init__(
        self,
        tick: Callable[[], None],
        *,
        origin: float,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        wait: Callable[[float], bool] | None = None,
        name: str = "readings-heartbeat",
    ) -> None:
        """Create a heartbeat firing `tick` at `origin + n * interval`.

        Args:
            tick: Called at every wake; usually `lambda: probe.log_event("")`.
            origin: Clock value the grid is anchored to.
            interval: Seconds between grid points (> 0).
            clock: Monotonic clock, in seconds.
            wait: Sleep function returning True when cancelled during the wait.
                Defaults to waiting on the cancellation event.
        """
        if interval <= 0:
            raise ValueError(f"interval must be > 0. Got: {interval}")
        self._tick = tick
        self._origin = origin
        self._interval = interval
        self._clock = clock
        self._stop = threading.Event()
        self._wait = wait or self._stop.wait
        self._name = name
        self._thread: threading.Thread | None = None
        self.ticks = 0
        self.failures = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def finished(self) -> bool:
        """True once the loop thread has exited."""
        return self._thread is not None and not self._thread.is_alive()

    def start(self) -> Heartbeat:
        """Run the loop on a daemon thread. Returns self."""
        if self._thread is not None:
            raise RuntimeError("heartbeat already started")
        self._thread = threading.Thread(target=self.run, name=self._name, daemon=True)
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Ask the loop to stop; it exits at its next wake without ticking."""
        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def run(self) -> None:
        """The scheduling loop. Blocks until cancelled."""
        step = 1
        while not self._stop.is_set():
            target = self._origin + step * self._interval
            delay = target - self._clock()
            if delay > 0 and self._wait(delay):
                return
            if self._stop.is_set():
                return
            try:
                self._tick()
            except RecorderUnavailable as exc:
                logger.error("Heartbeat stopped, probe unavailable: %s", exc)
                return
            except ReadingsError as exc:
                self.failures += 1
                logger.warning("Heartbeat tick %d failed: %s", step, exc)
            except Exception:
                self.failures += 1
                logger.exception("Heartbeat tick %d raised", step)
            else:
                self.ticks += 1
            step = next_step(self._origin, self._interval, step, self._clock())
