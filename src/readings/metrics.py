"""User-defined integer metrics.

A `Metric` is shared between the probe (which samples it on every line) and
client code (which updates it). Updates never take the probe lock.

Visibility contract: a reader may observe any interleaving of concurrent
writes, but never a partially written value. `store` and `load` are single
reference swaps; `fetch_add` serializes read-modify-write on a per-handle lock
so concurrent increments are not lost.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Iterator

from .errors import DuplicateMetric


_WHITESPACE = re.compile(r"\s")


def normalize_name(name: str) -> str:
    """Replace every whitespace character with an underscore.

    Names and labels must stay a single token on a single line.
    """
    return _WHITESPACE.sub("_", str(name))


class Metric:
    """A shared integer cell updated by client code and sampled by the probe."""

    __slots__ = ("name", "_value", "_lock")

    def __init__(self, name: str, value: int = 0) -> None:
        self.name = name
        self._value = int(value)
        self._lock = threading.Lock()

    def load(self) -> int:
        """Return the current value."""
        return self._value

    def store(self, value: int) -> None:
        """Replace the current value."""
        self._value = int(value)

    def fetch_add(self, delta: int = 1) -> int:
        """Add `delta` and return the previous value."""
        with self._lock:
            previous = self._value
            self._value = previous + int(delta)
            return previous

    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        self.store(value)

    def __int__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"Metric(name={self.name!r}, value={self._value})"


class MetricRegistry:
    """Ordered set of named metrics.

    Not thread-safe on its own; the owning probe guards it with its lock.
    """

    def __init__(self) -> None:
        self._metrics: list[Metric] = []

    def add(self, name: str) -> Metric:
        """Append a new zero-valued metric under its normalized name."""
        normalized = normalize_name(name)
        if not normalized:
            raise ValueError("Metric name must not be empty")
        if self.lookup(normalized) is not None:
            raise DuplicateMetric(normalized)
        metric = Metric(normalized)
        self._metrics.append(metric)
        return metric

    def lookup(self, name: str) -> Metric | None:
        """Return the metric registered under `name` (normalized), if any."""
        normalized = normalize_name(name)
        for metric in self._metrics:
            if metric.name == normalized:
                return metric
        return None

    @property
    def names(self) -> list[str]:
        return [m.name for m in self._metrics]

    def values(self) -> list[int]:
        """Sample every metric, in registration order."""
        return [m.load() for m in self._metrics]

    def __iter__(self) -> Iterator[Metric]:
        return iter(list(self._metrics))

    def __len__(self) -> int:
        return len(self._metrics)
