"""Process-wide default probe.

Lets deep routines record events without threading a `Probe` through every
signature. Set it up close to `main`:

    probe = Probe.open("readings.out")
    probe.spawn_heartbeat(1.0)
    readings.default.set(probe)

`log_event` and `get_metric` do nothing (or return None) while no probe is set,
so instrumentation can be toggled at the top level.
"""

from __future__ import annotations

import threading

from .metrics import Metric
from .probe import Probe

_lock = threading.Lock()
_probe: Probe | None = None


def set(probe: Probe) -> None:  # noqa: A001
    """Install `probe` as the default, replacing any previous one."""
    global _probe
    with _lock:
        _probe = probe


def unset() -> Probe | None:
    """Remove the default probe and return it (not closed)."""
    global _probe
    with _lock:
        probe, _probe = _probe, None
    return probe


def get() -> Probe | None:
    with _lock:
        return _probe


def log_event(label: str) -> None:
    """Log `label` on the default probe, if any. Probe errors propagate."""
    probe = get()
    if probe is not None:
        probe.log_event(label)


def get_metric(name: str) -> Metric | None:
    """Look up a metric on the default probe; None when no probe is set."""
    probe = get()
    if probe is None:
        return None
    return probe.get_metric(name)
