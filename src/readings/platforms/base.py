"""OS readings provider interface.

The probe depends on this small interface so each platform can read process
counters from its native accounting source without changing probe code.
"""

from __future__ import annotations

from typing import Any, Protocol

from ..models import OsReadings


class OsReadingsProvider(Protocol):
    name: str

    def sample(self) -> OsReadings:
        """Return a fresh snapshot of the current process counters."""


def self_rusage() -> Any:
    """`getrusage(RUSAGE_SELF)` for the calling process (POSIX only)."""
    import resource

    return resource.getrusage(resource.RUSAGE_SELF)
