"""macOS provider: task info via psutil, times and faults via `getrusage`."""

from __future__ import annotations

import psutil

from ..errors import ResourceQueryFailed
from ..models import OsReadings
from .base import OsReadingsProvider, self_rusage


class MacOSProvider(OsReadingsProvider):
    name = "darwin"

    def __init__(self, process: psutil.Process | None = None) -> None:
        self._process = process or psutil.Process()

    def sample(self) -> OsReadings:
        try:
            mem = self._process.memory_info()
        except psutil.Error as exc:
            raise ResourceQueryFailed("task_info", str(exc)) from exc

        usage = self_rusage()
        return OsReadings(
            virtual_size=mem.vms,
            resident_size=mem.rss,
            # ru_maxrss is already in bytes on macOS.
            resident_size_max=usage.ru_maxrss,
            user_time=usage.ru_utime,
            system_time=usage.ru_stime,
            minor_fault=usage.ru_minflt,
            major_fault=usage.ru_majflt,
        )
