"""Windows provider backed by psutil (process memory counters and times).

Windows only reports a single page-fault counter; it is recorded as minor
faults and major faults stay at zero.
"""

from __future__ import annotations

import psutil

from ..errors import ResourceQueryFailed
from ..models import OsReadings
from .base import OsReadingsProvider


class WindowsProvider(OsReadingsProvider):
    name = "win32"

    def __init__(self, process: psutil.Process | None = None) -> None:
        self._process = process or psutil.Process()

    def sample(self) -> OsReadings:
        try:
            with self._process.oneshot():
                mem = self._process.memory_info()
                times = self._process.cpu_times()
        except psutil.Error as exc:
            raise ResourceQueryFailed("GetProcessMemoryInfo", str(exc)) from exc

        return OsReadings(
            virtual_size=mem.vms,
            resident_size=mem.rss,
            resident_size_max=getattr(mem, "peak_wset", mem.rss),
            user_time=times.user,
            system_time=times.system,
            minor_fault=getattr(mem, "num_page_faults", 0),
            major_fault=0,
        )
