"""Linux provider: `/proc/self/stat` for sizes, `getrusage` for the rest."""

from __future__ import annotations

import os
from pathlib import Path

from ..errors import ResourceQueryFailed
from ..models import OsReadings
from .base import OsReadingsProvider, self_rusage

PROC_SELF_STAT = Path("/proc/self/stat")

# Field positions (1-based, see proc(5)) counted from the state field, which is
# the first token after the parenthesized command name.
_STATE_FIELD = 3
_VSIZE_FIELD = 23
_RSS_FIELD = 24


def parse_proc_stat(text: str, page_size: int) -> tuple[int, int]:
    """Return `(virtual_size, resident_size)` in bytes from a stat line.

    The command name may contain spaces and parentheses, so fields are counted
    after the last closing parenthesis.
    """
    _, sep, rest = text.rpartition(")")
    if not sep:
        raise ValueError("missing command name")
    tokens = rest.split()
    vsize = int(tokens[_VSIZE_FIELD - _STATE_FIELD])
    rss_pages = int(tokens[_RSS_FIELD - _STATE_FIELD])
    return vsize, rss_pages * page_size


class LinuxProvider(OsReadingsProvider):
    """Reads procfs and `getrusage(RUSAGE_SELF)`."""

    name = "linux"

    def __init__(self, *, stat_path: Path | str = PROC_SELF_STAT, page_size: int | None = None) -> None:
        self._stat_path = Path(stat_path)
        self._page_size = page_size or os.sysconf("SC_PAGE_SIZE")

    def sample(self) -> OsReadings:
        try:
            text = self._stat_path.read_text()
        except OSError as exc:
            raise ResourceQueryFailed(str(self._stat_path), str(exc)) from exc
        try:
            virtual_size, resident_size = parse_proc_stat(text, self._page_size)
        except (IndexError, ValueError) as exc:
            raise ResourceQueryFailed(str(self._stat_path), f"malformed content: {exc}") from exc

        usage = self_rusage()
        return OsReadings(
            virtual_size=virtual_size,
            resident_size=resident_size,
            # ru_maxrss is reported in KiB on Linux.
            resident_size_max=usage.ru_maxrss * 1024,
            user_time=usage.ru_utime,
            system_time=usage.ru_stime,
            minor_fault=usage.ru_minflt,
            major_fault=usage.ru_majflt,
        )
