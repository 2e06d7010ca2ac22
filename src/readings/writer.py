"""Fixed-width line formatting for the `#ReadingsV1` format.

Consumers split lines on whitespace, so column order and count matter; widths
only keep the file readable. A data row always ends with one space followed by
the event label: an empty label leaves a trailing space and no label token.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .metrics import normalize_name
from .models import OsReadings

MARKER = "#ReadingsV1"

# Column names as they appear in the header row, before user metrics.
BASE_COLUMNS: tuple[str, ...] = (
    "time",
    "cor",
    "vsz",
    "rsz",
    "rszmax",
    "utime",
    "stime",
    "minf",
    "majf",
    "alloc",
    "free",
)
EVENT_COLUMN = "event"

_HEADER_PREFIX = (
    "   time cor        vsz        rsz     rszmax"
    "    utime    stime       minf       majf"
    "      alloc       free"
)


def format_header(metric_names: Iterable[str]) -> str:
    """Return the header row (newline included)."""
    parts = [_HEADER_PREFIX]
    for name in metric_names:
        parts.append(f" {name:>10}")
    parts.append(f" {EVENT_COLUMN}\n")
    return "".join(parts)


def format_line(
    *,
    elapsed: float,
    cores: int,
    readings: OsReadings,
    allocated: int,
    freed: int,
    values: Sequence[int],
    label: str,
) -> str:
    """Return one data row (newline included)."""
    parts = [
        f"{elapsed:7.3f} {cores:3d}",
        f" {readings.virtual_size:10d} {readings.resident_size:10d} {readings.resident_size_max:10d}",
        f" {readings.user_time:8.6f} {readings.system_time:8.6f}",
        f" {readings.minor_fault:10d} {readings.major_fault:10d}",
        f" {allocated:10d} {freed:10d}",
    ]
    for value in values:
        parts.append(f" {value:10d}")
    parts.append(f" {normalize_name(label)}\n")
    return "".join(parts)
