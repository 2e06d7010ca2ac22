"""Reader for the `#ReadingsV1` text format.

Lines are split on whitespace, never on fixed offsets. A data row holds the
eleven base columns, one column per metric, and an optional label token: when
the label is empty the row has no final token.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .errors import MalformedReadings
from .models import ReadingsRow
from .writer import BASE_COLUMNS, EVENT_COLUMN, MARKER


@dataclass
class Readings:
    """A parsed readings file."""

    metric_names: list[str]
    rows: list[ReadingsRow] = field(default_factory=list)

    def __iter__(self) -> Iterator[ReadingsRow]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def events(self) -> list[ReadingsRow]:
        """Rows carrying a label (i.e. not heartbeats)."""
        return [r for r in self.rows if r.event]

    def time_of(self, expr: str) -> float:
        """Translate a time expression: seconds, or the label of an event."""
        try:
            return float(expr)
        except ValueError:
            pass
        for row in self.rows:
            if row.event == expr:
                return row.elapsed
        raise KeyError(f"label {expr} not found")

    def metric(self, name: str) -> list[tuple[float, int]]:
        """Return `(elapsed, value)` pairs for a metric column."""
        if name not in self.metric_names:
            raise KeyError(name)
        return [(r.elapsed, r.metrics[name]) for r in self.rows]


def _parse_header(line: str) -> list[str]:
    tokens = line.split()
    base = len(BASE_COLUMNS)
    if tuple(tokens[:base]) != BASE_COLUMNS or not tokens or tokens[-1] != EVENT_COLUMN:
        raise MalformedReadings(f"Unexpected header row: {line!r}")
    return tokens[base:-1]


def _parse_row(line: str, metric_names: list[str], lineno: int) -> ReadingsRow:
    tokens = line.split()
    expected = len(BASE_COLUMNS) + len(metric_names)
    if len(tokens) == expected:
        label = ""
    elif len(tokens) == expected + 1:
        label = tokens[-1]
    else:
        raise MalformedReadings(f"Line {lineno}: expected {expected} or {expected + 1} tokens, got {len(tokens)}")
    try:
        return ReadingsRow(
            elapsed=float(tokens[0]),
            cores=int(tokens[1]),
            virtual_size=int(tokens[2]),
            resident_size=int(tokens[3]),
            resident_size_max=int(tokens[4]),
            user_time=float(tokens[5]),
            system_time=float(tokens[6]),
            minor_fault=int(tokens[7]),
            major_fault=int(tokens[8]),
            allocated=int(tokens[9]),
            freed=int(tokens[10]),
            metrics={name: int(tokens[11 + ix]) for ix, name in enumerate(metric_names)},
            event=label,
        )
    except ValueError as exc:
        raise MalformedReadings(f"Line {lineno}: {exc}") from exc


def parse_readings(text: str) -> Readings:
    """Parse the full content of a readings file."""
    lines = text.splitlines()
    if not lines or lines[0].strip() != MARKER:
        raise MalformedReadings(f"Missing {MARKER} marker")
    if len(lines) < 2:
        return Readings(metric_names=[])
    metric_names = _parse_header(lines[1])
    readings = Readings(metric_names=metric_names)
    for lineno, line in enumerate(lines[2:], start=3):
        if not line.strip():
            continue
        readings.rows.append(_parse_row(line, metric_names, lineno))
    return readings


def read_readings(path: str | Path) -> Readings:
    """Read and parse a readings file from disk."""
    return parse_readings(Path(path).read_text(encoding="utf-8"))
