from __future__ import annotations

import pytest

from readings.errors import MalformedReadings
from readings.models import OsReadings
from readings.parser import parse_readings, read_readings
from readings.writer import MARKER, format_header, format_line

_READINGS = OsReadings(
    virtual_size=1000,
    resident_size=500,
    resident_size_max=600,
    user_time=0.5,
    system_time=0.25,
    minor_fault=10,
    major_fault=1,
)


def _line(elapsed: float, values: list[int], label: str) -> str:
    return format_line(
        elapsed=elapsed, cores=8, readings=_READINGS, allocated=2048, freed=1024, values=values, label=label
    )


def test_line_without_metrics_or_label_has_eleven_tokens() -> None:
    tokens = _line(0.0, [], "").split()
    assert len(tokens) == 11
    assert all(float(t) >= 0 for t in tokens)


def test_header_column_order() -> None:
    tokens = format_header(["progress", "queue"]).split()
    assert tokens == [
        "time", "cor", "vsz", "rsz", "rszmax", "utime", "stime", "minf", "majf", "alloc", "free",
        "progress", "queue", "event",
    ]


def test_fixed_widths() -> None:
    line = _line(1.5, [42], "go")
    assert line.startswith("  1.500   8")
    assert " 0.500000 0.250000 " in line
    assert line.endswith("         42 go\n")


def test_parse_round_trip_with_labels_and_heartbeats() -> None:
    text = (
        f"{MARKER}\n"
        + format_header(["done"])
        + _line(0.0, [0], "spawned heartbeat")
        + _line(1.0, [3], "")
        + _line(2.0, [5], "finish")
    )
    readings = parse_readings(text)

    assert readings.metric_names == ["done"]
    assert len(readings) == 3
    assert [r.event for r in readings] == ["spawned_heartbeat", "", "finish"]
    assert readings.metric("done") == [(0.0, 0), (1.0, 3), (2.0, 5)]
    assert [r.event for r in readings.events()] == ["spawned_heartbeat", "finish"]
    row = readings.rows[1]
    assert row.is_heartbeat
    assert (row.cores, row.allocated, row.freed) == (8, 2048, 1024)


def test_time_of_accepts_seconds_or_labels() -> None:
    text = f"{MARKER}\n" + format_header([]) + _line(0.0, [], "start") + _line(2.5, [], "stop")
    readings = parse_readings(text)
    assert readings.time_of("1.25") == 1.25
    assert readings.time_of("stop") == 2.5
    with pytest.raises(KeyError):
        readings.time_of("missing")


def test_marker_only_file() -> None:
    assert len(parse_readings(f"{MARKER}\n")) == 0


@pytest.mark.parametrize(
    "text",
    [
        "",
        "not readings\n",
        f"{MARKER}\nbogus header\n",
        f"{MARKER}\n" + format_header(["a"]) + "  0.000   1 2 3\n",
        f"{MARKER}\n" + format_header([]) + "  abc   1 2 3 4 5 6 7 8 9 10\n",
    ],
)
def test_malformed_input(text: str) -> None:
    with pytest.raises(MalformedReadings):
        parse_readings(text)


def test_read_readings_from_disk(tmp_path) -> None:
    path = tmp_path / "readings.out"
    path.write_text(f"{MARKER}\n" + format_header([]) + _line(0.0, [], "x"))
    assert read_readings(path).rows[0].event == "x"
