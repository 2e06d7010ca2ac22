"""Instrumentation probe for process vitals.

Embed a `Probe` in client code to record, as one text line per heartbeat tick
or event:
- OS readings (virtual/resident size, CPU times, page faults).
- Process-wide allocator counters.
- The current values of user-registered integer metrics.

The output is the whitespace-separated `#ReadingsV1` format (see `writer`),
readable back with `parse_readings`.
"""

from . import default
from .alloc import instrument_allocator, uninstrument_allocator
from .config import ReadingsConfig, load_config
from .errors import (
    DuplicateMetric,
    LateRegistration,
    MalformedReadings,
    ReadingsError,
    RecorderUnavailable,
    ResourceQueryFailed,
    SinkWriteFailed,
)
from .heartbeat import Heartbeat
from .metrics import Metric
from .models import OsReadings, ReadingsRow
from .parser import Readings, parse_readings, read_readings
from .platforms import get_os_readings
from .probe import Probe
from .sinks import FileSink, InMemorySink, ReadingsSink, StreamSink

__all__ = [
    "DuplicateMetric",
    "FileSink",
    "Heartbeat",
    "InMemorySink",
    "LateRegistration",
    "MalformedReadings",
    "Metric",
    "OsReadings",
    "Probe",
    "Readings",
    "ReadingsConfig",
    "ReadingsError",
    "ReadingsRow",
    "ReadingsSink",
    "RecorderUnavailable",
    "ResourceQueryFailed",
    "SinkWriteFailed",
    "StreamSink",
    "default",
    "get_os_readings",
    "instrument_allocator",
    "load_config",
    "parse_readings",
    "read_readings",
    "uninstrument_allocator",
]
