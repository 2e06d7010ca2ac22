"""Error taxonomy for the readings probe.

All errors derive from `ReadingsError` so callers can catch the whole family.
They are raised to the immediate caller; nothing in the probe retries.
"""

from __future__ import annotations


class ReadingsError(RuntimeError):
    """Base class for every error raised by the probe."""


class LateRegistration(ReadingsError):
    """A metric was registered after the first line was written."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Metric {name!r} must be registered before the first event")


class DuplicateMetric(ReadingsError, ValueError):
    """A metric with the same normalized name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Metric {name!r} is already registered")


class ResourceQueryFailed(ReadingsError):
    """The platform resource-accounting source could not be read."""

    def __init__(self, source: str, message: str | None = None) -> None:
        self.source = source
        super().__init__(f"Unable to read process resources from {source}" + (f": {message}" if message else ""))


class SinkWriteFailed(ReadingsError):
    """The sink rejected a write or a flush."""


class RecorderUnavailable(ReadingsError):
    """The probe is closed or its internal state was left inconsistent."""


class MalformedReadings(ReadingsError, ValueError):
    """A readings file does not follow the `#ReadingsV1` layout."""
