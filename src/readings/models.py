"""Readings data models.

`OsReadings` is produced fresh on every sample and never retained by the probe.
`ReadingsRow` is the consumer-side view of one parsed data line.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class OsReadings(_Model):
    """Snapshot of process resource counters as reported by the OS."""

    # Memory, in bytes.
    virtual_size: int = 0
    resident_size: int = 0
    resident_size_max: int = 0

    # CPU time, in seconds.
    user_time: float = 0.0
    system_time: float = 0.0

    minor_fault: int = 0
    major_fault: int = 0

    @classmethod
    def zeroed(cls) -> OsReadings:
        """Return the all-zero snapshot used on unsupported platforms."""
        return cls()


class ReadingsRow(_Model):
    """One data line of a readings file."""

    elapsed: float
    cores: int
    virtual_size: int
    resident_size: int
    resident_size_max: int
    user_time: float
    system_time: float
    minor_fault: int
    major_fault: int
    allocated: int
    freed: int
    metrics: dict[str, int] = Field(default_factory=dict)
    event: str = ""

    @property
    def is_heartbeat(self) -> bool:
        """True for rows written by the heartbeat (empty label)."""
        return self.event == ""
