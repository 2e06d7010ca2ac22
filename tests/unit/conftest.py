from __future__ import annotations

import pytest

from readings.models import OsReadings


class FixedProvider:
    """OS readings provider returning a constant snapshot."""

    name = "fixed"

    def __init__(self, readings: OsReadings | None = None) -> None:
        self.readings = readings or OsReadings(
            virtual_size=4096000,
            resident_size=2048000,
            resident_size_max=3072000,
            user_time=0.125,
            system_time=0.0625,
            minor_fault=321,
            major_fault=2,
        )
        self.calls = 0

    def sample(self) -> OsReadings:
        self.calls += 1
        return self.readings


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def provider() -> FixedProvider:
    return FixedProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Leave no default probe or allocator hook behind between tests."""
    from readings import alloc, default

    yield
    default.unset()
    alloc.uninstrument_allocator()
