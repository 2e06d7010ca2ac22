"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting `READINGS_*` environment variables into a typed Pydantic model.
- Validating values and providing actionable error messages.
"""

from __future__ import annotations

import os
from typing import TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

_T = TypeVar("_T", int, float)


def _get_env_str(name: str, default: str) -> str:
    """Read a string env var with a default."""
    value = os.getenv(name, "").strip()
    return value or default


def _get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


def _get_env_list(name: str) -> list[str]:
    """Read a comma-separated env var into a list of non-empty items."""
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class ReadingsConfig(BaseModel):
    """Configuration for a probe built by `Probe.from_config`."""

    output: str = Field(default="readings.out", description="Path of the readings file")
    append: bool = Field(default=False, description="Append to an existing file instead of truncating")
    heartbeat_ms: int = Field(default=1000, description="Heartbeat interval in milliseconds (0 disables)")
    instrument_allocator: bool = Field(default=False, description="Track Python allocations via tracemalloc")
    metrics: list[str] = Field(default_factory=list, description="Metrics to register up front")

    @field_validator("output")
    def validate_output(cls, v: str) -> str:
        """Validate the output path is not blank."""
        if not v or not v.strip():
            raise ValueError("READINGS_OUTPUT must be a file path.")
        return v

    @field_validator("heartbeat_ms")
    def validate_heartbeat_ms(cls, v: int) -> int:
        """Validate the heartbeat interval is not negative."""
        if v < 0:
            raise ValueError(f"READINGS_HEARTBEAT_MS must be >= 0. Got: {v}")
        return v


def load_config() -> ReadingsConfig:
    """Load probe configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages for unparseable values.
    """
    dotenv.load_dotenv()

    return ReadingsConfig(
        output=_get_env_str("READINGS_OUTPUT", "readings.out"),
        append=_get_env_bool("READINGS_APPEND", False),
        heartbeat_ms=_get_env_number("READINGS_HEARTBEAT_MS", 1000, int),
        instrument_allocator=_get_env_bool("READINGS_INSTRUMENT_ALLOCATOR", False),
        metrics=_get_env_list("READINGS_METRICS"),
    )
