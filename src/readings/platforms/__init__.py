"""Per-platform OS readings providers.

`get_provider()` picks the variant for the running platform once; the probe
samples it on every line.
"""

from __future__ import annotations

import sys
import threading

from ..models import OsReadings
from .base import OsReadingsProvider
from .fallback import FallbackProvider


def get_provider(platform: str | None = None) -> OsReadingsProvider:
    """Build the provider for `platform` (defaults to `sys.platform`)."""
    platform = platform or sys.platform
    if platform.startswith("linux"):
        from .linux import LinuxProvider

        return LinuxProvider()
    if platform == "darwin":
        from .macos import MacOSProvider

        return MacOSProvider()
    if platform == "win32":
        from .windows import WindowsProvider

        return WindowsProvider()
    return FallbackProvider(platform)


_default: OsReadingsProvider | None = None
_default_lock = threading.Lock()


def default_provider() -> OsReadingsProvider:
    """Return the process-wide provider, creating it on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = get_provider()
        return _default


def get_os_readings() -> OsReadings:
    """Sample the current process through the process-wide provider."""
    return default_provider().sample()


__all__ = [
    "FallbackProvider",
    "OsReadingsProvider",
    "default_provider",
    "get_os_readings",
    "get_provider",
]
