"""Degraded provider for platforms without a native implementation."""

from __future__ import annotations

import logging

from ..models import OsReadings
from .base import OsReadingsProvider

logger = logging.getLogger(__name__)


class FallbackProvider(OsReadingsProvider):
    """Returns all-zero readings. Every OS column of the output will be 0."""

    def __init__(self, platform: str) -> None:
        self.name = platform
        self._warned = False

    def sample(self) -> OsReadings:
        if not self._warned:
            self._warned = True
            logger.warning("No OS readings provider for platform %r; recording zeroed readings", self.name)
        return OsReadings.zeroed()
