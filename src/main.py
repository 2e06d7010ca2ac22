"""Demo entrypoint wiring a probe into a small workload.

This module intentionally contains a small, end-to-end "smoke test" that:

- Loads configuration from environment (`READINGS_*`, `.env`).
- Builds a probe with a `done` progress metric and a heartbeat.
- Installs it as the default probe so nested code can log events.
- Grows and drops some buffers so memory columns move.

It is **not** a library feature; it is a convenient manual harness for
producing a readings file to look at.
"""

from __future__ import annotations

import logging
import time

import readings
from readings import default
from readings.config import load_config


def _some_other_code(rounds: int, pause_s: float) -> None:
    """Allocate buffers, reporting progress through the default probe."""
    progress = default.get_metric("done")
    buffers = []
    for i in range(rounds):
        time.sleep(pause_s)
        buffers.append([i] * 100_000)
        if progress is not None:
            progress.store(i)
    default.log_event("about to drop buffers")
    del buffers


def run_demo(rounds: int = 5, pause_s: float = 0.3) -> None:
    """Record a short run to the configured output file."""
    cfg = load_config()
    probe = readings.Probe.from_config(cfg, metrics=["done"])
    default.set(probe)
    try:
        _some_other_code(rounds, pause_s)
        default.log_event("done")
    finally:
        default.unset()
        probe.close()
    print(f"wrote {probe.lines_written} lines to {cfg.output}")


def main() -> None:
    """CLI entrypoint for running the demo with `python src/main.py`."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_demo()


if __name__ == "__main__":
    main()
