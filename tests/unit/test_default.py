from __future__ import annotations

from readings import InMemorySink, Probe, default, parse_readings


def test_helpers_are_noops_when_unset() -> None:
    assert default.get() is None
    default.log_event("nobody listening")
    assert default.get_metric("anything") is None
    assert default.unset() is None


def test_set_routes_events_and_lookups(provider, clock) -> None:
    sink = InMemorySink()
    probe = Probe(sink, provider=provider, clock=clock)
    done = probe.register("done")
    default.set(probe)

    assert default.get() is probe
    assert default.get_metric("done") is done
    default.get_metric("done").store(7)
    default.log_event("deep in the stack")

    rows = parse_readings(sink.getvalue()).rows
    assert [(r.event, r.metrics["done"]) for r in rows] == [("deep_in_the_stack", 7)]


def test_unset_returns_previous_probe(provider, clock) -> None:
    probe = Probe(InMemorySink(), provider=provider, clock=clock)
    default.set(probe)
    assert default.unset() is probe
    assert default.get() is None
    default.log_event("dropped")
    assert probe.lines_written == 0
