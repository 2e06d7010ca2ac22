import pytest

from readings import DuplicateMetric, InMemorySink, Probe, alloc, parse_readings
from readings.config import ReadingsConfig, load_config
from readings.sinks import FileSink

_ENV_VARS = [
    "READINGS_OUTPUT",
    "READINGS_APPEND",
    "READINGS_HEARTBEAT_MS",
    "READINGS_INSTRUMENT_ALLOCATOR",
    "READINGS_METRICS",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("readings.config.dotenv.load_dotenv", lambda *a, **k: False)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_load_config_defaults(clean_env):
    cfg = load_config()
    assert cfg.output == "readings.out"
    assert cfg.append is False
    assert cfg.heartbeat_ms == 1000
    assert cfg.instrument_allocator is False
    assert cfg.metrics == []


def test_load_config_parses_fields(clean_env):
    clean_env.setenv("READINGS_OUTPUT", "/tmp/run.readings")
    clean_env.setenv("READINGS_APPEND", "yes")
    clean_env.setenv("READINGS_HEARTBEAT_MS", "250")
    clean_env.setenv("READINGS_INSTRUMENT_ALLOCATOR", "on")
    clean_env.setenv("READINGS_METRICS", "done, queue depth,,")

    cfg = load_config()
    assert cfg.output == "/tmp/run.readings"
    assert cfg.append is True
    assert cfg.heartbeat_ms == 250
    assert cfg.instrument_allocator is True
    assert cfg.metrics == ["done", "queue depth"]


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("READINGS_HEARTBEAT_MS", "fast"),
        ("READINGS_HEARTBEAT_MS", "-5"),
        ("READINGS_APPEND", "maybe"),
    ],
)
def test_load_config_rejects_bad_values(clean_env, name: str, value: str):
    clean_env.setenv(name, value)
    with pytest.raises(ValueError):
        load_config()


def test_blank_output_rejected():
    with pytest.raises(ValueError):
        ReadingsConfig(output="  ")


def test_probe_from_config(tmp_path):
    path = tmp_path / "readings.out"
    cfg = ReadingsConfig(output=str(path), heartbeat_ms=0, metrics=["configured"])
    probe = Probe.from_config(cfg, metrics=["extra one"])
    try:
        assert probe.metric_names == ["configured", "extra_one"]
        assert not probe.started
        assert probe.heartbeats == []
        probe.log_event("go")
    finally:
        probe.close()
    assert parse_readings(path.read_text()).metric_names == ["configured", "extra_one"]


def test_probe_from_config_spawns_heartbeat(tmp_path):
    cfg = ReadingsConfig(output=str(tmp_path / "readings.out"), heartbeat_ms=50)
    probe = Probe.from_config(cfg)
    try:
        assert probe.started
        (heartbeat,) = probe.heartbeats
        assert heartbeat.interval == pytest.approx(0.05)
    finally:
        probe.close()


def test_probe_from_config_failure_releases_file_and_hook(tmp_path, monkeypatch):
    opened: list[FileSink] = []

    class _TrackedFileSink(FileSink):
        def __init__(self, path, *, append=False):
            super().__init__(path, append=append)
            opened.append(self)

    monkeypatch.setattr("readings.probe.FileSink", _TrackedFileSink)
    cfg = ReadingsConfig(
        output=str(tmp_path / "readings.out"),
        heartbeat_ms=0,
        instrument_allocator=True,
        metrics=["done"],
    )

    with pytest.raises(DuplicateMetric):
        Probe.from_config(cfg, metrics=["done"])

    assert not alloc.is_instrumented()
    (sink,) = opened
    assert sink.closed


def test_probe_from_config_keeps_hook_installed_elsewhere(tmp_path):
    alloc.instrument_allocator()
    cfg = ReadingsConfig(
        output=str(tmp_path / "readings.out"),
        heartbeat_ms=0,
        instrument_allocator=True,
        metrics=["done"],
    )

    with pytest.raises(DuplicateMetric):
        Probe.from_config(cfg, metrics=["done"])

    assert alloc.is_instrumented()
