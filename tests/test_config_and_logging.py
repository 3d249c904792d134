from __future__ import annotations

import json
import logging

from core.state import default_start_state
from engine.config import EngineConfig
from engine.logging import JsonFormatter, configure_logging, dumps_state_export, make_state_export


def test_config_defaults():
    cfg = EngineConfig()
    assert cfg.history_cap == 20
    assert cfg.burst_spacing_seconds == 0.05
    assert cfg.driver_tick_seconds == 0.01


def test_config_from_env():
    cfg = EngineConfig.from_env(
        {
            "RNG_SIM_STATE_PATH": "/tmp/x.json",
            "RNG_SIM_HISTORY_CAP": "5",
            "RNG_SIM_DRIVER_TICK_MS": "0",
            "RNG_SIM_LOG_LEVEL": "debug",
        }
    )
    assert cfg.state_path == "/tmp/x.json"
    assert cfg.history_cap == 5
    assert cfg.driver_tick_ms == 1
    assert cfg.log_level == "DEBUG"


def test_config_from_empty_env():
    assert EngineConfig.from_env({}) == EngineConfig()


def test_config_ignores_malformed_numbers(caplog):
    with caplog.at_level(logging.WARNING, logger="engine.config"):
        cfg = EngineConfig.from_env({"RNG_SIM_HISTORY_CAP": "twenty", "RNG_SIM_DRIVER_TICK_MS": "1.5"})
    assert cfg.history_cap == 20
    assert cfg.driver_tick_ms == 10
    assert "RNG_SIM_HISTORY_CAP" in caplog.text
    assert "RNG_SIM_DRIVER_TICK_MS" in caplog.text


def test_json_formatter_keeps_extra_fields():
    record = logging.LogRecord("engine.session", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.track = "auto_clicker"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["fields"] == {"track": "auto_clicker"}


def test_configure_logging_is_idempotent():
    configure_logging("DEBUG")
    configure_logging("WARNING", json_format=True)
    root = logging.getLogger()
    ours = [h for h in root.handlers if h.get_name() == "rng-simulator"]
    assert len(ours) == 1
    assert isinstance(ours[0].formatter, JsonFormatter)
    assert root.level == logging.WARNING
    root.removeHandler(ours[0])
    root.setLevel(logging.WARNING)


def test_state_export():
    export = make_state_export(state=default_start_state(start_time=3), app="RNG Simulator", version="1", exported_at="now")
    assert export["meta"] == {"app": "RNG Simulator", "version": "1", "exported_at": "now"}
    assert json.loads(dumps_state_export(export))["snapshot"]["stats"]["startTime"] == 3
