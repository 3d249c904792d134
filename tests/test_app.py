from __future__ import annotations

import json
from pathlib import Path

from streamlit.testing.v1 import AppTest

APP = Path(__file__).resolve().parents[1] / "app.py"


def _app(monkeypatch, state_path: Path) -> AppTest:
    monkeypatch.setenv("RNG_SIM_STATE_PATH", str(state_path))
    at = AppTest.from_file(str(APP), default_timeout=30)
    at.run()
    assert not at.exception
    return at


def test_target_change_is_saved(tmp_path, monkeypatch):
    path = tmp_path / "state.json"
    at = _app(monkeypatch, path)
    at.text_input(key="target_input").input("4x2").run()
    assert not at.exception
    assert at.text_input(key="target_input").value == "42"
    assert json.loads(path.read_text(encoding="utf-8"))["target"] == "42"


def test_failed_save_is_shown_instead_of_raised(tmp_path, monkeypatch):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where the save directory should be", encoding="utf-8")
    at = _app(monkeypatch, blocker / "state.json")

    at.text_input(key="target_input").input("42").run()
    assert not at.exception
    assert any("Could not save the game" in e.value for e in at.error)
    # the box falls back to the target the session actually holds
    assert at.text_input(key="target_input").value == ""
