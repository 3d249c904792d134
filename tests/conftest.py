from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.state import GameState, default_start_state  # noqa: E402
from engine.config import EngineConfig  # noqa: E402
from engine.scheduler import Scheduler  # noqa: E402
from engine.session import GameSession  # noqa: E402
from storage.providers.memory import MemoryStore  # noqa: E402


class ScriptedDraw:
    """Draw function that replays fixed numbers (cycling) and records every call."""

    def __init__(self, numbers: Iterable[int]) -> None:
        self.numbers: List[int] = list(numbers)
        self.calls: List[tuple] = []

    def __call__(self, lo: int, hi: int) -> int:
        n = self.numbers[len(self.calls) % len(self.numbers)]
        self.calls.append((lo, hi))
        return n


@pytest.fixture
def start_state() -> GameState:
    return default_start_state(start_time=1_000)


@pytest.fixture
def scripted_draw():
    return ScriptedDraw


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def make_session(store, scheduler):
    def _make(state=None, draw=None, config=None) -> GameSession:
        return GameSession(
            state=state if state is not None else default_start_state(start_time=1_000),
            store=store,
            config=config or EngineConfig(),
            scheduler=scheduler,
            draw=draw or ScriptedDraw([0]),
        )

    return _make
