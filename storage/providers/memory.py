"""storage.providers.memory

In-process store for tests and headless runs. Keeps the serialized text so
loads exercise the same parsing path as the file store.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import List, Optional

from core.state import GameState

from .base import StoreStatus, state_from_text


@dataclass
class MemoryStore:
    raw: Optional[str] = None
    saves: List[str] = field(default_factory=list)

    def status(self) -> StoreStatus:
        return StoreStatus(True, "memory", "<memory>", note=f"{len(self.saves)} saves")

    def load(self, *, history_cap: int = 20) -> GameState:
        return state_from_text(self.raw, history_cap=history_cap)

    def save(self, state: GameState) -> None:
        self.raw = json.dumps(state.to_dict(), ensure_ascii=False, separators=(",", ":"))
        self.saves.append(self.raw)

    def clear(self) -> None:
        self.raw = None

    @property
    def last_snapshot(self) -> Optional[dict]:
        return None if self.raw is None else json.loads(self.raw)
