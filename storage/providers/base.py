"""storage.providers.base

Store interfaces.

A store's job is to hand back the last saved GameState (or fresh defaults)
and to persist a new snapshot whenever the engine asks. The engine does not
care where the bytes live.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from core.state import GameState, default_start_state

from ..parsing import try_parse_json
from ..schemas import looks_like_snapshot, state_from_snapshot, unwrap_export

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreStatus:
    ok: bool
    backend: str
    location: str
    note: str = ""
    error: str = ""


class StateStore(Protocol):
    def status(self) -> StoreStatus: ...

    def load(self, *, history_cap: int = 20) -> GameState:
        """Return the saved state, or defaults if nothing usable is stored."""
        ...

    def save(self, state: GameState) -> None: ...

    def clear(self) -> None: ...


def state_from_text(raw: Optional[str], *, history_cap: int = 20, start_time: Optional[int] = None) -> GameState:
    """Absent or malformed text yields the default start state."""
    if raw is None or not raw.strip():
        return default_start_state(start_time)

    res = try_parse_json(raw)
    if res.data is None:
        logger.warning("stored snapshot unreadable, starting fresh: %s", res.error)
        return default_start_state(start_time)

    data = unwrap_export(res.data)
    if not looks_like_snapshot(data):
        logger.warning("stored JSON is not a game snapshot, starting fresh")
        return default_start_state(start_time)

    return state_from_snapshot(data, history_cap=history_cap, start_time=start_time)
