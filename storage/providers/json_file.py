"""storage.providers.json_file

Snapshot kept as one JSON file on local disk.

Writes go to a sibling temp file first and are swapped in with os.replace,
so a crash mid-write never leaves a half-written snapshot behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.state import GameState

from .base import StoreStatus, state_from_text

logger = logging.getLogger(__name__)


@dataclass
class JsonFileStore:
    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def status(self) -> StoreStatus:
        directory = self.path.parent
        if directory.exists() and not os.access(directory, os.W_OK):
            return StoreStatus(False, "json-file", str(self.path), error="directory is not writable")
        note = "snapshot present" if self.path.exists() else "no snapshot yet"
        return StoreStatus(True, "json-file", str(self.path), note=note)

    def read_text(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("could not read %s: %s", self.path, e)
            return None

    def load(self, *, history_cap: int = 20) -> GameState:
        return state_from_text(self.read_text(), history_cap=history_cap)

    def save(self, state: GameState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(state.to_dict(), ensure_ascii=False, separators=(",", ":"))
        fd, tmp = tempfile.mkstemp(prefix=self.path.name + ".", suffix=".tmp", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
