"""engine.logging

Logging setup plus helpers for exporting a game snapshot.

An export is JSON-serializable so it can be downloaded and imported later.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.state import GameState

_STANDARD_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "taskName",
}

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_NAME = "rng-simulator"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; `extra=` fields land under "fields"."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        extras = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_RECORD_KEYS}
        if extras:
            payload["fields"] = extras
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(level_name: str = "INFO", *, json_format: bool = False) -> None:
    """Install one console handler on the root logger (idempotent across reruns)."""
    root = logging.getLogger()
    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(_PLAIN_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, str(level_name).upper(), logging.INFO))


def make_state_export(*, state: GameState, app: str, version: str, exported_at: Optional[str] = None) -> Dict[str, Any]:
    return {
        "meta": {
            "app": str(app),
            "version": str(version),
            "exported_at": exported_at or datetime.now(timezone.utc).isoformat(),
        },
        "snapshot": state.to_dict(),
    }


def dumps_state_export(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)
