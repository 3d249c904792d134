"""engine.config

Engine configuration passed from UI (or built from environment variables).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("ignoring %s=%r (not an integer), using %d", name, raw, default)
        return default


@dataclass(frozen=True)
class EngineConfig:
    state_path: str = ".rng_simulator/state.json"
    history_cap: int = 20
    burst_spacing_ms: int = 50
    clock_refresh_seconds: float = 1.0
    driver_tick_ms: int = 10
    log_level: str = "INFO"

    @property
    def burst_spacing_seconds(self) -> float:
        return self.burst_spacing_ms / 1000.0

    @property
    def driver_tick_seconds(self) -> float:
        return self.driver_tick_ms / 1000.0

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if environ is None else environ
        base = EngineConfig()
        return EngineConfig(
            state_path=str(env.get("RNG_SIM_STATE_PATH") or base.state_path),
            history_cap=max(1, _env_int(env, "RNG_SIM_HISTORY_CAP", base.history_cap)),
            burst_spacing_ms=base.burst_spacing_ms,
            clock_refresh_seconds=base.clock_refresh_seconds,
            driver_tick_ms=max(1, _env_int(env, "RNG_SIM_DRIVER_TICK_MS", base.driver_tick_ms)),
            log_level=str(env.get("RNG_SIM_LOG_LEVEL") or base.log_level).upper(),
        )
