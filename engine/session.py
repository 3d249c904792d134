"""engine.session

The single apply-point for every GameState transition.

User actions, auto-clicker ticks and burst draws all end up here. Each one
runs the pure transition from engine.pipeline under one re-entrant lock and,
when it succeeds, saves the new snapshot before the lock is released
(write-through). Timers live in an engine.scheduler.Scheduler; something has
to pump it: either the UI, a test advancing a virtual clock, or ClockDriver.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from core.effects import auto_interval_seconds
from core.rng import DrawFn, secure_draw
from core.state import GameState, default_start_state
from core.tracks import AUTO_CLICKER

from storage.providers.base import StateStore

from . import pipeline
from .config import EngineConfig
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

Transition = Callable[[GameState], Tuple[GameState, Dict[str, Any]]]


class GameSession:
    def __init__(
        self,
        *,
        state: Optional[GameState] = None,
        store: Optional[StateStore] = None,
        config: Optional[EngineConfig] = None,
        scheduler: Optional[Scheduler] = None,
        draw: DrawFn = secure_draw,
    ) -> None:
        self.config = config or EngineConfig()
        self.store = store
        self.scheduler = scheduler if scheduler is not None else Scheduler(time.monotonic)
        self._draw = draw
        self._lock = threading.RLock()

        if state is None:
            state = store.load(history_cap=self.config.history_cap) if store is not None else default_start_state()
        self._state = state

        self._auto_enabled = False
        self._auto_task: Optional[int] = None
        self._pending_burst_draws = 0
        self.last_log: Dict[str, Any] = {}

    # -------------------------
    # Read side
    # -------------------------

    @property
    def state(self) -> GameState:
        with self._lock:
            return self._state

    @property
    def auto_enabled(self) -> bool:
        with self._lock:
            return self._auto_enabled

    @property
    def pending_burst_draws(self) -> int:
        with self._lock:
            return self._pending_burst_draws

    # -------------------------
    # Transitions
    # -------------------------

    def _apply(self, transition: Transition) -> Dict[str, Any]:
        with self._lock:
            new_state, log = transition(self._state)
            if log.get("ok") and new_state is not self._state:
                # a failed save leaves the session on the previous state
                if self.store is not None:
                    self.store.save(new_state)
                self._state = new_state
            self.last_log = log
            return log

    def set_target(self, raw: Any) -> Dict[str, Any]:
        return self._apply(lambda s: pipeline.set_target(s, raw))

    def manual_roll(self) -> Dict[str, Any]:
        return self._apply(
            lambda s: pipeline.manual_roll(s, draw=self._draw, history_cap=self.config.history_cap)
        )

    def auto_roll(self) -> Dict[str, Any]:
        """One auto-clicker tick. Ignored unless the auto-clicker is owned and switched on."""
        with self._lock:
            if not self._auto_enabled or self._state.upgrades.auto_clicker.level <= 0:
                log = {"ok": False, "reason": pipeline.REJECT_AUTO_DISABLED}
                self.last_log = log
                return log
            return self._apply(
                lambda s: pipeline.auto_roll(s, draw=self._draw, history_cap=self.config.history_cap)
            )

    def speed_burst(self) -> Dict[str, Any]:
        """Pay now; schedule `burst_size` manual rolls spaced burst_spacing_ms apart."""
        with self._lock:
            log = self._apply(lambda s: pipeline.begin_burst(s, spacing_ms=self.config.burst_spacing_ms))
            if not log.get("ok"):
                return log
            for offset_ms in log["offsets_ms"]:
                self.scheduler.call_later(offset_ms / 1000.0, self._burst_draw)
            self._pending_burst_draws += len(log["offsets_ms"])
            return log

    def _burst_draw(self) -> None:
        with self._lock:
            self._pending_burst_draws = max(0, self._pending_burst_draws - 1)
            self.manual_roll()

    def purchase_upgrade(self, track: str) -> Dict[str, Any]:
        with self._lock:
            log = self._apply(lambda s: pipeline.purchase_upgrade(s, track))
            if log.get("ok") and track == AUTO_CLICKER:
                self._restart_auto_timer()
            return log

    def toggle_auto_clicker(self) -> bool:
        """Flip the auto-clicker switch. Returns the new on/off value."""
        with self._lock:
            if self._state.upgrades.auto_clicker.level <= 0:
                return self._auto_enabled
            self._auto_enabled = not self._auto_enabled
            logger.info("auto-clicker %s", "on" if self._auto_enabled else "off")
            self._restart_auto_timer()
            return self._auto_enabled

    def replace_state(self, state: GameState) -> None:
        """Swap in an imported state wholesale (and persist it)."""
        with self._lock:
            if self.store is not None:
                self.store.save(state)
            self._state = state
            if state.upgrades.auto_clicker.level <= 0:
                self._auto_enabled = False
            self._restart_auto_timer()

    def reset(self) -> None:
        """Forget everything: clear the store and go back to defaults."""
        with self._lock:
            if self.store is not None:
                self.store.clear()
            self._auto_enabled = False
            self._restart_auto_timer()
            self._state = default_start_state()
            logger.info("session reset")

    # -------------------------
    # Timers
    # -------------------------

    def _restart_auto_timer(self) -> None:
        """Drop the current auto tick and, if still wanted, start one at the current rate."""
        self.scheduler.cancel(self._auto_task)
        self._auto_task = None
        if not self._auto_enabled:
            return
        interval = auto_interval_seconds(self._state.upgrades.auto_clicker.level)
        if interval is not None:
            self._auto_task = self.scheduler.call_every(interval, self._auto_tick)

    def _auto_tick(self) -> None:
        self.auto_roll()

    def pump(self) -> int:
        """Run every timer callback that is due now."""
        return self.scheduler.run_due()

    def close(self) -> None:
        with self._lock:
            self.scheduler.cancel(self._auto_task)
            self._auto_task = None
            self._auto_enabled = False


class ClockDriver:
    """Background thread that pumps a session's scheduler every `tick_seconds`."""

    def __init__(self, session: GameSession, tick_seconds: float = 0.01) -> None:
        self.session = session
        self.tick_seconds = float(tick_seconds)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "ClockDriver":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="rng-sim-clock", daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.tick_seconds):
            try:
                self.session.pump()
            except Exception:
                logger.exception("scheduled transition failed")
