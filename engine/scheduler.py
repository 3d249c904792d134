"""engine.scheduler

Deferred and repeating callbacks behind cancellable integer handles.

The clock is injectable: production passes time.monotonic, tests leave it
unset and move a virtual clock forward with advance(). Callbacks always run
outside the scheduler's own lock, so they may schedule or cancel freely.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from heapq import heappop, heappush
from typing import Callable, Dict, List, Optional, Tuple

TaskCallback = Callable[[], None]
Clock = Callable[[], float]


@dataclass
class _Task:
    task_id: int
    due_seconds: float
    callback: TaskCallback
    interval_seconds: Optional[float] = None
    cancelled: bool = False


class Scheduler:
    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock
        self._virtual_now = 0.0
        self._last_run = clock() if clock is not None else 0.0
        self._next_task_id = 1
        self._tasks: Dict[int, _Task] = {}
        self._queue: List[Tuple[float, int]] = []
        self._lock = threading.Lock()

    @property
    def now_seconds(self) -> float:
        return self._clock() if self._clock is not None else self._virtual_now

    @property
    def queued_task_count(self) -> int:
        """Return count of active queued tasks."""
        with self._lock:
            return sum(1 for task in self._tasks.values() if not task.cancelled)

    def due_times(self) -> List[float]:
        """Due times of active tasks, soonest first."""
        with self._lock:
            return sorted(t.due_seconds for t in self._tasks.values() if not t.cancelled)

    def call_later(self, delay_seconds: float, callback: TaskCallback) -> int:
        """Schedule a one-shot callback after delay."""
        if delay_seconds < 0.0:
            raise ValueError("delay_seconds must be >= 0")
        return self._schedule(self.now_seconds + delay_seconds, callback, None)

    def call_every(self, interval_seconds: float, callback: TaskCallback) -> int:
        """Schedule a recurring callback; first run one interval from now."""
        if interval_seconds <= 0.0:
            raise ValueError("interval_seconds must be > 0")
        return self._schedule(self.now_seconds + interval_seconds, callback, interval_seconds)

    def cancel(self, task_id: Optional[int]) -> None:
        """Cancel a scheduled task if it exists."""
        if task_id is None:
            return
        with self._lock:
            task = self._tasks.get(task_id)
            if task is not None:
                task.cancelled = True

    def advance(self, delta_seconds: float) -> int:
        """Move the virtual clock forward, stopping at every due time on the way."""
        if self._clock is not None:
            raise RuntimeError("advance() is only available with the virtual clock")
        if delta_seconds < 0.0:
            raise ValueError("delta_seconds must be >= 0")
        target = self._virtual_now + delta_seconds
        executed = 0
        while True:
            with self._lock:
                due = self._peek_due()
            if due is None or due > target:
                break
            self._virtual_now = max(self._virtual_now, due)
            executed += self.run_due(self._virtual_now)
        self._virtual_now = target
        return executed + self.run_due(target)

    def run_due(self, now_seconds: Optional[float] = None) -> int:
        """Run callbacks due at or before `now_seconds` (default: the clock's now)."""
        explicit = now_seconds is not None
        now = float(now_seconds) if explicit else self.now_seconds
        executed = 0
        while True:
            with self._lock:
                if now < self._last_run:
                    if explicit:
                        raise ValueError("now_seconds cannot move backwards")
                    # another thread pumped with a later reading
                    now = self._last_run
                self._last_run = now
                task = self._pop_due(now)
            if task is None:
                return executed
            task.callback()
            executed += 1
            with self._lock:
                if task.cancelled or task.interval_seconds is None:
                    self._tasks.pop(task.task_id, None)
                else:
                    task.due_seconds += task.interval_seconds
                    if task.due_seconds <= now:
                        # a whole interval was missed (stalled pump): skip the backlog
                        task.due_seconds = now + task.interval_seconds
                    heappush(self._queue, (task.due_seconds, task.task_id))

    def _peek_due(self) -> Optional[float]:
        while self._queue:
            due, task_id = self._queue[0]
            task = self._tasks.get(task_id)
            if task is not None and not task.cancelled:
                return due
            heappop(self._queue)
            self._tasks.pop(task_id, None)
        return None

    def _pop_due(self, now: float) -> Optional[_Task]:
        while self._queue and self._queue[0][0] <= now:
            _, task_id = heappop(self._queue)
            task = self._tasks.get(task_id)
            if task is None or task.cancelled:
                self._tasks.pop(task_id, None)
                continue
            return task
        return None

    def _schedule(self, due_seconds: float, callback: TaskCallback, interval_seconds: Optional[float]) -> int:
        with self._lock:
            task_id = self._next_task_id
            self._next_task_id += 1
            self._tasks[task_id] = _Task(
                task_id=task_id,
                due_seconds=due_seconds,
                callback=callback,
                interval_seconds=interval_seconds,
            )
            heappush(self._queue, (due_seconds, task_id))
        return task_id
