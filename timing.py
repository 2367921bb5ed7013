# =========  timing.py  =========
"""
Main-loop timers.

Everything that reacts to time (auto-fps sampling, OSD expiry) runs from
`TimerScheduler.run_due()`, which the player calls once per frame on the
main thread.  Callbacks therefore never overlap each other or the
event handlers – no locks needed.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional, Tuple

log = logging.getLogger(__name__)


class Timer:
    """Handle returned by the scheduler; `cancel()` is immediate."""

    def __init__(self, due: float, interval: Optional[float],
                 callback: Callable[[], object]) -> None:
        self.due = due
        self.interval = interval
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @property
    def periodic(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        self._active = False

    def __repr__(self) -> str:
        kind = f"every {self.interval}s" if self.periodic else "once"
        return f"<Timer {kind} due={self.due:.3f} active={self._active}>"


class TimerScheduler:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._heap: List[Tuple[float, int, Timer]] = []
        self._seq = itertools.count()

    # ── scheduling ─────────────────────────────────────────────────────
    def schedule_after(self, delay: float, callback: Callable[[], object]) -> Timer:
        return self._push(Timer(self.clock() + max(0.0, delay), None, callback))

    def schedule_periodic(self, interval: float, callback: Callable[[], object]) -> Timer:
        """First call fires one *interval* from now."""
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        return self._push(Timer(self.clock() + interval, interval, callback))

    def cancel(self, timer: Timer) -> None:
        timer.cancel()

    def _push(self, timer: Timer) -> Timer:
        heapq.heappush(self._heap, (timer.due, next(self._seq), timer))
        return timer

    # ── main-loop hook ─────────────────────────────────────────────────
    def run_due(self, now: Optional[float] = None) -> int:
        """Fire every timer due at *now*; returns how many callbacks ran."""
        now = self.clock() if now is None else now
        fired = 0
        while self._heap and self._heap[0][0] <= now:
            _, _, timer = heapq.heappop(self._heap)
            if not timer.active:
                continue
            if timer.periodic:
                # no catch-up bursts after a stall: skip missed slots
                timer.due += timer.interval
                if timer.due <= now:
                    timer.due = now + timer.interval
            else:
                timer.cancel()
            try:
                timer.callback()
            except Exception:
                log.exception("Timer callback %r failed", timer.callback)
            fired += 1
            if timer.periodic and timer.active:
                self._push(timer)
        return fired

    def next_due(self) -> Optional[float]:
        while self._heap and not self._heap[0][2].active:
            heapq.heappop(self._heap)
        return self._heap[0][0] if self._heap else None

    def pending(self) -> int:
        return sum(1 for _, _, t in self._heap if t.active)

    def clear(self) -> None:
        for _, _, timer in self._heap:
            timer.cancel()
        self._heap.clear()
