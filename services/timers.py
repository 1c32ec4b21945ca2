# services/timers.py - single-shot cancellable timers on a pluggable clock
import heapq
import itertools
import time
from typing import Callable, List, Optional


def _wall_ms() -> float:
    return time.time() * 1000.0


class Timer:
    """Handle for a scheduled callback. Fires at most once."""

    def __init__(self, due_at: float, callback: Callable[[], None]):
        self.due_at = due_at
        self._callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self):
        self._cancelled = True

    def _fire(self):
        if not self.active:
            return
        self._fired = True
        self._callback()


class ManualScheduler:
    """Scheduler on a virtual millisecond clock.

    Nothing fires on its own: call ``advance`` (virtual time) or ``run_due``
    (after the clock moved) to run every timer whose due time has passed,
    earliest first.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: List = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Timer:
        timer = Timer(self.now() + max(0.0, delay_ms), callback)
        heapq.heappush(self._queue, (timer.due_at, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if t.active)

    def next_due(self) -> Optional[float]:
        for due_at, _, t in sorted(self._queue):
            if t.active:
                return due_at
        return None

    def run_due(self) -> int:
        fired = 0
        now = self.now()
        while self._queue and self._queue[0][0] <= now:
            _, _, timer = heapq.heappop(self._queue)
            if timer.active:
                timer._fire()
                fired += 1
        return fired

    def advance(self, ms: float) -> int:
        self._now += ms
        return self.run_due()


class WallClockScheduler(ManualScheduler):
    """Same contract, driven by wall-clock milliseconds.

    Used by the web host: state lives between requests, and the page tells
    the server when a feedback delay should have elapsed.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        super().__init__()
        # clock returns milliseconds
        self._clock = clock or _wall_ms

    def now(self) -> float:
        return float(self._clock())

    def advance(self, ms: float) -> int:
        raise RuntimeError("WallClockScheduler follows the real clock; use run_due()")
