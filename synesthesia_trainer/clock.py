from __future__ import annotations

import heapq
import itertools
import logging
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Monotonic clock abstraction.

    Drill and audio code depend on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class ScheduledCall:
    """Handle for a callback queued on a TimerQueue."""

    __slots__ = ("due_at_s", "_callback", "_cancelled", "_fired")

    def __init__(self, due_at_s: float, callback: Callable[[], None]) -> None:
        self.due_at_s = float(due_at_s)
        self._callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        self._cancelled = True

    def _fire(self) -> None:
        if not self.pending:
            return
        self._fired = True
        self._callback()


class TimerQueue:
    """Fire-and-forget delayed callbacks driven by an injected clock.

    Nothing runs on its own: the owner calls ``poll()`` (once per UI frame) and
    every call whose deadline has passed runs on that thread, in deadline order.
    A callback that raises is logged and dropped; it never reaches the caller
    of ``poll()``.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._heap: list[tuple[float, int, ScheduledCall]] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return sum(1 for _, _, call in self._heap if call.pending)

    def schedule(self, delay_s: float, callback: Callable[[], None]) -> ScheduledCall:
        if delay_s < 0.0:
            raise ValueError("delay_s must be >= 0")
        call = ScheduledCall(self._clock.now() + float(delay_s), callback)
        heapq.heappush(self._heap, (call.due_at_s, next(self._seq), call))
        return call

    def poll(self) -> int:
        """Run every due callback. Returns how many fired."""

        now = self._clock.now()
        fired = 0
        while self._heap and self._heap[0][0] <= now:
            _, _, call = heapq.heappop(self._heap)
            if not call.pending:
                continue
            try:
                call._fire()
            except Exception:
                logger.debug("scheduled callback failed", exc_info=True)
            fired += 1
        return fired

    def cancel_all(self) -> None:
        for _, _, call in self._heap:
            call.cancel()
        self._heap.clear()
