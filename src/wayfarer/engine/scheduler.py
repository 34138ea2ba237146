"""Externally clocked continuation queue.

Nothing here sleeps. The owner moves time forward with ``advance`` (a UI
tick, a wall clock, or a test) and due callbacks fire in time order, ties
broken by scheduling order.
"""
from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledCall:
    due: float
    order: int
    callback: Callable[[], None] = field(compare=False)
    label: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[ScheduledCall] = []
        self._order = itertools.count()

    @property
    def pending(self) -> int:
        return sum(1 for call in self._queue if not call.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        call = ScheduledCall(self.now + max(0.0, delay), next(self._order), callback, label)
        heapq.heappush(self._queue, call)
        return call

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire everything that came due.

        Callbacks may schedule more work; anything due inside the window
        fires in the same call. Returns the number of callbacks fired.
        """
        target = self.now + max(0.0, seconds)
        fired = 0
        while self._queue and self._queue[0].due <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self.now = call.due
            logger.debug(f"firing {call.label or call.callback!r} at t={call.due:.2f}")
            call.callback()
            fired += 1
        self.now = target
        return fired

    def run_until_idle(self, limit: int = 10_000) -> int:
        """Jump the clock from one due call to the next until nothing is left."""
        fired = 0
        while fired < limit:
            self._drop_cancelled()
            if not self._queue:
                break
            fired += self.advance(self._queue[0].due - self.now)
        return fired

    def cancel_all(self) -> None:
        for call in self._queue:
            call.cancel()
        self._queue.clear()

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
