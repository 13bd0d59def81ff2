"""
Scheduler - one-shot delayed callbacks driven from the game loop
"""

import heapq
import itertools
import time
from typing import Callable, List, Optional, Tuple


class DelayedCallback:
    """
    Handle for a scheduled callback.

    Cancelling is idempotent and safe from inside another callback that runs
    in the same frame.
    """

    def __init__(self, due: float, callback: Callable[[], None], name: str = ""):
        self.due = due
        self.callback = callback
        self.name = name
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        """True while the callback is still waiting to run"""
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        status = "cancelled" if self.cancelled else ("fired" if self.fired else "pending")
        return f"DelayedCallback({self.name or self.callback!r}, due={self.due:.3f}, {status})"


class Scheduler:
    """
    Cooperative timer queue.

    Nothing runs on its own: the owner calls run_due() once per frame and
    every callback whose due time has passed runs on the caller's thread,
    earliest first. Callbacks with the same due time run in the order they
    were scheduled.

    Example:
        scheduler = Scheduler()
        handle = scheduler.call_later(1.5, lambda: print("late"), name="grace")

        # In update loop:
        scheduler.run_due()

        # Changed our mind:
        handle.cancel()
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Time source in seconds (injectable for tests)
        """
        self._clock = clock
        self._queue: List[Tuple[float, int, DelayedCallback]] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._clock()

    def call_later(self, delay: float, callback: Callable[[], None], name: str = "") -> DelayedCallback:
        """
        Schedule a callback to run after a delay.

        Args:
            delay: Seconds from now (negative values are treated as zero)
            callback: Function called with no arguments
            name: Label used in logs and repr

        Returns:
            DelayedCallback: Handle that can cancel the call
        """
        handle = DelayedCallback(self._clock() + max(0.0, delay), callback, name)
        heapq.heappush(self._queue, (handle.due, next(self._sequence), handle))
        return handle

    def run_due(self, now: Optional[float] = None) -> int:
        """
        Run every callback due at or before now.

        Callbacks scheduled while running are picked up in the same call if
        they are already due.

        Args:
            now: Override of the current time, defaults to the clock

        Returns:
            int: Number of callbacks that ran
        """
        if now is None:
            now = self._clock()

        ran = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            handle.fired = True
            handle.callback()
            ran += 1
        return ran

    def cancel_all(self) -> None:
        """Cancel every pending callback"""
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()

    @property
    def pending_count(self) -> int:
        """Number of callbacks still waiting to run"""
        return sum(1 for _, _, handle in self._queue if handle.active)
