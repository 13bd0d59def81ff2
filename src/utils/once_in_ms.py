"""
Timing utility for throttling execution in game loops
"""

import time
from typing import Callable


class OnceInMs:
    """
    Timer for throttling code execution to at most once per interval.

    The game loop runs every frame, but some work (system usage logging,
    board dumps) only needs to happen every few seconds.

    Example:
        # In __init__:
        self._memory_monitor = OnceInMs(60000)  # Once per minute

        # In update loop:
        if self._memory_monitor.should_execute():
            self._log_memory_usage()
    """

    def __init__(self, interval_ms: int, clock: Callable[[], float] = time.monotonic):
        """
        Initialize timer with interval.

        Args:
            interval_ms: Minimum milliseconds between executions
            clock: Time source in seconds (injectable for tests)
        """
        self.interval_ms = interval_ms
        self.interval = interval_ms / 1000.0
        self._clock = clock
        self.last_execution = None

    def should_execute(self) -> bool:
        """
        Check if enough time has passed and update timer if so.

        The very first call always executes.

        Returns:
            True if interval has passed (and timer is updated), False otherwise
        """
        current = self._clock()
        if self.last_execution is None or current - self.last_execution >= self.interval:
            self.last_execution = current
            return True
        return False

    def reset(self) -> None:
        """Force next should_execute() call to return True"""
        self.last_execution = None

    def remaining_ms(self) -> float:
        """Milliseconds until the next execution (negative if overdue)"""
        if self.last_execution is None:
            return 0.0
        return self.interval_ms - (self._clock() - self.last_execution) * 1000
