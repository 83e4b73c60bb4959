"""Cooperative debouncing of rapid parameter edits.

There are no threads or timers. A scheduled call carries a deadline; the owner
calls ``poll()`` from its own loop and the call runs once the deadline has
passed. Scheduling again before then replaces the pending call, so only the
last one runs.
"""

import time
from collections.abc import Callable
from typing import Any


class Debouncer:
    """Single-slot debouncer driven by an injectable monotonic clock."""

    def __init__(self, delay: float = 0.1, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the debouncer.

        Args:
            delay: Seconds a call waits before it may run
            clock: Monotonic time source
        """
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self.clock = clock
        self._pending: Callable[[], Any] | None = None
        self._deadline = 0.0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def deadline(self) -> float | None:
        return self._deadline if self._pending is not None else None

    def schedule(self, fn: Callable[[], Any]) -> None:
        """Replace any pending call with ``fn``, due ``delay`` seconds from now."""
        self._pending = fn
        self._deadline = self.clock() + self.delay

    def poll(self) -> bool:
        """Run the pending call if its deadline has passed.

        Returns:
            True if a call ran
        """
        if self._pending is None or self.clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Run the pending call now.

        Returns:
            True if a call ran
        """
        fn, self._pending = self._pending, None
        if fn is None:
            return False
        fn()
        return True

    def cancel(self) -> bool:
        """Drop the pending call.

        Returns:
            True if a call was dropped
        """
        dropped = self._pending is not None
        self._pending = None
        return dropped
