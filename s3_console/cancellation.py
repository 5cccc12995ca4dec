from __future__ import annotations
"""Caller-controlled cancellation for listings and object streams."""
import threading
import time
from typing import Callable, Optional


class CancellationToken:
    """Thread-safe cancellation flag with an optional deadline.

    Instances are callable so they can be passed anywhere a
    ``cancel_requested`` callback is accepted.
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self._clock = clock
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = clock() + max(timeout, 0.0)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def time_remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(self._deadline - self._clock(), 0.0)

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and self._clock() >= self._deadline:
            self._event.set()
            return True
        return False

    def __call__(self) -> bool:
        return self.is_cancelled()
