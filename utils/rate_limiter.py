import math
import threading
import time
from typing import Callable, Optional


class MinIntervalRateLimiter:
    """
    Accepts at most one call per ``min_interval_ms`` for the whole process.

    The last accepted timestamp lives on the instance, so each app (and each
    test) gets its own limiter. ``clock`` returns seconds and defaults to
    ``time.monotonic``.
    """

    def __init__(self, min_interval_ms: int = 1000, clock: Callable[[], float] = time.monotonic):
        self.min_interval_ms = min_interval_ms
        self._clock = clock
        self._lock = threading.Lock()
        self._last_accepted_ms: Optional[float] = None

    def try_acquire(self) -> Optional[int]:
        """
        Returns None when the call is accepted, otherwise the number of
        milliseconds left until the next call would be accepted.
        """
        with self._lock:
            now_ms = self._clock() * 1000
            if self._last_accepted_ms is not None:
                elapsed = now_ms - self._last_accepted_ms
                if elapsed < self.min_interval_ms:
                    return max(1, math.ceil(self.min_interval_ms - elapsed))
            self._last_accepted_ms = now_ms
            return None

    def reset(self) -> None:
        with self._lock:
            self._last_accepted_ms = None
