import time
from typing import Callable, Optional


class ProgressThrottle:
    """Rate limiter for progress notifications.

    The first call to ``ready`` is always accepted; after that at most one
    call per ``min_interval_ms`` is. ``force`` records an emission that
    happened regardless of the limit (the final 100%).
    """

    def __init__(
        self,
        min_interval_ms: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if min_interval_ms < 0:
            raise ValueError("min_interval_ms must be >= 0")
        self._interval = min_interval_ms / 1000.0
        self._clock = clock
        self._last: Optional[float] = None

    def ready(self) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self._interval:
            return False
        self._last = now
        return True

    def force(self) -> None:
        self._last = self._clock()

    def reset(self) -> None:
        self._last = None
