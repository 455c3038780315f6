"""Animation clock providing per-frame delta and accumulated elapsed time."""

import time
from typing import Callable, Optional


class AnimationClock:
    """
    Clock that starts on the first call to get_delta().

    Elapsed time only accumulates through get_delta(), so a caller that only
    queries it while an avatar exists gets "time since the avatar appeared".
    """

    def __init__(self, time_fn: Callable[[], float] = time.perf_counter):
        self._time_fn = time_fn
        self._old_time: Optional[float] = None
        self.elapsed_time: float = 0.0

    @property
    def running(self) -> bool:
        return self._old_time is not None

    def get_delta(self) -> float:
        """Return seconds since the previous call (0 on the first call)."""
        now = self._time_fn()
        if self._old_time is None:
            self._old_time = now
            return 0.0

        delta = now - self._old_time
        self._old_time = now
        self.elapsed_time += delta
        return delta
