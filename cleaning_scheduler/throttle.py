"""
Minimum-interval throttle for repeated reads.

Create one instance at startup and hand it to whoever needs it; its state
lives as long as that instance does.  reset() clears it on demand, e.g.
after a write that makes cached reads stale.
"""

import time
from collections.abc import Callable, Hashable
from threading import Lock


class FetchThrottle:

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic):
        self._min_interval = min_interval
        self._clock = clock
        self._last: dict[Hashable, float] = {}
        self._lock = Lock()

    def allow(self, key: Hashable = None) -> bool:
        """True (and remember now) when *key* was not allowed within the interval."""
        with self._lock:
            now = self._clock()
            last = self._last.get(key)
            if last is not None and now - last < self._min_interval:
                return False
            self._last[key] = now
            return True

    def reset(self, key: Hashable = None, *, all_keys: bool = False) -> None:
        with self._lock:
            if all_keys:
                self._last.clear()
            else:
                self._last.pop(key, None)
