"""In-process TTL memo for expensive dashboard reads (per worker, not shared)."""
import threading
import time
from typing import Callable, TypeVar

T = TypeVar("T")


class TTLCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[float, object]] = {}
        self._lock = threading.Lock()

    def remember(self, key: str, ttl_sec: float, fn: Callable[[], T]) -> T:
        """Cached value for key if younger than ttl_sec, otherwise recompute and store."""
        now = self._clock()
        with self._lock:
            hit = self._data.get(key)
            if hit is not None and hit[0] > now:
                return hit[1]  # type: ignore[return-value]
        # computed outside the lock; a concurrent miss just computes twice
        value = fn()
        with self._lock:
            self._data[key] = (now + ttl_sec, value)
        return value

    def forget(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
