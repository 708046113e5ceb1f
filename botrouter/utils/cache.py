"""
Thread-safe cache with TTL expiry and LRU eviction.
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional

logger = logging.getLogger(__name__)


class TTLCache:
    """Cache whose entries expire after `ttl_seconds` and hold at most `size_limit` keys."""

    def __init__(self, size_limit: int = 1000, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self._cache: "OrderedDict[Hashable, tuple]" = OrderedDict()
        self._lock = threading.Lock()
        self.size_limit = size_limit
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._cache[key]
                return None
            self._cache.move_to_end(key)
            return value

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._cache[key] = (value, self._clock())
            self._cache.move_to_end(key)
            while len(self._cache) > self.size_limit:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted {evicted} from cache")

    def pop(self, key: Hashable) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
