"""A small thread-safe cache with per-entry time-to-live."""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _seconds(ttl: float | timedelta) -> float:
    return ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)


class TTLCache:
    """Key/value store whose entries expire after their time-to-live."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """Return the live value for ``key``; raise ``KeyError`` if absent or expired."""
        with self._lock:
            try:
                value, expires = self._entries[key]
            except KeyError:
                raise KeyError(key) from None
            if expires is not None and self._clock() >= expires:
                del self._entries[key]
                raise KeyError(key)
            return value

    def set(self, key: str, value: Any, ttl: float | timedelta) -> bool:
        """Store ``value``; a zero ttl never expires, a negative ttl stores nothing."""
        seconds = _seconds(ttl)
        if seconds < 0:
            return False
        expires = None if seconds == 0 else self._clock() + seconds
        with self._lock:
            self._entries[key] = (value, expires)
        return True

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        try:
            self.get(key)  # type: ignore[arg-type]
        except KeyError:
            return False
        return True

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for _, exp in self._entries.values() if exp is None or now < exp)


def get_or_set(cache: TTLCache, key: str, ttl: float | timedelta, query: Callable[[], T]) -> T:
    """Return the cached value for ``key`` or compute, store and return it.

    With a non-positive ``ttl`` the query runs every time and nothing is cached.
    Errors raised by ``query`` propagate and nothing is stored.
    """
    if _seconds(ttl) <= 0:
        return query()
    try:
        value = cache.get(key)
    except KeyError:
        pass
    else:
        logger.debug("cache hit cacheKey= %s", key)
        return value
    result = query()
    cache.set(key, result, ttl)
    return result