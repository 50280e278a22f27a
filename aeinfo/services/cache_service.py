# aeinfo/services/cache_service.py
"""
In-process stand-in for the platform cache.

Keeps values in memory and the counters the diagnostic report needs:
hits, misses, bytes served by hits, and the last access time of every
item. Until the first operation the cache has no statistics at all and
stats() returns None.
"""
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional, Union

from aeinfo.schemas.info import CacheStats


@dataclass
class _Item:
    value: bytes
    accessed: float
    expires: Optional[float] = None


def _to_bytes(value: Union[bytes, str]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class MemoryCache:

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._items: Dict[str, _Item] = {}
        self._lock = Lock()
        self._hits = 0
        self._misses = 0
        self._byte_hits = 0
        self._touched = False

    def _expire(self, now: float) -> None:
        dead = [k for k, item in self._items.items() if item.expires is not None and item.expires <= now]
        for k in dead:
            del self._items[k]

    # ---------- operations ----------

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            now = self._clock()
            self._touched = True
            self._expire(now)
            item = self._items.get(key)
            if item is None:
                self._misses += 1
                return None
            item.accessed = now
            self._hits += 1
            self._byte_hits += len(item.value)
            return item.value

    def set(self, key: str, value: Union[bytes, str], ttl: Optional[float] = None) -> None:
        with self._lock:
            now = self._clock()
            self._touched = True
            expires = now + ttl if ttl is not None else None
            self._items[key] = _Item(value=_to_bytes(value), accessed=now, expires=expires)

    def delete(self, key: str) -> bool:
        with self._lock:
            self._touched = True
            return self._items.pop(key, None) is not None

    def flush(self) -> None:
        with self._lock:
            self._touched = True
            self._items.clear()

    # ---------- statistics ----------

    def snapshot(self) -> Optional[CacheStats]:
        with self._lock:
            if not self._touched:
                return None
            now = self._clock()
            self._expire(now)
            oldest = 0
            if self._items:
                oldest = int(now - min(item.accessed for item in self._items.values()))
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                byte_hits=self._byte_hits,
                items=len(self._items),
                bytes=sum(len(item.value) for item in self._items.values()),
                oldest=max(oldest, 0),
            )

    async def stats(self) -> Optional[CacheStats]:
        return self.snapshot()
