"""In-memory implementation of CacheStore."""

import time
from typing import Callable

from cachetools import TLRUCache

from scenario_engine.log import get_logger

logger = get_logger(__name__)


def _expires_at(key: str, entry: tuple[str, int], now: float) -> float:
    return now + entry[1]


class InMemoryScenarioRepository:
    """Process-local store with per-key expiry.

    Satisfies the CacheStore protocol. Entries live in a `TLRUCache` whose
    time-to-use is each entry's own ttl, so expired entries are purged on
    every write and the least recently used ones are evicted past `maxsize`.
    Every method completes without awaiting, so each call is atomic with
    respect to other asyncio tasks.
    """

    def __init__(self, maxsize: int = 1024, timer: Callable[[], float] = time.monotonic) -> None:
        self._entries: TLRUCache[str, tuple[str, int]] = TLRUCache(
            maxsize=maxsize, ttu=_expires_at, timer=timer
        )
        logger.info("Using in-memory scenario store (maxsize=%d)", maxsize)

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        return None if entry is None else entry[0]

    async def set_with_ttl(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            # TLRUCache skips already-expired writes and would keep any older value.
            self._entries.pop(key, None)
            return
        self._entries[key] = (value, ttl)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
