"""Result cache service.

Maps a normalized topic to the last generated result for that topic,
on top of any CacheStore. Caching is best effort: store failures and
unreadable payloads are logged and treated as a miss (reads) or a no-op
(writes), never surfaced to the caller.
"""

import hashlib
import json
import unicodedata

from scenario_engine.config import settings
from scenario_engine.entities import GenerationResult
from scenario_engine.errors import CacheStoreError
from scenario_engine.log import get_logger
from scenario_engine.protocols import CacheStore

logger = get_logger(__name__)


def normalize_topic(topic: str) -> str:
    """Trim and lower-case a topic for key derivation."""
    return unicodedata.normalize("NFC", topic.strip()).lower()


class ScenarioCache:
    """Topic-keyed cache of generation results.

    This service depends on the CacheStore PROTOCOL, so Redis, an
    in-process dict or any other expiring store can back it.

    Example:
        ```python
        cache = ScenarioCache.create(store=RedisScenarioRepository.create())
        await cache.set("Nếu như con người có thể bay", result)
        hit = await cache.get("  nếu như con người có thể bay ")
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        ttl: int | None = None,
        key_prefix: str | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            store: Expiring key-value store (required).
            ttl: Time-to-live for entries in seconds. Defaults to settings.
            key_prefix: Key namespace. Defaults to settings.
        """
        self._store = store
        self._ttl = ttl or settings.cache_ttl
        self._prefix = key_prefix or settings.cache_key_prefix

    @classmethod
    def create(
        cls,
        store: CacheStore,
        ttl: int | None = None,
        key_prefix: str | None = None,
    ) -> "ScenarioCache":
        """Factory method to create ScenarioCache with defaults from settings."""
        return cls(store=store, ttl=ttl, key_prefix=key_prefix)

    def key_for(self, topic: str) -> str:
        """Derive the stable storage key for a topic."""
        digest = hashlib.sha256(normalize_topic(topic).encode("utf-8")).hexdigest()
        return f"{self._prefix}:{digest}"

    async def get(self, topic: str) -> GenerationResult | None:
        """Return the live cached result for a topic, if any.

        Args:
            topic: The topic, in any casing or padding

        Returns:
            The stored result exactly as written, or None on a miss
        """
        key = self.key_for(topic)
        try:
            payload = await self._store.get(key)
        except CacheStoreError as e:
            logger.warning("Cache read failed, treating as miss: %s", e)
            return None

        if payload is None:
            return None

        try:
            return GenerationResult.from_dict(json.loads(payload))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return None

    async def set(self, topic: str, result: GenerationResult) -> bool:
        """Store a result under the topic's key with the fixed TTL.

        Returns:
            True if the write succeeded, False otherwise
        """
        key = self.key_for(topic)
        payload = json.dumps(result.to_dict(), ensure_ascii=False)
        try:
            await self._store.set_with_ttl(key, payload, self._ttl)
        except CacheStoreError as e:
            logger.warning("Cache write failed for %s: %s", key, e)
            return False

        logger.debug("Scenario cached under %s for %ss", key, self._ttl)
        return True

    async def delete(self, topic: str) -> bool:
        """Drop the cached result for a topic.

        Returns:
            True if an entry was removed, False otherwise
        """
        key = self.key_for(topic)
        try:
            return await self._store.delete(key)
        except CacheStoreError as e:
            logger.warning("Cache delete failed for %s: %s", key, e)
            return False

    async def is_healthy(self) -> bool:
        return await self._store.health_check()

    @property
    def ttl(self) -> int:
        """Get the entry time-to-live in seconds."""
        return self._ttl

    @property
    def store(self) -> CacheStore:
        """Get the underlying store (for testing)."""
        return self._store
