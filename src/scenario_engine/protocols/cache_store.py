"""Cache storage protocol.

Defines the interface for any expiring key-value store that can hold
serialized generation results.

Implementations can include:
- Redis (default)
- In-process dictionary (local runs and tests)
- Memcached, DynamoDB with TTL, or any other store with per-key expiry
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for expiring key-value stores.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed. Implementations raise
    ``scenario_engine.errors.CacheStoreError`` when the backing store
    cannot complete an operation.

    Example:
        ```python
        from scenario_engine.protocols import CacheStore

        store: CacheStore = RedisScenarioRepository.create()
        store: CacheStore = InMemoryScenarioRepository()
        ```
    """

    async def get(self, key: str) -> str | None:
        """Fetch a live value.

        Args:
            key: The storage key

        Returns:
            The stored value, or None if absent or expired
        """
        ...

    async def set_with_ttl(self, key: str, value: str, ttl: int) -> None:
        """Store a value that expires after ``ttl`` seconds.

        Args:
            key: The storage key
            value: The serialized value
            ttl: Time-to-live in seconds
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete a key.

        Args:
            key: The storage key

        Returns:
            True if a value was deleted, False otherwise
        """
        ...

    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...

    async def close(self) -> None:
        """Release connections held by the store."""
        ...
