"""Cache store factory."""

from scenario_engine.config import Settings, get_redis_client
from scenario_engine.log import get_logger
from scenario_engine.protocols import CacheStore

from .memory_repository import InMemoryScenarioRepository
from .redis_repository import RedisScenarioRepository

logger = get_logger(__name__)


def create_cache_store(config: Settings) -> CacheStore:
    """Create a CacheStore based on the configured backend.

    Returns:
        An instance of `RedisScenarioRepository` or `InMemoryScenarioRepository`.
    """
    logger.info("Creating cache store of type %s", config.cache_backend)
    match config.cache_backend:
        case "redis":
            return RedisScenarioRepository.create(redis_client=get_redis_client(config))
        case "memory":
            return InMemoryScenarioRepository(maxsize=config.memory_cache_maxsize)
        case _:
            raise ValueError(
                f"Invalid cache backend: {config.cache_backend}. Use 'redis' or 'memory'."
            )
