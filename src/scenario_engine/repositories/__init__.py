"""Repository layer for data access.

This layer abstracts external dependencies (Redis, language-model APIs)
behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis -> in-memory, Gemini -> OpenAI, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

The cache stores are protocol-based (structural typing). The provider
adapters share ``HTTPGenerationProvider`` for HTTP plumbing and error
translation.
"""

from scenario_engine.protocols import CacheStore, GenerationProvider

from .anthropic_provider import AnthropicProvider
from .cache_factory import create_cache_store
from .gemini_provider import GeminiProvider
from .http_provider import HTTPGenerationProvider
from .memory_repository import InMemoryScenarioRepository
from .ollama_provider import OllamaProvider
from .openai_provider import OpenAIProvider
from .redis_repository import RedisScenarioRepository

__all__ = [
    "CacheStore",
    "GenerationProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "HTTPGenerationProvider",
    "InMemoryScenarioRepository",
    "OllamaProvider",
    "OpenAIProvider",
    "RedisScenarioRepository",
    "create_cache_store",
]
