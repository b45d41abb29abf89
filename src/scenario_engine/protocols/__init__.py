"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis -> in-memory, Gemini -> OpenAI, etc.)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .cache_store import CacheStore
from .generation_provider import GenerationProvider

__all__ = [
    "CacheStore",
    "GenerationProvider",
]
