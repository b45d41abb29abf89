import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()

SUPPORTED_PROVIDERS = ("gemini", "openai", "anthropic", "ollama")
SUPPORTED_CACHE_BACKENDS = ("redis", "memory")


def _env_list(name: str, default: str) -> tuple[str, ...]:
    """Split a comma separated environment variable into a tuple of items."""
    raw = os.getenv(name, default)
    return tuple(item.strip().lower() for item in raw.split(",") if item.strip())


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache
    cache_backend: str = os.getenv("CACHE_BACKEND", "redis").lower()
    cache_ttl: int = int(os.getenv("CACHE_TTL", "3600"))  # 1 hour default
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "scenario")
    memory_cache_maxsize: int = int(os.getenv("MEMORY_CACHE_MAXSIZE", "1024"))

    # Providers, in priority order
    provider_order: tuple[str, ...] = _env_list("AI_PROVIDERS", "gemini,openai,anthropic")
    provider_timeout: float = float(os.getenv("PROVIDER_TIMEOUT", "30"))

    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-pro")
    gemini_base_url: str = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    )

    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

    anthropic_api_key: str | None = os.getenv("ANTHROPIC_API_KEY")
    anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-3-sonnet-20240229")
    anthropic_base_url: str = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1")

    # Ollama
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

    # Safety
    blocked_keywords: tuple[str, ...] = _env_list(
        "BLOCKED_KEYWORDS", "bạo lực,tự tử,khủng bố,ma túy"
    )
    scan_generated_content: bool = _env_bool("SCAN_GENERATED_CONTENT", "false")

    # Generation
    generation_deadline_ms: int = int(os.getenv("SCENARIO_TIMEOUT_MS", "30000"))
    default_temperature: float = float(os.getenv("DEFAULT_TEMPERATURE", "0.8"))
    default_max_tokens: int = int(os.getenv("DEFAULT_MAX_TOKENS", "1000"))
    default_top_p: float = float(os.getenv("DEFAULT_TOP_P", "0.9"))
    default_top_k: int = int(os.getenv("DEFAULT_TOP_K", "40"))
    fallback_enabled: bool = _env_bool("FALLBACK_ENABLED", "true")
    quota_cooldown_seconds: int = int(os.getenv("QUOTA_COOLDOWN_SECONDS", "60"))
    batch_concurrency: int = int(os.getenv("BATCH_CONCURRENCY", "3"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = _env_bool("API_RELOAD", "true")

    @property
    def generation_deadline_seconds(self) -> float:
        """Return the end-to-end generation deadline in seconds."""
        return self.generation_deadline_ms / 1000

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend not in SUPPORTED_CACHE_BACKENDS:
            raise ValueError(
                f"CACHE_BACKEND must be one of {list(SUPPORTED_CACHE_BACKENDS)}, "
                f"got {self.cache_backend!r}"
            )

        unknown = [name for name in self.provider_order if name not in SUPPORTED_PROVIDERS]
        if unknown:
            raise ValueError(
                f"AI_PROVIDERS contains unsupported providers {unknown}, "
                f"supported: {list(SUPPORTED_PROVIDERS)}"
            )

        if self.cache_ttl <= 0:
            raise ValueError("CACHE_TTL must be a positive number of seconds")

        if self.memory_cache_maxsize < 1:
            raise ValueError("MEMORY_CACHE_MAXSIZE must be at least 1")

        if self.generation_deadline_ms <= 0:
            raise ValueError("SCENARIO_TIMEOUT_MS must be positive")

        if not 0.1 <= self.default_temperature <= 2.0:
            raise ValueError("DEFAULT_TEMPERATURE must be between 0.1 and 2.0")

        if not 100 <= self.default_max_tokens <= 2000:
            raise ValueError("DEFAULT_MAX_TOKENS must be between 100 and 2000")

        if self.batch_concurrency < 1:
            raise ValueError("BATCH_CONCURRENCY must be at least 1")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client(config: Settings | None = None) -> redis.Redis:
    """Create an asyncio Redis client instance."""
    config = config or settings
    return redis.from_url(
        config.redis_url,
        password=config.redis_password,
        decode_responses=True,
    )
