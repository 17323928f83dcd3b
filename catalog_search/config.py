"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MAPPING_PATH = str(Path(__file__).with_name("product-mapping.json"))


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _get_flag(name: str, default: str) -> bool:
    return _get_env(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    es_host: str = _get_env("ES_HOST", "http://localhost:9200")
    es_index: str = _get_env("ES_INDEX", "products")
    es_request_timeout: float = float(_get_env("ES_REQUEST_TIMEOUT", "10"))
    mapping_path: str = _get_env("MAPPING_PATH", DEFAULT_MAPPING_PATH)
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "30"))
    suggest_limit: int = int(_get_env("SUGGEST_LIMIT", "5"))
    category_buckets: int = int(_get_env("CATEGORY_BUCKETS", "20"))
    search_result_size: int = int(_get_env("SEARCH_RESULT_SIZE", "10"))
    debounce_ms: int = int(_get_env("DEBOUNCE_MS", "300"))
    gateway_url: str = _get_env("GATEWAY_URL", "http://localhost:5000")
    request_timeout_seconds: float = float(_get_env("REQUEST_TIMEOUT_SECONDS", "10"))
    ensure_index_on_startup: bool = _get_flag("ENSURE_INDEX_ON_STARTUP", "false")
    seed_on_startup: bool = _get_flag("SEED_ON_STARTUP", "false")
    seed_count: int = int(_get_env("SEED_COUNT", "100"))
    seed_random_state: int = int(_get_env("SEED_RANDOM_STATE", "42"))
    host: str = _get_env("HOST", "0.0.0.0")
    port: int = int(_get_env("PORT", "5000"))
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()
