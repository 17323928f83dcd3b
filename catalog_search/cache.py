"""Suggestion cache with Redis primary and in-memory fallback.

Autocomplete fires on nearly every pause in typing, so identical prefixes are
served from here for a short TTL. Every administrative write clears it.
"""
from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

import redis

from .config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "suggest:"
CLEAR_BATCH_SIZE = 500


def cache_key(index: str, prefix: str, limit: int) -> str:
    digest = hashlib.sha1(f"{index}\x00{limit}\x00{prefix}".encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}{digest}"


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[List[str]]: ...

    def set(self, key: str, value: List[str], ttl: int) -> None: ...

    def clear(self) -> None: ...


@dataclass
class RedisCache:
    client: redis.Redis
    batch_size: int = CLEAR_BATCH_SIZE

    def get(self, key: str) -> Optional[List[str]]:
        try:
            data = self.client.get(key)
        except redis.RedisError as exc:
            logger.warning("Redis get failed: %s", exc)
            return None
        if not data:
            return None
        try:
            value = json.loads(data)
        except json.JSONDecodeError:
            return None
        return value if isinstance(value, list) else None

    def set(self, key: str, value: List[str], ttl: int) -> None:
        try:
            self.client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as exc:
            logger.warning("Redis set failed: %s", exc)

    def clear(self) -> None:
        try:
            batch: List[bytes] = []
            for key in self.client.scan_iter(match=f"{KEY_PREFIX}*", count=self.batch_size):
                batch.append(key)
                if len(batch) >= self.batch_size:
                    self.client.delete(*batch)
                    batch = []
            if batch:
                self.client.delete(*batch)
        except redis.RedisError as exc:
            logger.warning("Redis clear failed: %s", exc)


class InMemoryCache:
    def __init__(self) -> None:
        self._store: Dict[str, tuple[float, List[str]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[List[str]]:
        with self._lock:
            value = self._store.get(key)
            if not value:
                return None
            expires_at, payload = value
            if expires_at < time.time():
                self._store.pop(key, None)
                return None
            return list(payload)

    def set(self, key: str, value: List[str], ttl: int) -> None:
        with self._lock:
            self._store[key] = (time.time() + ttl, list(value))

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


_cache: CacheBackend | None = None


def get_cache() -> CacheBackend:
    global _cache
    if _cache is not None:
        return _cache
    try:
        client = redis.Redis(host=settings.redis_host, port=settings.redis_port, decode_responses=False)
        client.ping()
        logger.info("Using Redis cache at %s:%s", settings.redis_host, settings.redis_port)
        _cache = RedisCache(client)
    except redis.RedisError:
        logger.warning("Redis not available, using in-memory cache")
        _cache = InMemoryCache()
    return _cache
