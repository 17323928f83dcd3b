"""Search and suggest flows built on top of the index gateway."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import List

from .assembler import assemble_search_result, assemble_suggestions
from .cache import CacheBackend, cache_key
from .config import settings
from .gateway import IndexGateway
from .models import SearchResult
from .query_builder import build_relevance_query, build_suggest_query

logger = logging.getLogger(__name__)


class SearchService:
    """Builder -> gateway -> assembler, with a short-lived suggestion cache.

    ``cache`` may be ``None`` (or ``cache_ttl`` zero) to always hit the engine.
    """

    def __init__(
        self,
        gateway: IndexGateway,
        cache: CacheBackend | None = None,
        cache_ttl: int = settings.cache_ttl_seconds,
        suggest_limit: int = settings.suggest_limit,
    ) -> None:
        self.gateway = gateway
        self.cache = cache if cache_ttl > 0 else None
        self.cache_ttl = cache_ttl
        self.suggest_limit = suggest_limit

    async def search(self, text: str) -> SearchResult:
        t0 = perf_counter()
        query = build_relevance_query(text)
        t1 = perf_counter()
        raw = await self.gateway.execute(query)
        t2 = perf_counter()
        result = assemble_search_result(raw)
        t3 = perf_counter()
        logger.info(
            "timing: total=%.2fms build=%.2fms es=%.2fms post=%.2fms q=%r hits=%s total_hits=%s",
            (t3 - t0) * 1000,
            (t1 - t0) * 1000,
            (t2 - t1) * 1000,
            (t3 - t2) * 1000,
            text,
            len(result.hits),
            result.total,
        )
        return result

    async def suggest(self, prefix: str) -> List[str]:
        t0 = perf_counter()
        query = build_suggest_query(prefix, self.suggest_limit)
        if query is None:
            logger.debug("suggest skipped for empty prefix")
            return []

        key = cache_key(self.gateway.index, query.prefix, query.limit)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info(
                    "timing: total=%.2fms cache_hit=1 prefix=%r",
                    (perf_counter() - t0) * 1000,
                    prefix,
                )
                return cached[: query.limit]

        t1 = perf_counter()
        raw = await self.gateway.execute(query)
        t2 = perf_counter()
        names = assemble_suggestions(raw, query.limit)
        logger.info(
            "timing: total=%.2fms es=%.2fms cache_hit=0 prefix=%r suggestions=%s",
            (perf_counter() - t0) * 1000,
            (t2 - t1) * 1000,
            prefix,
            len(names),
        )
        if self.cache is not None:
            self.cache.set(key, names, self.cache_ttl)
            logger.debug("cache_store prefix=%r ttl=%s", prefix, self.cache_ttl)
        return names

    def invalidate(self) -> None:
        """Drop cached suggestions after the index contents changed."""
        if self.cache is not None:
            self.cache.clear()
