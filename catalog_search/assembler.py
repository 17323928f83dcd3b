"""Reshapes validated engine responses into the client-facing contract."""
from __future__ import annotations

import logging
from typing import Dict, List

from .config import settings
from .models import (
    Aggregations,
    CategoryBucket,
    Hit,
    Item,
    PriceStats,
    RawAggregations,
    RawHit,
    RawSearchResponse,
    RawStatsAggregation,
    RawSuggestResponse,
    SearchResult,
)
from .query_builder import HIGHLIGHT_FIELDS, SUGGEST_FIELD

logger = logging.getLogger(__name__)


def _item_from_hit(hit: RawHit) -> Item:
    present = {key: value for key, value in hit.source.items() if value is not None}
    source = {"name": "", "description": "", "category": "uncategorized", "price": 0.0, **present}
    if not source.get("id"):
        source["id"] = hit.id or "unknown"
    return Item.model_validate(source)


def _display_fields(item: Item, highlight: Dict[str, List[str]]) -> Dict[str, str]:
    display: Dict[str, str] = {}
    for name in HIGHLIGHT_FIELDS:
        fragments = highlight.get(name) or []
        display[name] = fragments[0] if fragments else str(getattr(item, name, "") or "")
    return display


def assemble_hit(raw: RawHit) -> Hit:
    item = _item_from_hit(raw)
    highlight = {name: list(fragments) for name, fragments in raw.highlight.items() if fragments}
    return Hit(source=item, highlight=highlight, display=_display_fields(item, highlight))


def assemble_price_stats(raw: RawStatsAggregation | None) -> PriceStats:
    if raw is None or raw.count <= 0:
        return PriceStats()
    return PriceStats(
        min=raw.min or 0.0,
        max=raw.max or 0.0,
        avg=raw.avg or 0.0,
        sum=raw.sum or 0.0,
        count=raw.count,
    )


def assemble_aggregations(raw: RawAggregations | None) -> Aggregations:
    if raw is None:
        return Aggregations()
    # Engine order is kept as-is (descending doc count for terms aggs).
    buckets = [
        CategoryBucket(key=str(bucket.key), docCount=bucket.doc_count)
        for bucket in (raw.categories.buckets if raw.categories else [])
    ]
    return Aggregations(categories=buckets, priceStats=assemble_price_stats(raw.price_stats))


def assemble_search_result(raw: RawSearchResponse) -> SearchResult:
    hits = [assemble_hit(hit) for hit in raw.hits.hits]
    total = raw.hits.total.value if raw.hits.total is not None else len(hits)
    return SearchResult(
        hits=hits,
        aggregations=assemble_aggregations(raw.aggregations),
        total=total,
        took_ms=float(raw.took),
    )


def assemble_suggestions(raw: RawSuggestResponse, limit: int | None = None) -> List[str]:
    """Distinct ``name`` values in engine order, never longer than ``limit``."""
    limit = limit or settings.suggest_limit
    names: List[str] = []
    for hit in raw.hits.hits:
        name = hit.source.get(SUGGEST_FIELD)
        if not isinstance(name, str) or not name or name in names:
            continue
        if len(names) >= limit:
            logger.debug("suggest response had more than %s distinct names; truncated", limit)
            break
        names.append(name)
    return names
