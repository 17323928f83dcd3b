"""Turns user text into relevance and autocomplete queries.

Everything here is pure: no I/O, no state. A built query is a small frozen
dataclass; :func:`to_search_body` renders it into the Elasticsearch request
body that :class:`~catalog_search.gateway.IndexGateway` sends.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union

from .config import settings

logger = logging.getLogger(__name__)

SEARCH_FIELDS: Tuple[str, ...] = ("name", "description")
HIGHLIGHT_FIELDS: Tuple[str, ...] = ("name", "description")
SUGGEST_FIELD = "name"
# Delegates edit distances to the engine's length-based table:
# 0 edits for 1-2 chars, 1 edit for 3-5 chars, 2 edits beyond.
AUTO_FUZZINESS = "AUTO"

CATEGORY_AGG = "categories"
PRICE_STATS_AGG = "price_stats"


@dataclass(frozen=True)
class TermsFacet:
    field: str
    size: int


@dataclass(frozen=True)
class StatsMetric:
    field: str


@dataclass(frozen=True)
class AggregationSpec:
    category_facet: TermsFacet
    price_stats: StatsMetric

    def to_body(self) -> Dict[str, Any]:
        return {
            CATEGORY_AGG: {
                "terms": {
                    "field": self.category_facet.field,
                    "size": self.category_facet.size,
                }
            },
            PRICE_STATS_AGG: {"stats": {"field": self.price_stats.field}},
        }


def aggregation_spec(bucket_count: int | None = None) -> AggregationSpec:
    """Static facet request attached to every relevance search."""
    return AggregationSpec(
        category_facet=TermsFacet(field="category", size=bucket_count or settings.category_buckets),
        price_stats=StatsMetric(field="price"),
    )


@dataclass(frozen=True)
class RelevanceQuery:
    text: str
    fields: Tuple[str, ...] = SEARCH_FIELDS
    fuzziness: str = AUTO_FUZZINESS
    highlight_fields: Tuple[str, ...] = HIGHLIGHT_FIELDS
    aggregations: AggregationSpec = field(default_factory=aggregation_spec)
    size: int = settings.search_result_size

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValueError("RelevanceQuery needs at least one field")


@dataclass(frozen=True)
class SuggestQuery:
    prefix: str
    field: str = SUGGEST_FIELD
    limit: int = settings.suggest_limit

    def __post_init__(self) -> None:
        if not self.prefix.strip():
            raise ValueError("SuggestQuery prefix must not be empty")
        if self.limit < 1:
            raise ValueError("SuggestQuery limit must be positive")


Query = Union[RelevanceQuery, SuggestQuery]


def _require_text(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string, got {type(value).__name__}")
    return value


def build_relevance_query(text: str) -> RelevanceQuery:
    """Multi-field fuzzy query over name and description.

    Empty text is passed through as-is; the rendered body asks the engine to
    treat a term-less query as match-all.
    """
    return RelevanceQuery(text=_require_text(text, "text"))


def build_suggest_query(prefix: str, limit: int | None = None) -> SuggestQuery | None:
    """Bool-prefix autocomplete query on ``name``, or ``None`` for an empty prefix."""
    prefix = _require_text(prefix, "prefix")
    if not prefix.strip():
        return None
    return SuggestQuery(prefix=prefix, limit=limit or settings.suggest_limit)


def _relevance_body(query: RelevanceQuery) -> Dict[str, Any]:
    return {
        "size": query.size,
        "track_total_hits": True,
        "query": {
            "multi_match": {
                "query": query.text,
                "fields": list(query.fields),
                "fuzziness": query.fuzziness,
                "zero_terms_query": "all",
            }
        },
        "highlight": {"fields": {name: {} for name in query.highlight_fields}},
        "aggs": query.aggregations.to_body(),
    }


def _suggest_body(query: SuggestQuery) -> Dict[str, Any]:
    # match_bool_prefix: every token but the last must match as a term, the
    # last one as a prefix.
    return {
        "size": query.limit,
        "_source": [query.field],
        "query": {"match_bool_prefix": {query.field: {"query": query.prefix}}},
    }


def to_search_body(query: Query) -> Dict[str, Any]:
    if isinstance(query, RelevanceQuery):
        body = _relevance_body(query)
    elif isinstance(query, SuggestQuery):
        body = _suggest_body(query)
    else:
        raise TypeError(f"Unsupported query type: {type(query).__name__}")
    logger.debug("ES query payload=%s", body)
    return body
