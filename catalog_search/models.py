"""Pydantic models for request/response payloads.

Two families live here: the client-facing contract (``Item``, ``Hit``,
``SearchResult``...) and the raw Elasticsearch response schemas that the index
gateway validates against before anything reaches the result assembler.
"""
from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    category: str = "uncategorized"
    price: float = Field(..., ge=0)


class CategoryBucket(BaseModel):
    key: str
    docCount: int = Field(0, ge=0)


class PriceStats(BaseModel):
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    sum: float = 0.0
    count: int = Field(0, ge=0)


class Aggregations(BaseModel):
    categories: list[CategoryBucket] = Field(default_factory=list)
    priceStats: PriceStats = Field(default_factory=PriceStats)


class Hit(BaseModel):
    source: Item
    highlight: dict[str, list[str]] = Field(default_factory=dict)
    # Per highlightable field: first marked-up fragment, else the raw value.
    display: dict[str, str] = Field(default_factory=dict)


class SearchResult(BaseModel):
    hits: list[Hit] = Field(default_factory=list)
    aggregations: Aggregations = Field(default_factory=Aggregations)
    total: int = 0
    took_ms: float = 0.0


# --- raw engine responses -------------------------------------------------


class _RawModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RawTotal(_RawModel):
    value: int = 0
    relation: str = "eq"


class RawHit(_RawModel):
    id: str | None = Field(None, alias="_id")
    score: float | None = Field(None, alias="_score")
    source: dict[str, Any] = Field(default_factory=dict, alias="_source")
    highlight: dict[str, list[str]] = Field(default_factory=dict)


class RawHits(_RawModel):
    total: RawTotal | None = None
    hits: list[RawHit] = Field(default_factory=list)


class RawBucket(_RawModel):
    key: Union[str, int, float]
    doc_count: int = 0


class RawTermsAggregation(_RawModel):
    buckets: list[RawBucket] = Field(default_factory=list)


class RawStatsAggregation(_RawModel):
    count: int = 0
    min: float | None = None
    max: float | None = None
    avg: float | None = None
    sum: float | None = None


class RawAggregations(_RawModel):
    categories: RawTermsAggregation | None = None
    price_stats: RawStatsAggregation | None = None


class RawSearchResponse(_RawModel):
    kind: Literal["search"] = "search"
    took: int = 0
    timed_out: bool = False
    hits: RawHits = Field(default_factory=RawHits)
    aggregations: RawAggregations | None = None


class RawSuggestResponse(_RawModel):
    kind: Literal["suggest"] = "suggest"
    took: int = 0
    hits: RawHits = Field(default_factory=RawHits)


RawEngineResponse = Union[RawSearchResponse, RawSuggestResponse]
