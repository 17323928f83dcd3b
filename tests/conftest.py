"""Shared fixtures: canned Elasticsearch responses and error factories."""
from __future__ import annotations

import copy

import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig

SEARCH_BODY = {
    "took": 4,
    "timed_out": False,
    "hits": {
        "total": {"value": 3, "relation": "eq"},
        "max_score": 2.1,
        "hits": [
            {
                "_index": "products",
                "_id": "seed-00001",
                "_score": 2.1,
                "_source": {
                    "id": "seed-00001",
                    "name": "Premium Widget 1",
                    "description": "A premium widget for everyday tools use.",
                    "category": "tools",
                    "price": 120.5,
                },
                "highlight": {"name": ["Premium <em>Widget</em> 1"]},
            },
            {
                "_index": "products",
                "_id": "seed-00008",
                "_score": 1.4,
                "_source": {
                    "id": "seed-00008",
                    "name": "Basic Wrench 8",
                    "description": "Works on any widget bolt.",
                    "category": "tools",
                    "price": 15.0,
                },
                "highlight": {"description": ["Works on any <em>widget</em> bolt."]},
            },
            {
                "_index": "products",
                "_id": "seed-00010",
                "_score": 0.3,
                "_source": {
                    "id": "seed-00010",
                    "name": "Smart Gadget 10",
                    "description": "",
                    "category": "electronics",
                    "price": 60.0,
                },
            },
        ],
    },
    "aggregations": {
        "categories": {
            "doc_count_error_upper_bound": 0,
            "sum_other_doc_count": 0,
            "buckets": [
                {"key": "tools", "doc_count": 2},
                {"key": "electronics", "doc_count": 1},
            ],
        },
        "price_stats": {"count": 3, "min": 15.0, "max": 120.5, "avg": 65.1666, "sum": 195.5},
    },
}

SUGGEST_BODY = {
    "took": 1,
    "hits": {
        "total": {"value": 7, "relation": "eq"},
        "hits": [
            {"_id": str(number), "_score": 1.0, "_source": {"name": name}}
            for number, name in enumerate(
                [
                    "Premium Widget 1",
                    "Premium Widget 15",
                    "Premium Widget 1",
                    "Premium Wrench 22",
                    "Premium Widget 29",
                    "Premium Wrench 36",
                    "Premium Widget 43",
                ]
            )
        ],
    },
}


@pytest.fixture
def search_body() -> dict:
    return copy.deepcopy(SEARCH_BODY)


@pytest.fixture
def suggest_body() -> dict:
    return copy.deepcopy(SUGGEST_BODY)


@pytest.fixture
def make_api_error():
    """Build an ``elasticsearch`` ApiError subclass with a given HTTP status."""

    def factory(cls, status: int, body: dict | None = None, message: str = "engine_error"):
        meta = ApiResponseMeta(
            status=status,
            http_version="1.1",
            headers=HttpHeaders(),
            duration=0.0,
            node=NodeConfig("http", "localhost", 9200),
        )
        return cls(message=message, meta=meta, body=body or {})

    return factory
