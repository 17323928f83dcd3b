"""HTTP surface: /search, /suggest and the administrative endpoints."""

from unittest.mock import MagicMock, patch

import pytest
from elastic_transport import ConnectionError as ESConnectionError
from elasticsearch.exceptions import BadRequestError
from fastapi.testclient import TestClient

from catalog_search.errors import ENGINE_ERROR_HEADER
from catalog_search.gateway import IndexGateway
from catalog_search.main import app, get_gateway, get_suggestion_cache


@pytest.fixture
def es():
    return MagicMock()


@pytest.fixture
def client(es):
    app.dependency_overrides[get_gateway] = lambda: IndexGateway(es, "products")
    app.dependency_overrides[get_suggestion_cache] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_search_returns_hits_and_facets(client, es, search_body):
    es.search.return_value = search_body

    response = client.get("/search", params={"query": "wigt"})

    assert response.status_code == 200
    payload = response.json()
    first = payload["hits"][0]
    assert first["source"]["name"] == "Premium Widget 1"
    assert "<em>Widget</em>" in first["highlight"]["name"][0]
    assert first["display"]["description"] == first["source"]["description"]
    assert payload["aggregations"]["categories"] == [
        {"key": "tools", "docCount": 2},
        {"key": "electronics", "docCount": 1},
    ]
    assert payload["aggregations"]["priceStats"]["count"] == 3

    body = es.search.call_args.kwargs["body"]
    assert body["query"]["multi_match"]["query"] == "wigt"
    assert body["query"]["multi_match"]["fuzziness"] == "AUTO"


def test_empty_search_asks_for_everything(client, es, search_body):
    es.search.return_value = search_body

    response = client.get("/search", params={"query": ""})

    assert response.status_code == 200
    body = es.search.call_args.kwargs["body"]
    assert body["query"]["multi_match"]["zero_terms_query"] == "all"
    assert response.json()["aggregations"]["priceStats"]["count"] == search_body["hits"]["total"]["value"]


@pytest.mark.parametrize("path", ["/search", "/suggest"])
def test_missing_query_parameter_is_rejected(client, es, path):
    response = client.get(path)

    assert response.status_code == 400
    es.search.assert_not_called()


def test_empty_suggest_does_not_touch_the_engine(client, es):
    response = client.get("/suggest", params={"query": ""})

    assert response.status_code == 200
    assert response.json() == []
    es.search.assert_not_called()


def test_suggest_returns_at_most_five_names(client, es, suggest_body):
    es.search.return_value = suggest_body

    response = client.get("/suggest", params={"query": "premium w"})

    assert response.status_code == 200
    names = response.json()
    assert 0 < len(names) <= 5
    assert es.search.call_args.kwargs["body"]["query"] == {
        "match_bool_prefix": {"name": {"query": "premium w"}}
    }


def test_engine_rejection_is_a_400_with_debug_text(client, es, make_api_error):
    es.search.side_effect = make_api_error(
        BadRequestError, 400, {"error": {"type": "query_shard_exception"}}, "query_shard_exception"
    )

    response = client.get("/search", params={"query": "widget"})

    assert response.status_code == 400
    assert "query_shard_exception" in response.json()["detail"]
    assert response.headers[ENGINE_ERROR_HEADER] == "validation"


def test_unreachable_engine_is_reported_as_transport_failure(client, es):
    es.search.side_effect = ESConnectionError("Connection refused")

    response = client.get("/suggest", params={"query": "wid"})

    assert response.status_code == 400
    assert response.headers[ENGINE_ERROR_HEADER] == "transport"


def test_create_index_uses_bundled_mapping(client, es):
    response = client.post("/create-index")

    assert response.status_code == 200
    assert response.json() == "Index created"
    kwargs = es.indices.create.call_args.kwargs
    assert kwargs["index"] == "products"
    assert kwargs["body"]["mappings"]["properties"]["category"] == {"type": "keyword"}


def test_create_index_failure_is_a_400(client, es, make_api_error):
    es.indices.create.side_effect = make_api_error(
        BadRequestError, 400, {"error": {"type": "resource_already_exists_exception"}}
    )

    response = client.post("/create-index")

    assert response.status_code == 400
    assert "resource_already_exists_exception" in response.json()["detail"]


def test_ingest_indexes_a_single_item(client, es):
    item = {"id": "p-1", "name": "Premium Widget 1", "description": "Shiny", "category": "tools", "price": 9.5}

    response = client.post("/ingest", json=item)

    assert response.status_code == 200
    assert response.json() == "Product indexed"
    kwargs = es.index.call_args.kwargs
    assert kwargs["id"] == "p-1"
    assert kwargs["document"] == item


def test_ingest_rejects_negative_price(client, es):
    response = client.post("/ingest", json={"id": "p-1", "name": "Widget", "price": -1})

    assert response.status_code == 400
    es.index.assert_not_called()


def test_seed_bulk_loads_synthetic_items(client, es):
    with patch("catalog_search.seeding.helpers.bulk", return_value=(3, [])) as bulk:
        response = client.post("/seed", params={"count": 3})

    assert response.status_code == 200
    assert response.json() == {"indexed": 3}
    actions = bulk.call_args.args[1]
    assert [action["_source"]["name"] for action in actions] == [
        "Premium Widget 1",
        "Basic Gadget 2",
        "Deluxe Lamp 3",
    ]


def test_health_reports_cluster_and_document_count(client, es):
    es.cluster.health.return_value = {"status": "green"}
    es.count.return_value = {"count": 12}

    response = client.get("/health")

    assert response.json() == {"elasticsearch": "green", "index": "products", "documents": 12}


def test_health_survives_an_unreachable_engine(client, es):
    es.cluster.health.side_effect = ESConnectionError("Connection refused")

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["elasticsearch"] == "unavailable"
