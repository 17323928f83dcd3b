"""HTTP backend used by the coordinator against a remote gateway."""

import httpx
import pytest

from catalog_search.client import HttpSearchBackend
from catalog_search.errors import ENGINE_ERROR_HEADER, EngineError, TransportError


def _backend(handler):
    transport = httpx.MockTransport(handler)
    return HttpSearchBackend(client=httpx.AsyncClient(transport=transport, base_url="http://gateway"))


@pytest.mark.asyncio
async def test_search_parses_the_result_contract():
    def handler(request):
        assert request.url.path == "/search"
        assert request.url.params["query"] == "lamp"
        return httpx.Response(
            200,
            json={
                "hits": [
                    {
                        "source": {"id": "1", "name": "Classic Lamp 3", "category": "home", "price": 20},
                        "highlight": {"name": ["Classic <em>Lamp</em> 3"]},
                        "display": {"name": "Classic <em>Lamp</em> 3", "description": ""},
                    }
                ],
                "aggregations": {
                    "categories": [{"key": "home", "docCount": 1}],
                    "priceStats": {"min": 20, "max": 20, "avg": 20, "sum": 20, "count": 1},
                },
                "total": 1,
                "took_ms": 2,
            },
        )

    async with _backend(handler) as backend:
        result = await backend.search("lamp")

    assert result.hits[0].source.name == "Classic Lamp 3"
    assert result.aggregations.categories[0].docCount == 1


@pytest.mark.asyncio
async def test_suggest_returns_names():
    async with _backend(lambda request: httpx.Response(200, json=["Tent 4", "Tent 11"])) as backend:
        assert await backend.suggest("ten") == ["Tent 4", "Tent 11"]


@pytest.mark.asyncio
async def test_gateway_error_keeps_engine_error_kind():
    def handler(request):
        return httpx.Response(400, json={"detail": "parsing_exception"}, headers={ENGINE_ERROR_HEADER: "validation"})

    async with _backend(handler) as backend:
        with pytest.raises(EngineError) as excinfo:
            await backend.search("((")

    assert excinfo.value.kind == "validation"
    assert "parsing_exception" in excinfo.value.debug


@pytest.mark.asyncio
async def test_gateway_reporting_transport_failure_raises_transport_error():
    def handler(request):
        return httpx.Response(400, json={"detail": "refused"}, headers={ENGINE_ERROR_HEADER: "transport"})

    async with _backend(handler) as backend:
        with pytest.raises(TransportError):
            await backend.suggest("wid")


@pytest.mark.asyncio
async def test_unreachable_gateway_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _backend(handler) as backend:
        with pytest.raises(TransportError):
            await backend.suggest("wid")


@pytest.mark.asyncio
async def test_server_error_without_header_is_a_server_error():
    async with _backend(lambda request: httpx.Response(502, text="bad gateway")) as backend:
        with pytest.raises(EngineError) as excinfo:
            await backend.search("wid")

    assert excinfo.value.kind == "server"


@pytest.mark.asyncio
async def test_non_json_reply_is_a_server_error():
    async with _backend(lambda request: httpx.Response(200, text="<html>proxy</html>")) as backend:
        with pytest.raises(EngineError) as excinfo:
            await backend.suggest("wid")

    assert excinfo.value.kind == "server"
    assert "<html>proxy</html>" in excinfo.value.debug


@pytest.mark.asyncio
async def test_search_body_that_does_not_fit_the_contract_is_a_server_error():
    async with _backend(lambda request: httpx.Response(200, json={"hits": "nope"})) as backend:
        with pytest.raises(EngineError) as excinfo:
            await backend.search("wid")

    assert excinfo.value.kind == "server"


@pytest.mark.asyncio
async def test_suggest_body_that_is_not_a_list_is_a_server_error():
    async with _backend(lambda request: httpx.Response(200, json={"names": ["Tent 4"]})) as backend:
        with pytest.raises(EngineError) as excinfo:
            await backend.suggest("ten")

    assert excinfo.value.kind == "server"


@pytest.mark.asyncio
async def test_undecodable_reply_is_a_server_error_not_a_transport_error():
    def handler(request):
        raise httpx.DecodingError("invalid gzip stream", request=request)

    async with _backend(handler) as backend:
        with pytest.raises(EngineError) as excinfo:
            await backend.search("wid")

    assert not isinstance(excinfo.value, TransportError)
    assert excinfo.value.kind == "server"
