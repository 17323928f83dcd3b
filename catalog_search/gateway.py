"""Thin adapter between built queries and the Elasticsearch client.

No retries and no backoff here: a failed call surfaces once as an
:class:`~catalog_search.errors.EngineError` carrying the engine's debug text.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar, overload

from elastic_transport import TransportError as ESTransportError
from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError
from pydantic import ValidationError as SchemaError

from .errors import EngineError, TransportError
from .models import RawEngineResponse, RawSearchResponse, RawSuggestResponse
from .query_builder import Query, RelevanceQuery, SuggestQuery, to_search_body

logger = logging.getLogger(__name__)

T = TypeVar("T")


def translate_engine_error(exc: Exception) -> EngineError:
    """Map an Elasticsearch client exception onto the gateway taxonomy."""
    if isinstance(exc, ApiError):
        status = exc.meta.status if exc.meta is not None else 0
        kind = "validation" if 400 <= status < 500 else "server"
        debug = f"status={status} error={exc.message} body={exc.body!r}"
        return EngineError(kind, f"Engine rejected the request ({status})", debug)
    if isinstance(exc, ESTransportError):
        return TransportError(f"Engine unreachable: {type(exc).__name__}", str(exc))
    return EngineError("server", f"Unexpected engine failure: {type(exc).__name__}", repr(exc))


class IndexGateway:
    """Executes queries against one index through an injected client handle."""

    def __init__(self, client: Elasticsearch, index: str) -> None:
        self.client = client
        self.index = index

    async def run(self, call: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking client call off the event loop, translating failures."""
        try:
            return await asyncio.to_thread(call, *args, **kwargs)
        except (ApiError, ESTransportError) as exc:
            error = translate_engine_error(exc)
            logger.warning("engine call failed kind=%s debug=%s", error.kind, error.debug)
            raise error from exc

    @overload
    async def execute(self, query: RelevanceQuery) -> RawSearchResponse: ...

    @overload
    async def execute(self, query: SuggestQuery) -> RawSuggestResponse: ...

    async def execute(self, query: Query) -> RawEngineResponse:
        if isinstance(query, RelevanceQuery):
            schema: type[RawSearchResponse] | type[RawSuggestResponse] = RawSearchResponse
        elif isinstance(query, SuggestQuery):
            schema = RawSuggestResponse
        else:
            raise TypeError(f"Unsupported query type: {type(query).__name__}")

        body = to_search_body(query)
        response = await self.run(self.client.search, index=self.index, body=body)
        try:
            return schema.model_validate(dict(response))
        except SchemaError as exc:
            logger.warning("malformed %s response from engine: %s", schema.__name__, exc)
            raise EngineError("server", "Malformed engine response", str(exc)) from exc
