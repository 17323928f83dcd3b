"""HTTP backend for :class:`~catalog_search.coordinator.RequestCoordinator`.

Talks to the gateway's ``/search`` and ``/suggest`` endpoints and maps
failures back onto the shared error taxonomy, so the coordinator handles a
remote gateway exactly like an in-process :class:`SearchService`.
"""
from __future__ import annotations

import logging
from typing import Any, List

import httpx
from pydantic import ValidationError as SchemaError

from .config import settings
from .errors import ENGINE_ERROR_HEADER, EngineError, TransportError
from .models import SearchResult

logger = logging.getLogger(__name__)


class HttpSearchBackend:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.gateway_url,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
        )

    async def __aenter__(self) -> "HttpSearchBackend":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def suggest(self, prefix: str) -> List[str]:
        payload = await self._get("/suggest", prefix)
        if not isinstance(payload, list):
            raise EngineError("server", "Gateway returned a malformed suggestion list", repr(payload))
        return [str(name) for name in payload]

    async def search(self, text: str) -> SearchResult:
        payload = await self._get("/search", text)
        try:
            return SearchResult.model_validate(payload)
        except SchemaError as exc:
            raise EngineError("server", "Gateway returned a malformed search result", str(exc)) from exc

    async def _get(self, path: str, query: str) -> Any:
        try:
            response = await self._client.get(path, params={"query": query})
        except httpx.TransportError as exc:
            raise TransportError(f"Gateway unreachable: {type(exc).__name__}", str(exc)) from exc
        except httpx.HTTPError as exc:
            # decoding errors and redirect loops are not transport failures
            raise EngineError("server", f"Gateway request failed: {type(exc).__name__}", str(exc)) from exc

        if response.is_error:
            kind = response.headers.get(ENGINE_ERROR_HEADER, "")
            message = f"Gateway returned {response.status_code} for {path}"
            logger.debug("%s: %s", message, response.text)
            if kind == "transport":
                raise TransportError(message, response.text)
            if kind not in EngineError.KINDS:
                kind = "validation" if response.status_code < 500 else "server"
            raise EngineError(kind, message, response.text)
        try:
            return response.json()
        except ValueError as exc:
            raise EngineError("server", f"Gateway returned a non-JSON body for {path}", response.text) from exc
