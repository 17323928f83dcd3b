"""Error taxonomy shared by the gateway, the HTTP layer and the client."""
from __future__ import annotations

ENGINE_ERROR_HEADER = "X-Engine-Error"


class SearchGatewayError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(SearchGatewayError):
    """A query parameter is missing or malformed; no query was built."""


class EngineError(SearchGatewayError):
    """The index engine (or the path to it) failed to answer a query.

    ``kind`` is one of ``transport``, ``validation`` or ``server``. ``debug``
    carries the engine-provided diagnostic text; it is meant for logs and the
    HTTP error body, never for the search/suggest result contract.
    """

    KINDS = ("transport", "validation", "server")

    def __init__(self, kind: str, message: str, debug: str = "") -> None:
        if kind not in self.KINDS:
            raise ValueError(f"Unknown engine error kind: {kind!r}")
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.debug = debug or message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r})"


class TransportError(EngineError):
    """Network or connection failure before the engine produced a response."""

    def __init__(self, message: str, debug: str = "") -> None:
        super().__init__("transport", message, debug)
