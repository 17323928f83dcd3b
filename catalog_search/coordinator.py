"""Client-side coordination of autocomplete and search requests.

One :class:`RequestCoordinator` owns a single stream of user intent: the
current text, one pending debounce timer and the identity of the latest
suggest/search request. It runs on one asyncio event loop; timer callbacks and
request completions are the only places state changes, so no locking is
needed.

Suggest lifecycle::

    IDLE --input--> DEBOUNCING --quiet window--> AWAITING_SUGGEST --> IDLE

A search can be submitted from any state. It clears suggestions and makes any
outstanding suggest response stale.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Protocol

from .config import settings
from .errors import EngineError, TransportError
from .models import SearchResult

logger = logging.getLogger(__name__)


class SuggestState(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    AWAITING_SUGGEST = "awaiting_suggest"


class SearchBackend(Protocol):
    async def suggest(self, prefix: str) -> List[str]: ...

    async def search(self, text: str) -> SearchResult: ...


class RequestCoordinator:
    """Debounces suggestions, discards superseded responses, keeps the last good result.

    ``cancel_superseded`` additionally cancels the task of a superseded
    suggest request; stale responses are discarded either way.
    """

    def __init__(
        self,
        backend: SearchBackend,
        *,
        debounce_seconds: float | None = None,
        cancel_superseded: bool = True,
        on_change: Optional[Callable[["RequestCoordinator"], None]] = None,
    ) -> None:
        self.backend = backend
        self.debounce_seconds = (
            settings.debounce_ms / 1000 if debounce_seconds is None else debounce_seconds
        )
        self.cancel_superseded = cancel_superseded
        self.on_change = on_change

        self.text = ""
        self.suggestions: List[str] = []
        self.result: SearchResult | None = None
        self.search_error: EngineError | None = None
        self.state = SuggestState.IDLE

        self._timer: asyncio.TimerHandle | None = None
        self._suggest_id = 0
        self._suggest_text: str | None = None
        self._suggest_task: asyncio.Task | None = None
        self._search_id = 0
        self._search_text: str | None = None
        self._search_task: asyncio.Task | None = None

    # -- public API ---------------------------------------------------------

    @property
    def searching(self) -> bool:
        return self._search_task is not None and not self._search_task.done()

    def on_input(self, text: str) -> None:
        """Record a keystroke and restart the quiet window."""
        if not isinstance(text, str):
            raise TypeError(f"text must be a string, got {type(text).__name__}")
        self.text = text
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._on_quiet)
        self.state = SuggestState.DEBOUNCING
        self._notify()

    async def submit(self, text: str | None = None) -> SearchResult | None:
        """Run a relevance search for ``text`` (or the current text).

        Returns the new result, or ``None`` when the search failed or was
        superseded by a later submission. On failure the previous result stays
        in :attr:`result` and :attr:`search_error` is set.
        """
        if text is not None:
            if not isinstance(text, str):
                raise TypeError(f"text must be a string, got {type(text).__name__}")
            self.text = text
        self._cancel_timer()
        self._drop_suggest()
        self.suggestions = []
        self.state = SuggestState.IDLE

        query_text = self.text
        task = self._search_task
        if task is None or task.done() or self._search_text != query_text:
            self._search_id += 1
            self._search_text = query_text
            task = asyncio.ensure_future(self._run_search(self._search_id, query_text))
            self._search_task = task
        self._notify()
        return await asyncio.shield(task)

    async def select_suggestion(self, name: str) -> SearchResult | None:
        return await self.submit(name)

    async def retry(self) -> SearchResult | None:
        """Re-submit the last search, typically after :attr:`search_error` was set."""
        return await self.submit(self._search_text if self._search_text is not None else self.text)

    async def settle(self) -> None:
        """Wait until no debounce timer is pending and no request is in flight."""
        loop = asyncio.get_running_loop()
        while True:
            if self._timer is not None:
                await asyncio.sleep(max(self._timer.when() - loop.time(), 0))
                continue
            pending = [
                task for task in (self._suggest_task, self._search_task) if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.wait(pending)

    def close(self) -> None:
        self._cancel_timer()
        self._drop_suggest()
        if self._search_task is not None and not self._search_task.done():
            self._search_task.cancel()
        self._search_id += 1
        self.state = SuggestState.IDLE

    # -- suggest path -------------------------------------------------------

    def _on_quiet(self) -> None:
        self._timer = None
        text = self.text
        if not text.strip():
            self._drop_suggest()
            self.suggestions = []
            self.state = SuggestState.IDLE
            self._notify()
            return
        if self._suggest_in_flight() and self._suggest_text == text:
            logger.debug("suggest for %r already in flight", text)
            self.state = SuggestState.AWAITING_SUGGEST
            self._notify()
            return

        self._drop_suggest()
        self._suggest_id += 1
        self._suggest_text = text
        self._suggest_task = asyncio.ensure_future(self._run_suggest(self._suggest_id, text))
        self.state = SuggestState.AWAITING_SUGGEST
        self._notify()

    async def _run_suggest(self, request_id: int, text: str) -> None:
        try:
            names = await self.backend.suggest(text)
        except EngineError as exc:
            logger.warning("suggest failed prefix=%r kind=%s debug=%s", text, exc.kind, exc.debug)
            if self._is_current_suggest(request_id, text):
                if isinstance(exc, TransportError):
                    self.suggestions = []
                self._finish_suggest()
            return

        if not self._is_current_suggest(request_id, text):
            logger.debug("discarding stale suggestions for %r (current text %r)", text, self.text)
            return
        self.suggestions = list(names)
        self._finish_suggest()

    def _is_current_suggest(self, request_id: int, text: str) -> bool:
        return request_id == self._suggest_id and text == self.text

    def _finish_suggest(self) -> None:
        if self._timer is None:
            self.state = SuggestState.IDLE
        self._notify()

    def _suggest_in_flight(self) -> bool:
        return self._suggest_task is not None and not self._suggest_task.done()

    def _drop_suggest(self) -> None:
        """Make any outstanding suggest response stale."""
        self._suggest_id += 1
        task = self._suggest_task
        if self.cancel_superseded and task is not None and not task.done():
            task.cancel()
        self._suggest_task = None
        self._suggest_text = None

    # -- search path --------------------------------------------------------

    async def _run_search(self, request_id: int, text: str) -> SearchResult | None:
        try:
            result = await self.backend.search(text)
        except EngineError as exc:
            logger.warning("search failed q=%r kind=%s debug=%s", text, exc.kind, exc.debug)
            if request_id == self._search_id:
                self.search_error = exc
                self._notify()
            return None

        if request_id != self._search_id:
            logger.debug("discarding superseded search result for %r", text)
            return None
        self.result = result
        self.search_error = None
        self._notify()
        return result

    # -- helpers ------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)
