"""Latest-query-wins search session."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from scent_layering.core.logging import get_logger
from scent_layering.core.models import SearchHit

LOGGER = get_logger(__name__)

MIN_QUERY_LENGTH = 2

SearchFn = Callable[[str], Awaitable[list[SearchHit]]]


class SearchSession:
    """Issue searches for one logical session, discarding superseded ones.

    Starting a new search cancels the in-flight one; its awaiter receives
    ``asyncio.CancelledError`` and its result is never published to
    ``latest``.
    """

    def __init__(self, search_fn: SearchFn, *, min_query_length: int = MIN_QUERY_LENGTH) -> None:
        self._search_fn = search_fn
        self._min_query_length = min_query_length
        self._current: asyncio.Task[list[SearchHit]] | None = None
        self.latest_query: str | None = None
        self.latest: list[SearchHit] = []

    def cancel(self) -> None:
        if self._current is not None and not self._current.done():
            LOGGER.debug("search_session.cancelled", query=self.latest_query)
            self._current.cancel()
        self._current = None

    async def search(self, query: str) -> list[SearchHit]:
        self.cancel()
        if len(query.strip()) < self._min_query_length:
            self._publish(query, [])
            return []

        task = asyncio.ensure_future(self._search_fn(query))
        self._current = task
        results = await task
        if task is not self._current:
            # Completed, but a newer query took over before this caller resumed.
            raise asyncio.CancelledError()
        self._current = None
        self._publish(query, results)
        return results

    def _publish(self, query: str, results: list[SearchHit]) -> None:
        self.latest_query = query
        self.latest = results
