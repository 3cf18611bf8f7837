"""In-flight request coalescing for source queries."""

import asyncio
import json
import logging
from typing import Any

from marketfeed.data import SourceKind
from marketfeed.query.base import QueryResult, QueryService

logger = logging.getLogger(__name__)


def call_signature(source: SourceKind, params: dict[str, Any]) -> str:
    """Canonical key for a call: source name plus sorted JSON params."""
    return f"{source.value}:{json.dumps(params, sort_keys=True, default=str)}"


class RequestCoalescer:
    """Query service wrapper that shares identical in-flight calls.

    While a call is pending, every identical call awaits the same result
    instead of reaching the wrapped service. Entries leave the in-flight table
    as soon as the call settles, so nothing is cached past that point.

    Args:
        service: The query service to protect.
    """

    def __init__(self, service: QueryService) -> None:
        self._service = service
        self._in_flight: dict[str, asyncio.Task[QueryResult]] = {}

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def query_page(
        self,
        source: SourceKind,
        params: dict[str, Any],
    ) -> QueryResult:
        key = call_signature(source, params)
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._execute(key, source, params))
            self._in_flight[key] = task
        else:
            logger.debug("Coalesced duplicate %s query", source.value)

        # One waiter being cancelled must not cancel the call for the others.
        return await asyncio.shield(task)

    async def _execute(
        self,
        key: str,
        source: SourceKind,
        params: dict[str, Any],
    ) -> QueryResult:
        try:
            return await self._service.query_page(source, params)
        finally:
            self._in_flight.pop(key, None)
