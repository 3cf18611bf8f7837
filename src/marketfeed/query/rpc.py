"""Query service backed by PostgREST-style RPC endpoints."""

import logging
import os
from typing import Any

import httpx

from marketfeed.data import SourceKind
from marketfeed.query.base import QueryResult

logger = logging.getLogger(__name__)

DEFAULT_FUNCTIONS: dict[SourceKind, str] = {
    SourceKind.OFFER: "get_services_cursor_paginated_v2",
    SourceKind.REQUEST: "get_jobs_cursor_paginated_v2",
}


class RpcQueryService:
    """Run paginated source queries as RPC calls over HTTP.

    Each source maps to a database function exposed at
    ``<base_url>/rest/v1/rpc/<function>``; the function receives the wire
    parameters as its JSON body and returns a JSON array of records.

    Args:
        base_url: Service URL (defaults to MARKETFEED_API_URL env var).
        api_key: Service key (defaults to MARKETFEED_API_KEY env var).
        timeout: Per-request timeout in seconds.
        functions: Override the RPC function name per source.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = 30.0,
        functions: dict[SourceKind, str] | None = None,
    ) -> None:
        url = base_url or os.environ.get("MARKETFEED_API_URL")
        if not url:
            raise ValueError(
                "Query service URL required. "
                "Pass base_url or set MARKETFEED_API_URL env var."
            )
        self._base_url = url.rstrip("/")
        self._api_key = api_key or os.environ.get("MARKETFEED_API_KEY")
        if not self._api_key:
            raise ValueError(
                "Query service API key required. "
                "Pass api_key or set MARKETFEED_API_KEY env var."
            )
        self._timeout = timeout
        self._functions = {**DEFAULT_FUNCTIONS, **(functions or {})}

    def endpoint(self, source: SourceKind) -> str:
        return f"{self._base_url}/rest/v1/rpc/{self._functions[source]}"

    async def query_page(
        self,
        source: SourceKind,
        params: dict[str, Any],
    ) -> QueryResult:
        """Call the source's RPC function.

        HTTP and decoding failures come back as ``QueryResult.error`` rather
        than raising.
        """
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self.endpoint(source), json=params, headers=headers)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("RPC query for %s failed: %s", source.value, e)
            return QueryResult(error=str(e) or type(e).__name__)

        if not isinstance(data, list):
            detail = type(data).__name__
            return QueryResult(error=f"Unexpected RPC payload for {source.value}: {detail}")
        return QueryResult(records=[r for r in data if isinstance(r, dict)])
