from dataclasses import dataclass, field
from typing import Any, Protocol

from marketfeed.data import SourceKind


@dataclass(frozen=True)
class QueryResult:
    """Raw page returned by a source: source-native records or an error."""

    records: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None


class QueryService(Protocol):
    """Interface for running one paginated, filtered query against a source."""

    async def query_page(
        self,
        source: SourceKind,
        params: dict[str, Any],
    ) -> QueryResult:
        """Fetch one page of records from ``source``.

        Args:
            source: Which source to query.
            params: Wire parameters: cursor (``p_cursor_created_at``,
                ``p_cursor_id``), ``p_limit`` and the filter parameters.

        Returns:
            The records in the source's own order, or an error.
        """
        ...
