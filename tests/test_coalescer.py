"""Tests for RequestCoalescer."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from marketfeed.data import SourceKind
from marketfeed.query import QueryResult, RequestCoalescer, call_signature


class GatedService:
    """Query service whose calls block until released."""

    def __init__(self) -> None:
        self.calls: list[tuple[SourceKind, dict[str, Any]]] = []
        self.release = asyncio.Event()
        self.fail = False

    async def query_page(self, source: SourceKind, params: dict[str, Any]) -> QueryResult:
        self.calls.append((source, params))
        await self.release.wait()
        if self.fail:
            raise RuntimeError("boom")
        return QueryResult(records=[{"id": str(len(self.calls))}])


class TestCallSignature:
    """Tests for call_signature."""

    def test_key_order_does_not_matter(self) -> None:
        a = call_signature(SourceKind.OFFER, {"p_limit": 20, "p_search": "x"})
        b = call_signature(SourceKind.OFFER, {"p_search": "x", "p_limit": 20})
        assert a == b

    def test_source_is_part_of_key(self) -> None:
        params = {"p_limit": 20}
        assert call_signature(SourceKind.OFFER, params) != call_signature(
            SourceKind.REQUEST, params
        )


class TestRequestCoalescer:
    """Tests for in-flight sharing."""

    async def test_identical_concurrent_calls_share_one_request(self) -> None:
        service = GatedService()
        coalescer = RequestCoalescer(service)
        params = {"p_limit": 20, "p_search": "fence"}

        first = asyncio.ensure_future(coalescer.query_page(SourceKind.OFFER, params))
        second = asyncio.ensure_future(coalescer.query_page(SourceKind.OFFER, dict(params)))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert coalescer.in_flight_count == 1

        service.release.set()
        results = await asyncio.gather(first, second)

        assert len(service.calls) == 1
        assert results[0] is results[1]
        assert coalescer.in_flight_count == 0

    async def test_different_params_are_not_shared(self) -> None:
        service = GatedService()
        coalescer = RequestCoalescer(service)
        service.release.set()

        await asyncio.gather(
            coalescer.query_page(SourceKind.OFFER, {"p_search": "a"}),
            coalescer.query_page(SourceKind.OFFER, {"p_search": "b"}),
            coalescer.query_page(SourceKind.REQUEST, {"p_search": "a"}),
        )

        assert len(service.calls) == 3

    async def test_settled_calls_are_not_cached(self) -> None:
        service = GatedService()
        coalescer = RequestCoalescer(service)
        service.release.set()
        params = {"p_limit": 20}

        await coalescer.query_page(SourceKind.OFFER, params)
        await coalescer.query_page(SourceKind.OFFER, params)

        assert len(service.calls) == 2

    async def test_failure_reaches_every_waiter_and_is_evicted(self) -> None:
        service = GatedService()
        service.fail = True
        coalescer = RequestCoalescer(service)
        params = {"p_limit": 20}

        first = asyncio.ensure_future(coalescer.query_page(SourceKind.OFFER, params))
        second = asyncio.ensure_future(coalescer.query_page(SourceKind.OFFER, params))
        await asyncio.sleep(0)
        service.release.set()
        results = await asyncio.gather(first, second, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert coalescer.in_flight_count == 0

        service.fail = False
        result = await coalescer.query_page(SourceKind.OFFER, params)
        assert result.records
        assert len(service.calls) == 2

    async def test_cancelled_waiter_does_not_cancel_shared_call(self) -> None:
        service = GatedService()
        coalescer = RequestCoalescer(service)
        params = {"p_limit": 20}

        first = asyncio.ensure_future(coalescer.query_page(SourceKind.OFFER, params))
        second = asyncio.ensure_future(coalescer.query_page(SourceKind.OFFER, params))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        service.release.set()
        result = await second
        assert result.records == [{"id": "1"}]
        assert len(service.calls) == 1
