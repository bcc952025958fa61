#!/usr/bin/env python3
"""Unit tests for PageStream.

Tests cover:
    - Page-by-page iteration and cursor movement
    - fetch_all() equivalence with repeated next()
    - Termination on totalCount, empty pages and missing progress
    - FAILED state after a request error
    - restart(), async iteration and page size normalization
"""
import asyncio
import sys

import pytest

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from src.unifi.api.endpoints import GetClients
from src.unifi.api.exceptions import StatusError
from src.unifi.api.pagination import PageStream, PaginationConfig, StreamState
from src.unifi.api.response import PageEnvelope

# ============================================
# Fixtures
# ============================================

class FakeExecutor:
    """Serves pages of a fixed collection, recording every request."""

    def __init__(
        self,
        total,
        fail_at_call=None,
        limit_override=None,
        count_override=None,
        offset_override=None,
    ):
        self.items = [f"item-{i}" for i in range(total)]
        self.total = total
        self.calls = []
        self.fail_at_call = fail_at_call
        self.limit_override = limit_override
        self.count_override = count_override
        self.offset_override = offset_override

    async def execute(self, endpoint):
        params = dict(endpoint.query_params())
        offset, limit = int(params["offset"]), int(params["limit"])
        self.calls.append((offset, limit))

        if self.fail_at_call is not None and len(self.calls) == self.fail_at_call:
            raise StatusError("server error", status_code=500)

        page = self.items[offset:offset + limit]
        return PageEnvelope(
            items=page,
            offset=offset if self.offset_override is None else self.offset_override,
            limit=limit if self.limit_override is None else self.limit_override,
            count=len(page) if self.count_override is None else self.count_override,
            total_count=self.total,
        )


def clients_factory(offset, limit):
    return GetClients.with_pagination("s1", offset, limit)


def make_stream(executor, page_size=2, delay=0.0):
    return PageStream(executor, clients_factory, PaginationConfig(page_size=page_size, delay_between_pages=delay))


# ============================================
# Iteration Tests
# ============================================

class TestNext:
    """Test page-by-page iteration."""

    @pytest.mark.asyncio
    async def test_pages_in_order(self):
        """Five items with page size 2 arrive as pages of 2, 2 and 1."""
        executor = FakeExecutor(total=5)
        stream = make_stream(executor)

        pages = [await stream.next() for _ in range(3)]

        assert [len(p) for p in pages] == [2, 2, 1]
        assert executor.calls == [(0, 2), (2, 2), (4, 2)]
        assert stream.state == StreamState.EXHAUSTED

    @pytest.mark.asyncio
    async def test_exhausted_stream_makes_no_requests(self):
        executor = FakeExecutor(total=5)
        stream = make_stream(executor)
        await stream.fetch_all()

        assert await stream.next() is None
        assert await stream.next() is None
        assert len(executor.calls) == 3

    @pytest.mark.asyncio
    async def test_cursor_tracks_total(self):
        stream = make_stream(FakeExecutor(total=5))
        await stream.next()

        cursor = stream.cursor
        assert cursor.offset == 2
        assert cursor.total_count == 5
        assert not cursor.exhausted

    @pytest.mark.asyncio
    async def test_cursor_is_a_copy(self):
        stream = make_stream(FakeExecutor(total=5))
        stream.cursor.offset = 99

        assert stream.cursor.offset == 0

    @pytest.mark.asyncio
    async def test_empty_collection(self):
        executor = FakeExecutor(total=0)
        stream = make_stream(executor)

        assert await stream.next() == []
        assert stream.state == StreamState.EXHAUSTED
        assert await stream.next() is None
        assert executor.calls == [(0, 2)]

    @pytest.mark.asyncio
    async def test_exact_page_boundary(self):
        executor = FakeExecutor(total=4)
        stream = make_stream(executor)

        assert len(await stream.fetch_all()) == 4
        assert executor.calls == [(0, 2), (2, 2)]


class TestFetchAll:
    """Test fetch_all()."""

    @pytest.mark.asyncio
    async def test_matches_concatenated_pages(self):
        by_pages = make_stream(FakeExecutor(total=7), page_size=3)
        collected = []
        while (page := await by_pages.next()) is not None:
            collected.extend(page)

        all_at_once = await make_stream(FakeExecutor(total=7), page_size=3).fetch_all()

        assert all_at_once == collected
        assert all_at_once == [f"item-{i}" for i in range(7)]

    @pytest.mark.asyncio
    async def test_async_iteration(self):
        stream = make_stream(FakeExecutor(total=5))
        sizes = [len(page) async for page in stream]

        assert sizes == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_delay_between_pages(self, monkeypatch):
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr(asyncio, "sleep", fake_sleep)
        await make_stream(FakeExecutor(total=5), delay=0.5).fetch_all()

        # No delay before the first page
        assert sleeps == [0.5, 0.5]


# ============================================
# Termination Tests
# ============================================

class TestTermination:
    """Test that pagination always stops."""

    @pytest.mark.asyncio
    async def test_no_progress_stops(self):
        """Server reports neither limit nor count: one page, then stop."""
        executor = FakeExecutor(total=10, limit_override=0, count_override=0)
        stream = make_stream(executor)

        assert await stream.fetch_all() == ["item-0", "item-1"]
        assert executor.calls == [(0, 2)]
        assert stream.state == StreamState.EXHAUSTED

    @pytest.mark.asyncio
    async def test_falls_back_to_count(self):
        """Without a limit in the envelope the cursor advances by count."""
        executor = FakeExecutor(total=5, limit_override=0)
        stream = make_stream(executor)

        assert len(await stream.fetch_all()) == 5
        assert executor.calls == [(0, 2), (2, 2), (4, 2)]

    @pytest.mark.asyncio
    async def test_envelope_without_offset_or_limit(self):
        """A server that honours offset but omits it (and limit) from the envelope."""
        executor = FakeExecutor(total=5, limit_override=0, offset_override=0)
        stream = make_stream(executor)

        items = await stream.fetch_all()

        assert items == [f"item-{i}" for i in range(5)]
        assert executor.calls == [(0, 2), (2, 2), (4, 2)]
        assert stream.state == StreamState.EXHAUSTED

    @pytest.mark.asyncio
    async def test_envelope_from_payload_without_offset(self):
        """Same server, decoded from raw JSON envelopes."""
        items = [{"id": f"c{i}", "type": "WIRED"} for i in range(5)]
        requested = []

        class JsonExecutor:
            async def execute(self, endpoint):
                params = dict(endpoint.query_params())
                offset, limit = int(params["offset"]), int(params["limit"])
                requested.append(offset)
                page = items[offset:offset + limit]
                return endpoint.parse_response({"data": page, "count": len(page), "totalCount": 5})

        clients = await make_stream(JsonExecutor()).fetch_all()

        assert [c.id for c in clients] == ["c0", "c1", "c2", "c3", "c4"]
        assert requested == [0, 2, 4]

    @pytest.mark.asyncio
    async def test_short_page_advances_by_limit(self):
        """The server may return fewer items than asked; offset still moves by limit."""
        executor = FakeExecutor(total=6, count_override=1)
        stream = make_stream(executor)

        await stream.fetch_all()

        # The page at offset 6 is empty and ends the stream
        assert [offset for offset, _ in executor.calls] == [0, 2, 4, 6]


# ============================================
# Failure Tests
# ============================================

class TestFailure:
    """Test the FAILED state."""

    @pytest.mark.asyncio
    async def test_error_raised_once_then_none(self):
        executor = FakeExecutor(total=5, fail_at_call=2)
        stream = make_stream(executor)

        assert len(await stream.next()) == 2
        with pytest.raises(StatusError):
            await stream.next()

        assert stream.state == StreamState.FAILED
        assert await stream.next() is None
        assert len(executor.calls) == 2

    @pytest.mark.asyncio
    async def test_fetch_all_propagates_error(self):
        stream = make_stream(FakeExecutor(total=5, fail_at_call=3))

        with pytest.raises(StatusError):
            await stream.fetch_all()

        assert stream.state == StreamState.FAILED

    @pytest.mark.asyncio
    async def test_concurrent_next_rejected(self):
        gate = asyncio.Event()

        class SlowExecutor(FakeExecutor):
            async def execute(self, endpoint):
                await gate.wait()
                return await super().execute(endpoint)

        stream = make_stream(SlowExecutor(total=5))
        first = asyncio.create_task(stream.next())
        await asyncio.sleep(0)

        with pytest.raises(RuntimeError):
            await stream.next()

        gate.set()
        assert len(await first) == 2


# ============================================
# Restart and Configuration Tests
# ============================================

class TestRestart:
    """Test restart() and page size handling."""

    @pytest.mark.asyncio
    async def test_restart_after_exhaustion(self):
        executor = FakeExecutor(total=3)
        stream = make_stream(executor)
        first = await stream.fetch_all()

        stream.restart()
        assert stream.state == StreamState.READY
        assert stream.pages_fetched == 0
        second = await stream.fetch_all()

        assert first == second
        assert executor.calls == [(0, 2), (2, 2), (0, 2), (2, 2)]

    @pytest.mark.asyncio
    async def test_restart_after_failure(self):
        executor = FakeExecutor(total=3, fail_at_call=1)
        stream = make_stream(executor)

        with pytest.raises(StatusError):
            await stream.next()

        stream.restart()
        assert await stream.fetch_all() == ["item-0", "item-1", "item-2"]

    def test_zero_page_size_becomes_one(self):
        stream = make_stream(FakeExecutor(total=3), page_size=0)
        assert stream.page_size == 1

    @pytest.mark.asyncio
    async def test_page_size_one(self):
        executor = FakeExecutor(total=3)
        stream = make_stream(executor, page_size=0)

        assert await stream.fetch_all() == ["item-0", "item-1", "item-2"]
        assert executor.calls == [(0, 1), (1, 1), (2, 1)]

    def test_default_page_size(self):
        stream = PageStream(FakeExecutor(total=0), clients_factory)
        assert stream.page_size == 100


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
