"""Offset/limit pagination as a lazy, restartable page stream.

A PageStream walks a list endpoint one page at a time. It owns a cursor
(offset, limit, totalCount) and moves through three states:

    READY ──next()──▶ READY        more pages remain
      │                 EXHAUSTED  last page, empty page, or no safe next offset
      └───────────────▶ FAILED     the request raised; the error is re-raised once

Advance rule, using the values the server just returned, where base is the
larger of the envelope offset and the requested offset (servers may omit
offset from the envelope):
    next offset = base + limit   if limit > 0
                = base + count   if count > 0
                = (stop)         otherwise

Termination rule: more pages remain iff base + count < totalCount.

Pages are strictly sequential: page k+1 is never requested before page k
has completed, and a stream must not be driven by two consumers at once.

Example:
    stream = PageStream(client, lambda o, l: GetClients.with_pagination(site_id, o, l))
    while (page := await stream.next()) is not None:
        handle(page)
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Callable, Generic, Optional, Protocol, TypeVar

from .endpoint import Endpoint
from .response import PageEnvelope

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100


# ============================================
# Configuration
# ============================================

@dataclass
class PaginationConfig:
    """Configuration for paginated API requests.

    Attributes:
        page_size: Items requested per page (0 is treated as 1)
        delay_between_pages: Seconds to wait between page requests
    """
    page_size: int = DEFAULT_PAGE_SIZE
    delay_between_pages: float = 0.0


class StreamState(str, Enum):
    READY = "ready"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass
class PageCursor:
    """Mutable iteration state of one PageStream."""
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE
    total_count: Optional[int] = None
    exhausted: bool = False


class Executor(Protocol):
    async def execute(self, endpoint: Endpoint[Any]) -> Any:
        ...


PageRequestFactory = Callable[[int, int], Endpoint[PageEnvelope[T]]]


def _normalize_page_size(size: int) -> int:
    # A zero limit would request empty pages forever
    return size if size > 0 else 1


# ============================================
# The Stream
# ============================================

class PageStream(Generic[T]):
    """Pull-based stream of pages from an offset/limit list endpoint.

    Usable directly through next(), as an async iterator, or drained with
    fetch_all(). restart() rewinds to the first page.

    Attributes:
        request_factory: Builds the list endpoint for an (offset, limit) pair
        config: Page size and inter-page delay
    """

    def __init__(
        self,
        client: Executor,
        request_factory: PageRequestFactory[T],
        config: Optional[PaginationConfig] = None,
    ):
        self._client = client
        self.request_factory = request_factory
        self.config = config or PaginationConfig()

        self._cursor = PageCursor(limit=_normalize_page_size(self.config.page_size))
        self._state = StreamState.READY
        self._pages_fetched = 0
        self._in_flight = False

    # ----------------------------------------
    # Introspection
    # ----------------------------------------

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def cursor(self) -> PageCursor:
        """A copy of the cursor; the stream's own cursor is never shared."""
        return PageCursor(
            offset=self._cursor.offset,
            limit=self._cursor.limit,
            total_count=self._cursor.total_count,
            exhausted=self._cursor.exhausted,
        )

    @property
    def page_size(self) -> int:
        return self._cursor.limit

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    # ----------------------------------------
    # Iteration
    # ----------------------------------------

    async def next(self) -> Optional[list[T]]:
        """Fetch the next page.

        Returns:
            The page's items (possibly empty), or None once the stream is
            exhausted or has failed. No request is made in either case.

        Raises:
            RuntimeError: If another next() on this stream is still pending
            UnifiError: Whatever the request raised; the stream is FAILED
                afterwards and every later call returns None
        """
        if self._state is not StreamState.READY:
            return None
        if self._in_flight:
            raise RuntimeError("PageStream.next() called while a page request is still pending")

        self._in_flight = True
        try:
            if self._pages_fetched and self.config.delay_between_pages > 0:
                await asyncio.sleep(self.config.delay_between_pages)

            endpoint = self.request_factory(self._cursor.offset, self._cursor.limit)
            try:
                envelope = await self._client.execute(endpoint)
            except Exception as e:
                self._state = StreamState.FAILED
                self._cursor.exhausted = True
                logger.warning(
                    f"Pagination of {endpoint.path()} failed at offset {self._cursor.offset}: {e}"
                )
                raise
        finally:
            self._in_flight = False

        if self._pages_fetched == 0:
            logger.info(f"Paginating {endpoint.path()}: {envelope.total_count:,} total items")
        self._pages_fetched += 1
        self._advance(envelope)

        return list(envelope.items)

    def _advance(self, envelope: PageEnvelope[T]) -> None:
        """Move the cursor using the envelope the server just returned."""
        cursor = self._cursor
        cursor.total_count = envelope.total_count

        # An omitted offset decodes as 0; the requested offset is the floor
        base = max(envelope.offset, cursor.offset)

        if envelope.limit > 0:
            next_offset: Optional[int] = base + envelope.limit
        elif envelope.count > 0:
            next_offset = base + envelope.count
        else:
            next_offset = None

        fetched = base + envelope.count
        logger.debug(f"Progress: {fetched:,}/{envelope.total_count:,} (page {self._pages_fetched})")

        if not envelope.items or fetched >= envelope.total_count:
            self._finish()
        elif next_offset is None or next_offset <= cursor.offset:
            logger.warning(
                f"Stopping pagination: no forward progress from offset {cursor.offset} "
                f"(limit={envelope.limit}, count={envelope.count})"
            )
            self._finish()
        else:
            cursor.offset = next_offset

    def _finish(self) -> None:
        self._state = StreamState.EXHAUSTED
        self._cursor.exhausted = True
        logger.info(f"Pagination complete: {self._pages_fetched} pages")

    def restart(self) -> None:
        """Rewind to the first page, clearing exhaustion or failure."""
        if self._in_flight:
            raise RuntimeError("Cannot restart a PageStream while a page request is pending")
        self._cursor = PageCursor(limit=_normalize_page_size(self.config.page_size))
        self._state = StreamState.READY
        self._pages_fetched = 0

    def __aiter__(self) -> AsyncIterator[list[T]]:
        return self

    async def __anext__(self) -> list[T]:
        page = await self.next()
        if page is None:
            raise StopAsyncIteration
        return page

    async def fetch_all(self) -> list[T]:
        """Drain the remaining pages into one list, in page order."""
        all_items: list[T] = []
        while (page := await self.next()) is not None:
            all_items.extend(page)
        return all_items


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "PaginationConfig",
    "StreamState",
    "PageCursor",
    "PageStream",
]
