"""Cursor-following aggregation over paginated upstream collections.

:func:`drain` repeatedly calls a page-fetching coroutine, threading the
cursor from each page into the next call, until the upstream reports the
final page or a caller-supplied item cap is reached.

The cap is a hard limit: once the running total reaches it the result is
truncated to exactly ``limit`` items and no further page is requested.
Without a cap the only stop condition is the upstream's own termination
(``next_cursor is None``), so a drain has no deadline.  Callers that need a
latency bound must pass ``limit``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pinworks.core.errors import MalformedResponseError
from pinworks.core.models import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageFetcher = Callable[[str | None], Awaitable[Page[T]]]


async def drain(fetch_page: PageFetcher, limit: int | None = None) -> list[T]:
    """Aggregate every item of a cursor-paginated collection.

    Args:
        fetch_page: Coroutine function taking the current cursor (``None``
            for the first page) and returning a :class:`Page`.
        limit: Optional maximum number of items to return.

    Returns:
        The items of all fetched pages, in upstream order, truncated to
        ``limit`` when given.

    Raises:
        ValueError: If ``limit`` is negative.
        MalformedResponseError: If the upstream hands back the cursor it was
            just given, which would otherwise loop forever.
        GatewayError: Whatever ``fetch_page`` raises, unchanged.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    items: list[T] = []
    cursor: str | None = None
    pages = 0

    while True:
        page = await fetch_page(cursor)
        pages += 1
        items.extend(page.items)
        logger.debug("Page %d: %d items (%d so far)", pages, len(page.items), len(items))

        if limit is not None and len(items) >= limit:
            del items[limit:]
            break

        if page.next_cursor is None:
            break

        if page.next_cursor == cursor:
            raise MalformedResponseError(f"Upstream repeated page token {cursor!r}")

        cursor = page.next_cursor

    return items
