"""Join a group list with a representative image per group.

For every group a bounded file lookup (``limit=1``) supplies the thumbnail.
A failed lookup never fails the composition: the group is reported in its
degraded state (``thumbnail_image=None``, ``photo_count=0``) and the next
group is processed.

Lookups are independent, so they may run concurrently up to a configured
bound.  The output order always matches the input order.

Photo Counts
------------
By default ``photo_count`` is the number of files observed by the one-item
probe, so it is 0 or 1 and reads as "has at least one photo".  With
``exact_counts=True`` each group's file list is drained completely and
``photo_count`` is the true number of files, at the cost of one full
pagination per group.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from pinworks.core.errors import GatewayError
from pinworks.core.listers import list_all_files
from pinworks.core.models import GroupWithThumbnail, RemoteGroup
from pinworks.core.remote_client import PinataClient

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def collect_with_fallback(
    items: Sequence[T],
    lookup: Callable[[T], Awaitable[R]],
    fallback: Callable[[T], R],
    *,
    concurrency: int = 1,
) -> list[R]:
    """Map *lookup* over *items*, replacing failures with *fallback* values.

    Each item is first mapped to either its lookup result or the
    :class:`GatewayError` it raised.  The outcomes are then folded into the
    result list, converting every error into ``fallback(item)``.

    Args:
        items: Inputs, in the order the results must follow.
        lookup: Coroutine function producing the result for one item.
        fallback: Produces the default value for an item whose lookup failed.
        concurrency: Maximum number of lookups in flight at once.

    Returns:
        One result per item, in input order.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    semaphore = asyncio.Semaphore(concurrency)

    async def attempt(item: T) -> R | GatewayError:
        async with semaphore:
            try:
                return await lookup(item)
            except GatewayError as e:
                return e

    outcomes = await asyncio.gather(*(attempt(item) for item in items))

    results: list[R] = []
    for item, outcome in zip(items, outcomes):
        if isinstance(outcome, GatewayError):
            logger.warning("Lookup failed for %r, using fallback: %s", item, outcome)
            results.append(fallback(item))
        else:
            results.append(outcome)
    return results


async def compose_thumbnails(
    client: PinataClient,
    groups: Sequence[RemoteGroup],
    *,
    concurrency: int = 1,
    exact_counts: bool = False,
) -> list[GroupWithThumbnail]:
    """Attach a thumbnail and photo count to every group.

    Args:
        client: Open upstream client.
        groups: Groups to enrich, typically from
            :func:`~pinworks.core.listers.list_all_groups`.
        concurrency: Maximum concurrent per-group lookups.
        exact_counts: Drain each group completely for a true photo count.

    Returns:
        One :class:`GroupWithThumbnail` per input group, in input order.
    """
    limit = None if exact_counts else 1

    async def lookup(group: RemoteGroup) -> GroupWithThumbnail:
        files = await list_all_files(client, group_id=group.id, limit=limit)
        return GroupWithThumbnail.from_group(
            group,
            thumbnail=files[0] if files else None,
            photo_count=len(files),
        )

    return await collect_with_fallback(
        groups,
        lookup,
        GroupWithThumbnail.degraded,
        concurrency=concurrency,
    )
