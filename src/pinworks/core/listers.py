"""Group and file listers built on :func:`~pinworks.core.paginator.drain`."""

from __future__ import annotations

import logging

from pinworks.core.category_filter import encode_filter
from pinworks.core.models import RemoteFile, RemoteGroup
from pinworks.core.paginator import drain
from pinworks.core.remote_client import PinataClient

logger = logging.getLogger(__name__)


async def list_all_groups(client: PinataClient, limit: int | None = None) -> list[RemoteGroup]:
    """Return every group on the account, or the first *limit* of them."""

    async def fetch_page(cursor: str | None):
        return await client.list_groups(cursor=cursor)

    groups = await drain(fetch_page, limit)
    logger.info("Fetched %d groups", len(groups))
    return groups


async def list_all_files(
    client: PinataClient,
    group_id: str | None = None,
    metadata_filter: dict | None = None,
    limit: int | None = None,
) -> list[RemoteFile]:
    """Return the files matching a group scope and metadata filter.

    Args:
        client: Open upstream client.
        group_id: Restrict the listing to one group.
        metadata_filter: Key-value predicate from
            :func:`~pinworks.core.category_filter.build_category_filter`.
            It is encoded once and reused for every page.
        limit: Optional hard cap on the number of files returned.

    Returns:
        Matching files in upstream order.
    """
    keyvalues = encode_filter(metadata_filter)

    async def fetch_page(cursor: str | None):
        return await client.list_files(group_id=group_id, keyvalues=keyvalues, cursor=cursor)

    files = await drain(fetch_page, limit)
    logger.info("Total files collected: %d", len(files))
    return files
