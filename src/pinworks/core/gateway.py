"""Inbound operations of the gateway.

:class:`Gateway` is what the HTTP front door calls.  Each operation opens
its own :class:`PinataClient`, runs one core pipeline and closes the client
again, so no state survives between inbound requests.

========================================  ====================================
Operation                                 Pipeline
========================================  ====================================
:meth:`Gateway.list_groups`               Group Lister
:meth:`Gateway.list_groups_with_thumbnails`  Group Lister + Thumbnail Composer
:meth:`Gateway.list_group_images`         File Lister scoped to a group
:meth:`Gateway.list_files_by_category`    Category filter + File Lister
:meth:`Gateway.upload_photo`              Upload Orchestrator
:meth:`Gateway.upload_batch`              Upload Orchestrator, per file
========================================  ====================================
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

import httpx

from pinworks.core.category_filter import build_category_filter, parse_categories, take
from pinworks.core.config import PinworksConfig
from pinworks.core.listers import list_all_files, list_all_groups
from pinworks.core.models import (
    CreateNewGroup,
    GroupWithThumbnail,
    RemoteFile,
    RemoteGroup,
    UploadRequest,
    UploadResult,
    UseExistingGroup,
)
from pinworks.core.remote_client import PinataClient
from pinworks.core.retry import RetryPolicy
from pinworks.core.thumbnails import compose_thumbnails
from pinworks.core.uploads import UploadOrchestrator, validate_upload_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchUploadResult:
    """Outcome of uploading every file of one inbound form."""

    files: list[UploadResult]
    group_id: str | None


class Gateway:
    """Entry point for the five gateway operations.

    Attributes:
        config (PinworksConfig):
            Configuration threaded into every client and policy.
        _transport:
            Optional httpx transport handed to every client (tests).
        _sleep:
            Coroutine used by the upload retry policy to wait.
    """

    def __init__(
        self,
        config: PinworksConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self._transport = transport
        self._sleep = sleep

    def open_client(self) -> PinataClient:
        """Open a new upstream client; raises ``ConfigurationError`` without a credential."""
        return PinataClient(self.config, transport=self._transport)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.config.upload_max_attempts,
            base_delay=self.config.retry_base_delay,
            sleep=self._sleep,
        )

    # -- Listing ------------------------------------------------------------

    async def list_groups(self) -> list[RemoteGroup]:
        """Return every group on the account."""
        async with self.open_client() as client:
            return await list_all_groups(client)

    async def list_groups_with_thumbnails(
        self, exact_counts: bool | None = None
    ) -> list[GroupWithThumbnail]:
        """Return every group with a thumbnail and photo count.

        Args:
            exact_counts: Override ``config.exact_photo_counts`` for this
                call.
        """
        if exact_counts is None:
            exact_counts = self.config.exact_photo_counts

        async with self.open_client() as client:
            groups = await list_all_groups(client)
            return await compose_thumbnails(
                client,
                groups,
                concurrency=self.config.thumbnail_concurrency,
                exact_counts=exact_counts,
            )

    async def list_group_images(
        self, group_id: str | None = None, limit: int | None = None
    ) -> tuple[str, list[RemoteFile]]:
        """Return the files of one group.

        Args:
            group_id: Group to list; defaults to the configured favourites
                group.
            limit: Hard cap on the number of files fetched.

        Returns:
            Tuple of ``(resolved group id, files)``.
        """
        group_id = group_id or self.config.favourites_group_id
        async with self.open_client() as client:
            files = await list_all_files(client, group_id=group_id, limit=limit)
        return group_id, files

    async def list_files_by_category(
        self, categories: str | None = None, limit: int | None = None
    ) -> list[RemoteFile]:
        """Return files whose ``category`` metadata matches *categories*.

        Args:
            categories: Comma-separated category names; ``None`` or blank
                lists every file.
            limit: Maximum number of files to return.
        """
        metadata_filter = build_category_filter(parse_categories(categories))
        async with self.open_client() as client:
            files = await list_all_files(client, metadata_filter=metadata_filter, limit=limit)
        # The upstream filter does not guarantee counts; cap again.
        return take(files, limit)

    # -- Uploads ------------------------------------------------------------

    async def upload_photo(self, request: UploadRequest) -> UploadResult:
        """Upload a single file."""
        async with self.open_client() as client:
            return await UploadOrchestrator(client, self.retry_policy()).upload(request)

    async def upload_batch(self, requests: Sequence[UploadRequest]) -> BatchUploadResult:
        """Upload several files from one inbound form, in order.

        A :class:`CreateNewGroup` intent creates the group once, with the
        first file; every following file with the same intent is uploaded
        into that group.  Every request is validated before any upstream
        call; after that the first failure aborts the batch.

        Returns:
            The per-file results and the batch's resolved group id.
        """
        for request in requests:
            validate_upload_request(request)

        results: list[UploadResult] = []
        created_group_id: str | None = None

        async with self.open_client() as client:
            orchestrator = UploadOrchestrator(client, self.retry_policy())
            for request in requests:
                if created_group_id and isinstance(request.group, CreateNewGroup):
                    request = request.model_copy(
                        update={"group": UseExistingGroup(group_id=created_group_id)}
                    )
                result = await orchestrator.upload(request)
                if isinstance(request.group, CreateNewGroup):
                    created_group_id = result.group_id
                results.append(result)

        logger.info("Uploaded %d files", len(results))
        return BatchUploadResult(files=results, group_id=_batch_group_id(requests, created_group_id))


def _batch_group_id(requests: Sequence[UploadRequest], created_group_id: str | None) -> str | None:
    if created_group_id:
        return created_group_id
    for request in requests:
        if isinstance(request.group, UseExistingGroup):
            return request.group.group_id
    return None
