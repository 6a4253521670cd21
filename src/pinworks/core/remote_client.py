"""Async HTTP client for the upstream pinning service.

:class:`PinataClient` is the only component that talks to the network.  It
knows how to authenticate, build URLs and query strings, and decode the
upstream envelopes into domain models.  It knows nothing about pagination or
retries: every method issues exactly one HTTP request.

Error Mapping
-------------
==========================================  ===============================
Failure                                     Raised as
==========================================  ===============================
No credential configured                    ``ConfigurationError`` (in
                                            ``__init__``, before any I/O)
Timeout or connection failure               ``TransportError(retryable=True)``
Any other request failure                   ``TransportError(retryable=False)``
Non-2xx status                              ``RemoteServiceError(status, body)``
Undecodable or unexpected payload           ``MalformedResponseError``
==========================================  ===============================

Usage
-----
::

    async with PinataClient(config) as client:
        page = await client.list_groups()
        while page.next_cursor:
            page = await client.list_groups(cursor=page.next_cursor)
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from pinworks.core.config import PinworksConfig
from pinworks.core.errors import (
    ConfigurationError,
    MalformedResponseError,
    RemoteServiceError,
    TransportError,
)
from pinworks.core.models import Page, RemoteFile, RemoteGroup, UploadResult

if TYPE_CHECKING:
    from pinworks.core.uploads import UploadForm

logger = logging.getLogger(__name__)

GROUPS_PATH = "/v3/groups/public"
FILES_PATH = "/v3/files/public"
CREATE_GROUP_PATH = "/groups"
UPLOAD_PATH = "/v3/files"


class PinataClient:
    """Authenticated client for one inbound request's worth of upstream calls.

    Each instance owns its own :class:`httpx.AsyncClient`; nothing is shared
    between instances.  Use it as an async context manager so the connection
    pool is closed when the request is done.

    Attributes:
        _config (PinworksConfig):
            Source of base URLs and the request timeout.
        _http (httpx.AsyncClient):
            Underlying HTTP client with the bearer header preset.
    """

    def __init__(
        self,
        config: PinworksConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create a client bound to *config*.

        Args:
            config: Gateway configuration holding the credential, base URLs
                and timeout.
            transport: Optional httpx transport.  Tests pass an
                :class:`httpx.MockTransport` here.

        Raises:
            ConfigurationError: If no upstream credential is configured.
        """
        token = config.pinata_jwt.get_secret_value().strip() if config.pinata_jwt else ""
        if not token:
            raise ConfigurationError(
                "Upstream credential not found: set PINWORKS_PINATA_JWT"
            )

        self._config = config
        self._http = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {token}"},
            timeout=config.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> PinataClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # -- Public interface ---------------------------------------------------

    async def list_groups(self, cursor: str | None = None) -> Page[RemoteGroup]:
        """Fetch one page of groups.

        Args:
            cursor: Opaque page token from the previous page, or ``None`` for
                the first page.

        Returns:
            The page of groups and the token for the next page.
        """
        params = {}
        if cursor:
            params["pageToken"] = cursor

        payload = await self._request("GET", self._api_url(GROUPS_PATH), params=params)
        return _decode_page(payload, "groups", RemoteGroup)

    async def list_files(
        self,
        group_id: str | None = None,
        keyvalues: str | None = None,
        cursor: str | None = None,
    ) -> Page[RemoteFile]:
        """Fetch one page of files.

        Args:
            group_id: Restrict the listing to one group.
            keyvalues: JSON-encoded metadata filter sent as
                ``metadata[keyvalues]``.
            cursor: Opaque page token from the previous page.

        Returns:
            The page of files and the token for the next page.
        """
        params = {}
        if group_id:
            params["group"] = group_id
        if keyvalues:
            params["metadata[keyvalues]"] = keyvalues
        if cursor:
            params["pageToken"] = cursor

        payload = await self._request("GET", self._api_url(FILES_PATH), params=params)
        return _decode_page(payload, "files", RemoteFile)

    async def create_group(self, name: str) -> str:
        """Create a public group and return its identifier."""
        logger.info("Creating new upstream group: %s", name)
        payload = await self._request(
            "POST",
            self._api_url(CREATE_GROUP_PATH),
            json={"name": name, "is_public": True},
        )

        # Older endpoints answer with the bare group, newer ones wrap it.
        body = payload.get("data", payload) if isinstance(payload, dict) else None
        group_id = body.get("id") if isinstance(body, dict) else None
        if not isinstance(group_id, str) or not group_id:
            raise MalformedResponseError(f"Group creation response has no id: {payload!r}")

        logger.info("Created new group with ID: %s", group_id)
        return group_id

    async def submit_multipart(self, form: UploadForm) -> UploadResult:
        """Send a built upload form.

        The form's file stream is consumed by this call; build a new form
        for any further attempt.
        """
        payload = await self._request(
            "POST",
            self._uploads_url(UPLOAD_PATH),
            data=form.fields,
            files={"file": form.file_part()},
        )

        data = payload.get("data") if isinstance(payload, dict) else None
        try:
            return UploadResult.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected upload response: {e}") from e

    # -- Internals ----------------------------------------------------------

    def _api_url(self, path: str) -> str:
        return self._config.api_base_url.rstrip("/") + path

    def _uploads_url(self, path: str) -> str:
        return self._config.uploads_base_url.rstrip("/") + path

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        """Issue one request and return the decoded JSON body.

        Raises:
            TransportError: On transport failures.
            RemoteServiceError: On non-2xx responses.
            MalformedResponseError: If the body is not valid UTF-8 JSON.
        """
        logger.debug("%s %s params=%s", method, url, kwargs.get("params"))

        try:
            response = await self._http.request(method, url, **kwargs)
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            raise TransportError(f"{type(e).__name__}: {e}", retryable=True) from e
        except httpx.RequestError as e:
            # Covers decoding and redirect failures as well as other transport errors.
            raise TransportError(f"{type(e).__name__}: {e}", retryable=False) from e

        if not response.is_success:
            logger.error(
                "API request failed with status %s: %s", response.status_code, response.text
            )
            raise RemoteServiceError(response.status_code, response.text)

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e


def _decode_page(payload: Any, key: str, model: type[BaseModel]) -> Page:
    """Decode a ``{"data": {<key>: [...], "next_page_token": ...}}`` envelope."""
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Response has no 'data' object: {payload!r}")

    try:
        items = [model.model_validate(item) for item in data.get(key) or []]
        return Page[model](items=items, next_cursor=data.get("next_page_token"))
    except ValidationError as e:
        raise MalformedResponseError(f"Unexpected {key} payload: {e}") from e
