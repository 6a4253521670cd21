"""Upload orchestration: group resolution, form building and retried submission.

An upload moves through these states::

    RESOLVING_GROUP -> BUILDING_FORM -> SUBMITTING -> SUCCEEDED
                                           |  ^
                                           v  |
                                        RETRY_WAIT
                                           |
                                           v
                                         FAILED

- **RESOLVING_GROUP** creates the target group when asked to.  A failure
  here is terminal: an upload without its destination is meaningless.
- **BUILDING_FORM** builds a fresh multipart body.  The body wraps a
  single-consumption stream, so it is rebuilt for every attempt.
- **SUBMITTING** sends the form.  Timeouts and connection failures move to
  **RETRY_WAIT**; anything else fails immediately.
- **RETRY_WAIT** sleeps with exponential backoff, then builds a new form and
  submits again, up to the retry policy's attempt limit.

The orchestrator returns or raises exactly once per upload.
"""

from __future__ import annotations

import io
import json
import logging
from dataclasses import dataclass
from enum import Enum

from pinworks.core.errors import GatewayError, UploadFormError
from pinworks.core.models import (
    CreateNewGroup,
    GroupIntent,
    NoGroup,
    PhotoMetadata,
    UploadRequest,
    UploadResult,
    UseExistingGroup,
)
from pinworks.core.remote_client import PinataClient
from pinworks.core.retry import RetryPolicy

logger = logging.getLogger(__name__)

# Optional metadata copied into the key-value blob when non-empty, keyed by
# their upstream names.
_OPTIONAL_KEYVALUES = (
    ("description", "description"),
    ("camera", "camera"),
    ("lens", "lens"),
    ("iso", "iso"),
    ("aperture", "aperture"),
    ("shutterSpeed", "shutter_speed"),
)


class UploadState(str, Enum):
    """States of a single upload."""

    RESOLVING_GROUP = "resolving_group"
    BUILDING_FORM = "building_form"
    SUBMITTING = "submitting"
    RETRY_WAIT = "retry_wait"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadForm:
    """A multipart upload body, ready to be sent once.

    Attributes:
        fields: Text fields in send order.
        filename: Name of the binary part.
        content_type: MIME type of the binary part.
        stream: The binary part.  Reading it consumes it.
    """

    fields: dict[str, str]
    filename: str
    content_type: str
    stream: io.BytesIO

    def file_part(self) -> tuple[str, io.BytesIO, str]:
        """Return the ``(filename, stream, content_type)`` triple for httpx."""
        return self.filename, self.stream, self.content_type


def build_keyvalues(metadata: PhotoMetadata) -> dict[str, str]:
    """Flatten photo metadata into the upstream key-value map.

    ``category`` is always present; every other field is included only when
    it is a non-empty string.
    """
    keyvalues = {"category": metadata.category}
    for key, attr in _OPTIONAL_KEYVALUES:
        value = getattr(metadata, attr)
        if value:
            keyvalues[key] = value
    return keyvalues


def validate_upload_request(request: UploadRequest) -> None:
    """Reject a request that could never produce a valid form.

    Raises:
        UploadFormError: If the request has no filename or no title.
    """
    if not request.filename:
        raise UploadFormError("Upload has no filename")
    if not request.metadata.title.strip():
        raise UploadFormError(f"Upload {request.filename!r} has no title")


def build_upload_form(request: UploadRequest, group_id: str | None) -> UploadForm:
    """Build a fresh multipart form for one upload attempt.

    Building twice from the same request and group id yields identical
    fields and file content; only the transport boundary differs once sent.

    Args:
        request: The upload to send.
        group_id: Resolved target group, or ``None``.

    Returns:
        A new :class:`UploadForm` with its own unread stream.

    Raises:
        UploadFormError: If the request has no filename or no title.
    """
    validate_upload_request(request)

    fields = {"network": "public", "name": request.metadata.title}
    if group_id:
        fields["group_id"] = group_id
    fields["keyvalues"] = json.dumps(build_keyvalues(request.metadata), sort_keys=True)

    return UploadForm(
        fields=fields,
        filename=request.filename,
        content_type=request.content_type or "application/octet-stream",
        stream=io.BytesIO(request.content),
    )


class UploadOrchestrator:
    """Drive one file through group resolution and retried submission.

    Attributes:
        _client (PinataClient):
            Open upstream client used for group creation and submission.
        _retry (RetryPolicy):
            Backoff policy applied to the submission step only.
    """

    def __init__(self, client: PinataClient, retry_policy: RetryPolicy | None = None) -> None:
        self._client = client
        self._retry = retry_policy or RetryPolicy()

    async def upload(self, request: UploadRequest) -> UploadResult:
        """Upload *request* and return the upstream's acknowledgement.

        The returned result's ``group_id`` is the resolved group: the one
        created for a :class:`CreateNewGroup` intent, the given id for
        :class:`UseExistingGroup`, and ``None`` for :class:`NoGroup`, unless
        the upstream reports a group of its own.

        Raises:
            UploadFormError: If the request is invalid; raised before any
                upstream call, so no group is created for it.
            GatewayError: The group-creation error, the first non-retryable
                submission error, or the last retryable one.
        """
        try:
            validate_upload_request(request)
            self._enter(UploadState.RESOLVING_GROUP, request)
            group_id = await self.resolve_group(request.group)

            attempts = 0

            async def attempt() -> UploadResult:
                nonlocal attempts
                attempts += 1
                if attempts > 1:
                    self._enter(UploadState.RETRY_WAIT, request)
                self._enter(UploadState.BUILDING_FORM, request)
                form = build_upload_form(request, group_id)
                self._enter(UploadState.SUBMITTING, request)
                return await self._client.submit_multipart(form)

            result = await self._retry.run(attempt)
        except GatewayError as e:
            self._enter(UploadState.FAILED, request)
            logger.error("Upload of %s failed: %s", request.filename, e)
            raise

        self._enter(UploadState.SUCCEEDED, request)
        if result.group_id is None and group_id is not None:
            result = result.model_copy(update={"group_id": group_id})
        return result

    async def resolve_group(self, intent: GroupIntent) -> str | None:
        """Turn a group intent into a concrete group id (or ``None``)."""
        if isinstance(intent, CreateNewGroup):
            if not intent.name.strip():
                raise UploadFormError("Group name is needed for new group creation")
            return await self._client.create_group(intent.name.strip())
        if isinstance(intent, UseExistingGroup):
            return intent.group_id
        if isinstance(intent, NoGroup):
            return None
        raise UploadFormError(f"Unknown group intent: {intent!r}")

    @staticmethod
    def _enter(state: UploadState, request: UploadRequest) -> None:
        logger.debug("Upload %s -> %s", request.filename, state.value)
