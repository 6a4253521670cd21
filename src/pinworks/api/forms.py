"""Parsing of the inbound ``POST /upload`` multipart form.

The form carries any number of files plus one group intent shared by all of
them:

==================  =========================================================
Field               Meaning
==================  =========================================================
``createNewGroup``  ``"true"`` to create a new group named ``groupName``
``groupName``       Name of the group to create
``groupId``         Existing group to upload into (ignored when creating)
``file_<key>``      One binary file part
``metadata_<key>``  JSON :class:`~pinworks.core.models.PhotoMetadata` for the
                    file with the same ``<key>``; ``metadata_file_<key>`` is
                    accepted too
==================  =========================================================

This module isolates form handling from ``pinworks.api.main`` so route
handlers stay thin and the parsing rules are testable on their own.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile

from pinworks.core.errors import UploadFormError
from pinworks.core.models import (
    CreateNewGroup,
    GroupIntent,
    NoGroup,
    PhotoMetadata,
    UploadRequest,
    UseExistingGroup,
)

logger = logging.getLogger(__name__)

FILE_PREFIX = "file_"
METADATA_PREFIX = "metadata_"


def parse_group_intent(form: FormData) -> GroupIntent:
    """Read the shared group intent from the form's text fields.

    Raises:
        UploadFormError: If ``createNewGroup`` is set without a
            ``groupName``.
    """
    create_new_group = str(form.get("createNewGroup") or "").strip().lower() == "true"
    group_id = str(form.get("groupId") or "").strip()
    group_name = str(form.get("groupName") or "").strip()

    if create_new_group:
        if not group_name:
            raise UploadFormError("Group name is needed for new group creations")
        return CreateNewGroup(name=group_name)
    if group_id:
        return UseExistingGroup(group_id=group_id)
    return NoGroup()


def _metadata_key(field_name: str) -> str:
    key = field_name[len(METADATA_PREFIX) :]
    return key[len(FILE_PREFIX) :] if key.startswith(FILE_PREFIX) else key


async def parse_upload_form(form: FormData, *, max_file_bytes: int) -> list[UploadRequest]:
    """Turn an inbound multipart form into upload requests.

    Args:
        form: Parsed multipart form.
        max_file_bytes: Largest accepted single file.

    Returns:
        One :class:`UploadRequest` per file part, in form order.

    Raises:
        UploadFormError: On a missing file, missing, duplicate or invalid
            metadata, a duplicate file key, or an oversized file.
    """
    intent = parse_group_intent(form)

    files: dict[str, UploadFile] = {}
    metadata: dict[str, PhotoMetadata] = {}

    for name, value in form.multi_items():
        if name.startswith(FILE_PREFIX):
            if not isinstance(value, UploadFile):
                raise UploadFormError(f"Field {name!r} is not a file")
            key = name[len(FILE_PREFIX) :]
            if key in files:
                raise UploadFormError(f"Duplicate file field: {name}")
            files[key] = value
        elif name.startswith(METADATA_PREFIX):
            if isinstance(value, UploadFile):
                raise UploadFormError(f"Field {name!r} must be text")
            key = _metadata_key(name)
            if key in metadata:
                raise UploadFormError(f"Duplicate metadata for file: {FILE_PREFIX}{key}")
            try:
                metadata[key] = PhotoMetadata.model_validate_json(value)
            except ValidationError as e:
                raise UploadFormError(f"Failed to parse metadata JSON: {e}") from e

    if not files:
        raise UploadFormError("No files found in upload form")

    requests: list[UploadRequest] = []
    for key, upload in files.items():
        if key not in metadata:
            raise UploadFormError(f"Missing metadata for file: {FILE_PREFIX}{key}")

        content = await upload.read()
        if len(content) > max_file_bytes:
            raise UploadFormError(
                f"File {upload.filename!r} is {len(content)} bytes; limit is {max_file_bytes}"
            )
        logger.info("File data size: %d bytes", len(content))

        requests.append(
            UploadRequest(
                content=content,
                filename=upload.filename or f"{FILE_PREFIX}{key}",
                content_type=upload.content_type or "application/octet-stream",
                metadata=metadata[key],
                group=intent,
            )
        )

    return requests
