"""Pydantic response models for the Pinworks API.

These models define the JSON envelopes returned by every API endpoint.
FastAPI uses them for serialisation and OpenAPI documentation generation.
Every success envelope carries ``success: true`` and ``message: null``;
errors are rendered as :class:`ErrorResponse` by the application's
exception handler.

Models
------
GroupsResponse
    ``GET /groups`` — every upstream group.
GroupsWithThumbnailResponse
    ``GET /groups-with-thumbnails`` — groups with a thumbnail and count.
GroupImagesResponse
    ``GET /group-images`` and ``GET /favourites`` — files of one group.
CategoryResponse
    ``GET /files-category`` — files matching a category filter.
UploadResponse
    ``POST /upload`` — per-file upload results and the resolved group.
ErrorResponse
    Body of every error response.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from pinworks.core.models import GroupWithThumbnail, RemoteFile, RemoteGroup, UploadResult


class GroupsResponse(BaseModel):
    """Response body for ``GET /groups``."""

    success: bool = True
    groups: list[RemoteGroup]
    message: str | None = None


class GroupsWithThumbnailResponse(BaseModel):
    """Response body for ``GET /groups-with-thumbnails``.

    Attributes:
        collections: One entry per group, in upstream order.  Groups whose
            thumbnail lookup failed appear with ``thumbnail_image: null`` and
            ``photo_count: 0``.
    """

    success: bool = True
    collections: list[GroupWithThumbnail]
    message: str | None = None


class GroupImagesResponse(BaseModel):
    """Response body for ``GET /group-images`` and ``GET /favourites``."""

    success: bool = True
    group_id: str = Field(description="The group that was listed.")
    images: list[RemoteFile]
    message: str | None = None


class CategoryResponse(BaseModel):
    """Response body for ``GET /files-category``."""

    success: bool = True
    images: list[RemoteFile]
    message: str | None = None


class UploadResponse(BaseModel):
    """Response body for ``POST /upload``.

    Attributes:
        files: One result per uploaded file, in form order.
        group_id: The created group when ``createNewGroup`` was set,
            otherwise the requested ``groupId`` (or ``null``).
    """

    success: bool = True
    files: list[UploadResult]
    group_id: str | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """Response body for every failed request.

    Attributes:
        error: Generic, category-specific message.
        message: The original diagnostic text.
    """

    success: bool = False
    error: str
    message: str
