"""Domain models shared by the gateway core.

These are immutable snapshots of upstream state (groups and files), the
generic :class:`Page` returned by every list call, and the upload
request/result types consumed and produced by the upload orchestrator.

Models
------
RemoteGroup
    A group as reported by the upstream service.
RemoteFile
    A pinned file as reported by the upstream service.
Page
    One page of a cursor-paginated collection.
GroupWithThumbnail
    A group joined with a representative image and a photo count.
PhotoMetadata
    User-supplied metadata for an uploaded photo.
UseExistingGroup / CreateNewGroup / NoGroup
    The three group-targeting intents of an upload.
UploadRequest
    One file plus its metadata and group intent.
UploadResult
    The upstream's acknowledgement of one accepted upload.
"""

from __future__ import annotations

from typing import Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

T = TypeVar("T")


class RemoteGroup(BaseModel):
    """A group owned by the upstream account.

    Attributes:
        id: Opaque upstream identifier.
        name: Human-readable group name.
        is_public: Visibility flag; the upstream may omit it.
        created_at: Creation timestamp as sent by the upstream.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    is_public: bool | None = None
    created_at: str = ""


class RemoteFile(BaseModel):
    """A file pinned on the upstream service.

    Attributes:
        id: Opaque upstream identifier.
        name: Display name.
        cid: Content address of the file.
        size: Size in bytes.
        number_of_files: Number of files contained (1 for plain files).
        mime_type: MIME type reported by the upstream.
        group_id: Owning group, if any.
        keyvalues: Flat string metadata attached at upload time.
        created_at: Creation timestamp as sent by the upstream.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""
    cid: str
    size: int = 0
    number_of_files: int = 0
    mime_type: str = ""
    group_id: str | None = None
    keyvalues: dict[str, str] = Field(default_factory=dict)
    created_at: str = ""

    @field_validator("name", "mime_type", "created_at", mode="before")
    @classmethod
    def _none_as_empty_string(cls, value):
        return "" if value is None else value

    @field_validator("keyvalues", mode="before")
    @classmethod
    def _none_as_empty_mapping(cls, value):
        return {} if value is None else value

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class Page(BaseModel, Generic[T]):
    """One page of a cursor-paginated upstream collection.

    ``next_cursor`` is ``None`` if and only if this is the final page.  The
    number of items per page is whatever the upstream chose to send.
    """

    model_config = ConfigDict(frozen=True)

    items: list[T]
    next_cursor: str | None = None

    @field_validator("next_cursor", mode="before")
    @classmethod
    def _blank_cursor_is_final(cls, value):
        # The upstream sends "" on the last page for some collections.
        return value or None


class GroupWithThumbnail(BaseModel):
    """A group enriched with a representative image.

    ``thumbnail_image is None`` and ``photo_count == 0`` is the degraded
    state recorded when the per-group lookup failed; it is not an error.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    is_public: bool | None = None
    created_at: str = ""
    thumbnail_image: RemoteFile | None = None
    photo_count: int = Field(default=0, ge=0)

    @computed_field
    @property
    def has_photos(self) -> bool:
        return self.thumbnail_image is not None

    @classmethod
    def degraded(cls, group: RemoteGroup) -> GroupWithThumbnail:
        """Build the fallback entry used when a group's lookup fails."""
        return cls.from_group(group, thumbnail=None, photo_count=0)

    @classmethod
    def from_group(
        cls,
        group: RemoteGroup,
        *,
        thumbnail: RemoteFile | None,
        photo_count: int,
    ) -> GroupWithThumbnail:
        return cls(
            id=group.id,
            name=group.name,
            is_public=group.is_public,
            created_at=group.created_at,
            thumbnail_image=thumbnail,
            photo_count=photo_count,
        )


class PhotoMetadata(BaseModel):
    """Metadata entered by the photographer for one uploaded file.

    Every field is a plain string; empty strings mean "not provided" and are
    left out of the upstream key-value blob.  ``shutter_speed`` travels as
    ``shutterSpeed`` on the wire.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str
    description: str = ""
    category: str
    camera: str = ""
    lens: str = ""
    iso: str = ""
    aperture: str = ""
    shutter_speed: str = Field(default="", alias="shutterSpeed")


class UseExistingGroup(BaseModel):
    """Upload into a group that already exists upstream."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["existing"] = "existing"
    group_id: str


class CreateNewGroup(BaseModel):
    """Create a new upstream group and upload into it."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["create"] = "create"
    name: str


class NoGroup(BaseModel):
    """Upload without assigning the file to any group."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


GroupIntent = Union[UseExistingGroup, CreateNewGroup, NoGroup]


class UploadRequest(BaseModel):
    """A single file to upload, with its metadata and group intent."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    filename: str
    content_type: str = "application/octet-stream"
    metadata: PhotoMetadata
    group: GroupIntent = Field(default_factory=NoGroup, discriminator="kind")


class UploadResult(BaseModel):
    """The upstream's record of one accepted upload.

    Attributes:
        id: Upstream file identifier.
        name: Display name stored upstream.
        cid: Content address of the stored file.
        group_id: Group the file ended up in, if any.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    cid: str
    group_id: str | None = None
