"""Unit tests for core domain models."""

import pytest
from pydantic import ValidationError

from pinworks.core.models import (
    CreateNewGroup,
    GroupWithThumbnail,
    NoGroup,
    Page,
    PhotoMetadata,
    RemoteFile,
    RemoteGroup,
    UploadRequest,
    UseExistingGroup,
)


class TestRemoteFile:
    """Tests for RemoteFile."""

    def test_ignores_unknown_fields(self):
        f = RemoteFile.model_validate({"id": "f1", "cid": "bafy", "vectorized": False})
        assert f.id == "f1"
        assert not hasattr(f, "vectorized")

    def test_is_image(self):
        assert RemoteFile(id="f1", cid="c", mime_type="image/webp").is_image
        assert not RemoteFile(id="f1", cid="c", mime_type="video/mp4").is_image
        assert not RemoteFile(id="f1", cid="c").is_image

    def test_frozen(self):
        f = RemoteFile(id="f1", cid="c")
        with pytest.raises(ValidationError):
            f.name = "other"


class TestPage:
    """Tests for the generic Page model."""

    def test_blank_cursor_is_none(self):
        assert Page[int](items=[1], next_cursor="").next_cursor is None

    def test_cursor_kept(self):
        assert Page[int](items=[], next_cursor="abc").next_cursor == "abc"

    def test_item_type_validated(self):
        with pytest.raises(ValidationError):
            Page[RemoteGroup](items=[{"name": "no id"}])


class TestGroupWithThumbnail:
    """Tests for GroupWithThumbnail."""

    def test_degraded(self):
        group = RemoteGroup(id="g1", name="Trips", is_public=True)
        entry = GroupWithThumbnail.degraded(group)
        assert entry.id == "g1"
        assert entry.name == "Trips"
        assert entry.thumbnail_image is None
        assert entry.photo_count == 0
        assert entry.has_photos is False

    def test_has_photos_serialised(self):
        group = RemoteGroup(id="g1", name="Trips")
        thumb = RemoteFile(id="f1", cid="c", mime_type="image/jpeg")
        dumped = GroupWithThumbnail.from_group(group, thumbnail=thumb, photo_count=1).model_dump()
        assert dumped["has_photos"] is True
        assert dumped["thumbnail_image"]["id"] == "f1"

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            GroupWithThumbnail(id="g1", name="x", photo_count=-1)


class TestPhotoMetadata:
    """Tests for PhotoMetadata."""

    def test_shutter_speed_alias(self):
        meta = PhotoMetadata.model_validate_json(
            '{"title": "Sunset", "category": "landscape", "shutterSpeed": "1/250"}'
        )
        assert meta.shutter_speed == "1/250"

    def test_optional_fields_default_empty(self):
        meta = PhotoMetadata(title="Sunset", category="landscape")
        assert meta.description == ""
        assert meta.camera == ""
        assert meta.shutter_speed == ""

    def test_title_required(self):
        with pytest.raises(ValidationError):
            PhotoMetadata(category="landscape")


class TestUploadRequest:
    """Tests for UploadRequest group intents."""

    def _meta(self):
        return PhotoMetadata(title="Sunset", category="landscape")

    def test_defaults_to_no_group(self):
        request = UploadRequest(content=b"x", filename="a.jpg", metadata=self._meta())
        assert isinstance(request.group, NoGroup)

    def test_intent_from_kind(self):
        request = UploadRequest.model_validate(
            {
                "content": b"x",
                "filename": "a.jpg",
                "metadata": {"title": "t", "category": "c"},
                "group": {"kind": "create", "name": "Trips"},
            }
        )
        assert request.group == CreateNewGroup(name="Trips")

    def test_existing_group(self):
        request = UploadRequest(
            content=b"x",
            filename="a.jpg",
            metadata=self._meta(),
            group=UseExistingGroup(group_id="g1"),
        )
        assert request.group.group_id == "g1"
