"""Tests for pinworks.core.listers — whole-collection group and file listings."""

from __future__ import annotations

import json

import pytest
from conftest import files_page, groups_page, make_file, make_group

from pinworks.core.listers import list_all_files, list_all_groups


class TestListAllGroups:
    """Test group aggregation across pages."""

    @pytest.mark.asyncio
    async def test_follows_page_tokens(self, client, upstream):
        upstream.add(
            "GET",
            "/v3/groups/public",
            groups_page([make_group("g1"), make_group("g2")], "t2"),
            groups_page([make_group("g3")]),
        )
        async with client:
            groups = await list_all_groups(client)

        assert [g.id for g in groups] == ["g1", "g2", "g3"]
        calls = upstream.calls("/v3/groups/public")
        assert len(calls) == 2
        assert calls[1].url.params["pageToken"] == "t2"

    @pytest.mark.asyncio
    async def test_limit(self, client, upstream):
        upstream.add(
            "GET",
            "/v3/groups/public",
            groups_page([make_group("g1"), make_group("g2")], "t2"),
            groups_page([make_group("g3")]),
        )
        async with client:
            groups = await list_all_groups(client, limit=1)
        assert [g.id for g in groups] == ["g1"]
        assert len(upstream.calls("/v3/groups/public")) == 1


class TestListAllFiles:
    """Test file aggregation with group scope, filter and limit."""

    @pytest.mark.asyncio
    async def test_limit_stops_after_first_page(self, client, upstream):
        """A limit of 2 over pages of 2 and 2 should fetch one page only."""
        upstream.add(
            "GET",
            "/v3/files/public",
            files_page([make_file("a"), make_file("b")], "c2"),
            files_page([make_file("c"), make_file("d")]),
        )
        async with client:
            files = await list_all_files(client, group_id="g1", limit=2)

        assert [f.id for f in files] == ["a", "b"]
        assert len(upstream.calls("/v3/files/public")) == 1

    @pytest.mark.asyncio
    async def test_filter_and_group_reused_on_every_page(self, client, upstream):
        upstream.add(
            "GET",
            "/v3/files/public",
            files_page([make_file("a")], "c2"),
            files_page([make_file("b")]),
        )
        predicate = {"category": {"value": ["cat", "dog"], "op": "in"}}
        async with client:
            files = await list_all_files(client, group_id="g1", metadata_filter=predicate)

        assert [f.id for f in files] == ["a", "b"]
        for request in upstream.calls("/v3/files/public"):
            assert request.url.params["group"] == "g1"
            assert json.loads(request.url.params["metadata[keyvalues]"]) == predicate

    @pytest.mark.asyncio
    async def test_empty_collection(self, client, upstream):
        upstream.add("GET", "/v3/files/public", files_page([]))
        async with client:
            assert await list_all_files(client) == []
