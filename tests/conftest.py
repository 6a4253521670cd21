"""Shared pytest fixtures for Pinworks tests.

The upstream pinning service is replaced by :class:`FakeUpstream`, an
``httpx.MockTransport`` handler that serves queued responses per route and
records every request it receives.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Union

import httpx
import pytest
from fastapi.testclient import TestClient

from pinworks.api.main import create_app
from pinworks.core.config import PinworksConfig
from pinworks.core.gateway import Gateway
from pinworks.core.remote_client import PinataClient

API_BASE = "https://api.pinata.test"
UPLOADS_BASE = "https://uploads.pinata.test"

Responder = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeUpstream:
    """Programmable stand-in for the upstream HTTP API.

    Responses are queued per ``(method, path)``.  Each request pops the next
    queued item; the last item of a queue is reused for any further request.
    An item may be an ``httpx.Response``, an exception to raise, or a
    callable that builds a response from the request.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Responder]] = {}

    def add(self, method: str, path: str, *responders: Responder) -> None:
        self._routes.setdefault((method, path), []).extend(responders)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, text=f"no fake route for {request.url.path}")

        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(responder, Exception):
            raise responder
        if callable(responder):
            responder = responder(request)
        # Hand out a copy so a reused response is never read twice.
        return httpx.Response(
            responder.status_code,
            headers=responder.headers,
            content=responder.content,
        )

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class SleepRecorder:
    """Async replacement for ``asyncio.sleep`` that records delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# ---------------------------------------------------------------------------
# Payload builders.
# ---------------------------------------------------------------------------


def make_group(group_id: str, name: str | None = None) -> dict:
    """Build an upstream group payload."""
    return {
        "id": group_id,
        "name": name or f"Group {group_id}",
        "is_public": True,
        "created_at": "2025-01-01T00:00:00Z",
    }


def make_file(
    file_id: str,
    *,
    group_id: str | None = None,
    mime_type: str = "image/jpeg",
    keyvalues: dict | None = None,
) -> dict:
    """Build an upstream file payload."""
    return {
        "id": file_id,
        "name": f"{file_id}.jpg",
        "cid": f"bafy{file_id}",
        "size": 1024,
        "number_of_files": 1,
        "mime_type": mime_type,
        "group_id": group_id,
        "keyvalues": keyvalues or {},
        "created_at": "2025-01-02T00:00:00Z",
    }


def groups_page(groups: list[dict], next_token: str | None = None) -> httpx.Response:
    return httpx.Response(200, json={"data": {"groups": groups, "next_page_token": next_token}})


def files_page(files: list[dict], next_token: str | None = None) -> httpx.Response:
    return httpx.Response(200, json={"data": {"files": files, "next_page_token": next_token}})


def upload_ok(file_id: str = "f-up", group_id: str | None = None) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "data": {
                "id": file_id,
                "name": "Sunset",
                "cid": f"bafy{file_id}",
                "size": 3,
                "number_of_files": 1,
                "mime_type": "image/jpeg",
                "group_id": group_id,
                "keyvalues": {"category": "landscape"},
                "created_at": "2025-01-03T00:00:00Z",
            }
        },
    )


# ---------------------------------------------------------------------------
# Fixtures.
# ---------------------------------------------------------------------------


@pytest.fixture
def test_config() -> PinworksConfig:
    """Create a configuration with a fake credential and fake base URLs.

    Returns:
        PinworksConfig instance for testing
    """
    return PinworksConfig(
        pinata_jwt="test-jwt",
        api_base_url=API_BASE,
        uploads_base_url=UPLOADS_BASE,
        favourites_group_id="fav-group",
        _env_file=None,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    """Create an empty fake upstream; tests queue the responses they need."""
    return FakeUpstream()


@pytest.fixture
def sleeps() -> SleepRecorder:
    """Record retry backoff delays instead of waiting."""
    return SleepRecorder()


@pytest.fixture
def client(test_config: PinworksConfig, upstream: FakeUpstream) -> PinataClient:
    """Create a remote client wired to the fake upstream."""
    return PinataClient(test_config, transport=upstream.transport)


@pytest.fixture
def gateway(
    test_config: PinworksConfig, upstream: FakeUpstream, sleeps: SleepRecorder
) -> Gateway:
    """Create a gateway wired to the fake upstream and the sleep recorder."""
    return Gateway(test_config, transport=upstream.transport, sleep=sleeps)


@pytest.fixture
def test_client(test_config: PinworksConfig, gateway: Gateway) -> TestClient:
    """Create a FastAPI TestClient serving the fake-backed gateway."""
    return TestClient(create_app(test_config, gateway))
