"""Pinworks Gateway — FastAPI Application.

This module is the HTTP front door of the gateway.  It defines the
application factory, all REST routes, the error handler, and the ``main()``
CLI function that launches the uvicorn server.

Architecture
------------
The application is a stateless proxy:

- **Configuration** comes from :class:`~pinworks.core.config.PinworksConfig`
  and is stored on ``app.state.config``.
- **Every route** delegates to exactly one
  :class:`~pinworks.core.gateway.Gateway` operation, which opens its own
  upstream client for the duration of the request.  Nothing is cached.
- **Errors** raised by the core are :class:`~pinworks.core.errors.GatewayError`
  subclasses; a single exception handler maps them to a status code and an
  :class:`~pinworks.api.models.ErrorResponse` body.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/health``                   Liveness check (no upstream call)
GET       ``/groups``                   Every upstream group
GET       ``/groups-with-thumbnails``   Groups with thumbnail and count
GET       ``/group-images``             Files of one group
GET       ``/favourites``               Images of the favourites group
GET       ``/files-category``           Files filtered by category
POST      ``/upload``                   Multipart photo upload
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    pinworks

Direct invocation::

    python -m pinworks.api.main
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.types import Message

from pinworks import __version__
from pinworks.api.forms import parse_upload_form
from pinworks.api.models import (
    CategoryResponse,
    ErrorResponse,
    GroupImagesResponse,
    GroupsResponse,
    GroupsWithThumbnailResponse,
    UploadResponse,
)
from pinworks.core.category_filter import images_only
from pinworks.core.config import PinworksConfig, config
from pinworks.core.errors import GatewayError
from pinworks.core.gateway import Gateway

logger = logging.getLogger(__name__)

router = APIRouter()


def get_gateway(request: Request) -> Gateway:
    """Return the gateway bound to the running application."""
    return request.app.state.gateway


def _size_limited(request: Request, max_bytes: int) -> Request:
    """Wrap *request* so reading more than *max_bytes* of body raises 413."""
    received = 0

    async def receive() -> Message:
        nonlocal received
        message = await request.receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > max_bytes:
                raise HTTPException(status_code=413, detail="Upload body too large")
        return message

    return Request(request.scope, receive)


# ---------------------------------------------------------------------------
# Error handling.
# ---------------------------------------------------------------------------


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    """Render a :class:`GatewayError` as an :class:`ErrorResponse`.

    The body pairs the category's generic message with the original
    diagnostic text, so operators see the upstream status and body.
    """
    logger.error("API Error on %s %s: %s", request.method, request.url.path, exc)
    body = ErrorResponse(error=exc.public_message, message=str(exc))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/health")
async def health() -> dict:
    """Return a liveness payload without touching the upstream service."""
    return {"status": "ok", "version": __version__}


@router.get("/groups", response_model=GroupsResponse)
async def get_groups(gateway: Gateway = Depends(get_gateway)) -> GroupsResponse:
    """Return every group on the upstream account."""
    groups = await gateway.list_groups()
    return GroupsResponse(groups=groups)


@router.get("/groups-with-thumbnails", response_model=GroupsWithThumbnailResponse)
async def get_groups_with_thumbnails(
    exact_counts: bool | None = Query(
        None, description="Drain each group for a true photo count."
    ),
    gateway: Gateway = Depends(get_gateway),
) -> GroupsWithThumbnailResponse:
    """Return every group with its first image and a photo count.

    A group whose image lookup fails is still listed, with no thumbnail
    and a count of zero.
    """
    collections = await gateway.list_groups_with_thumbnails(exact_counts=exact_counts)
    return GroupsWithThumbnailResponse(collections=collections)


@router.get("/group-images", response_model=GroupImagesResponse)
async def get_group_images(
    group_id: str | None = Query(None, description="Group to list; defaults to favourites."),
    limit: int | None = Query(None, ge=0, description="Maximum number of files."),
    gateway: Gateway = Depends(get_gateway),
) -> GroupImagesResponse:
    """Return the files of one group, fetching no more pages than *limit* needs."""
    resolved_group_id, files = await gateway.list_group_images(group_id, limit)
    return GroupImagesResponse(group_id=resolved_group_id, images=files)


@router.get("/favourites", response_model=GroupImagesResponse)
async def get_favourites(
    limit: int | None = Query(None, ge=0, description="Maximum number of files."),
    gateway: Gateway = Depends(get_gateway),
) -> GroupImagesResponse:
    """Return the images of the configured favourites group.

    Non-image files are dropped after the group has been listed.
    """
    group_id, files = await gateway.list_group_images(None, limit)
    return GroupImagesResponse(group_id=group_id, images=images_only(files))


@router.get("/files-category", response_model=CategoryResponse)
async def get_files_by_category(
    categories: str | None = Query(None, description="Comma-separated category names."),
    limit: int | None = Query(None, ge=0, description="Maximum number of files."),
    gateway: Gateway = Depends(get_gateway),
) -> CategoryResponse:
    """Return files whose ``category`` metadata matches any of *categories*."""
    files = await gateway.list_files_by_category(categories, limit)
    return CategoryResponse(images=files)


@router.post("/upload", response_model=UploadResponse)
async def upload_photos(
    request: Request,
    gateway: Gateway = Depends(get_gateway),
) -> UploadResponse:
    """Upload every file of a multipart form.

    See :mod:`pinworks.api.forms` for the accepted fields.

    Raises:
        HTTPException: 413 if the body exceeds ``max_upload_bytes``, whether
            declared up front or counted while a chunked body streams in.
    """
    settings: PinworksConfig = request.app.state.config
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Upload body too large")

    logger.info("Processing upload request")
    form = await _size_limited(request, settings.max_upload_bytes).form()
    try:
        uploads = await parse_upload_form(form, max_file_bytes=settings.max_upload_bytes)
    finally:
        await form.close()

    batch = await gateway.upload_batch(uploads)
    return UploadResponse(files=batch.files, group_id=batch.group_id)


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    settings: PinworksConfig | None = None,
    gateway: Gateway | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Configuration to use; defaults to the global ``config``.
        gateway: Gateway to serve; defaults to one built from *settings*.
            Tests pass a gateway wired to a mock transport.

    Returns:
        The configured application.
    """
    settings = settings or config

    app = FastAPI(
        title="Pinworks Gateway",
        description="Simplified REST surface over a content-pinning service.",
        version=__version__,
    )

    # Browsers call the gateway directly from the gallery frontend.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = settings
    app.state.gateway = gateway or Gateway(settings)

    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.include_router(router)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~pinworks.core.config.config`
    (``PINWORKS_SERVER_HOST``, ``PINWORKS_SERVER_PORT``,
    ``PINWORKS_LOG_LEVEL``).  Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``pinworks`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "pinworks.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
