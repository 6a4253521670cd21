"""Core functionality of the Pinworks gateway.

Architecture Overview
---------------------
The core is layered, leaves first:

1. **Configuration** (config.py): Pydantic Settings, ``PINWORKS_`` prefix.
2. **Remote Client** (remote_client.py): one authenticated HTTP call per
   method; maps every failure into the errors.py hierarchy.
3. **Paginator** (paginator.py) and **Listers** (listers.py): cursor
   following with an optional hard item cap.
4. **Thumbnail Composer** (thumbnails.py): per-group lookups with
   per-item fallback.
5. **Upload Orchestrator** (uploads.py, retry.py): group resolution, form
   rebuilding and bounded exponential backoff.
6. **Category Filter** (category_filter.py): pure predicate helpers.
7. **Gateway** (gateway.py): the inbound operations used by the API.

Usage Example
-------------
    from pinworks.core import Gateway, config

    gateway = Gateway(config)
    collections = await gateway.list_groups_with_thumbnails()
"""

from pinworks.core.config import PinworksConfig, config
from pinworks.core.errors import (
    ConfigurationError,
    GatewayError,
    MalformedResponseError,
    RemoteServiceError,
    TransportError,
    UploadFormError,
)
from pinworks.core.gateway import BatchUploadResult, Gateway

__all__ = [
    "BatchUploadResult",
    "ConfigurationError",
    "Gateway",
    "GatewayError",
    "MalformedResponseError",
    "PinworksConfig",
    "RemoteServiceError",
    "TransportError",
    "UploadFormError",
    "config",
]
