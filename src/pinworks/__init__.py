"""Pinworks - REST gateway over a content-pinning service."""

__version__ = "0.1.0"

from pinworks.core.config import PinworksConfig, config
from pinworks.core.gateway import Gateway

__all__ = [
    "Gateway",
    "PinworksConfig",
    "config",
]
