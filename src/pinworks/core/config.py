"""Configuration management for the Pinworks gateway.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PINWORKS_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PINWORKS_* prefix)
2. .env file in the project root
3. Default values defined in PinworksConfig

Example .env file:
    PINWORKS_PINATA_JWT=eyJhbGciOi...
    PINWORKS_REQUEST_TIMEOUT=60
    PINWORKS_THUMBNAIL_CONCURRENCY=4
    PINWORKS_SERVER_PORT=3000

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time and
is what the FastAPI application uses by default.  Core components never read
it directly: the config object is passed into :class:`PinataClient` and the
gateway operations at construction, so tests can run against their own
instance with a fake credential.

Usage Example
-------------
    from pinworks.core.config import config
    from pinworks.core.gateway import Gateway

    gateway = Gateway(config)
    groups = await gateway.list_groups()

Credential Handling
-------------------
The upstream credential is optional at load time so the server can start and
answer health checks without it.  A missing credential becomes a
:class:`~pinworks.core.errors.ConfigurationError` the moment a remote client
is constructed, before any network I/O happens.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FAVOURITES_GROUP_ID = "876d949f-6532-44af-924c-f164e5ac6b1b"


class PinworksConfig(BaseSettings):
    """Main configuration for the Pinworks gateway.

    Attributes
    ----------
    Upstream Settings:
        pinata_jwt : SecretStr | None
            Bearer credential attached to every upstream call
        api_base_url : str
            Base URL of the upstream list/group API
        uploads_base_url : str
            Base URL of the upstream upload API
        request_timeout : float
            Per-request timeout in seconds

    Upload Retry Settings:
        upload_max_attempts : int
            Total submission attempts for one file (including the first)
        retry_base_delay : float
            Backoff delay after the first retryable failure; doubles after
            each following failure

    Composition Settings:
        thumbnail_concurrency : int
            Maximum number of concurrent per-group thumbnail lookups
        exact_photo_counts : bool
            Drain every group's file list to report true photo counts
        favourites_group_id : str
            Group served by ``GET /favourites`` and by ``GET /group-images``
            when no group is given

    Server Settings:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Bind port for uvicorn
        cors_origins : list[str]
            Origins allowed by the CORS middleware
        max_upload_bytes : int
            Largest accepted inbound upload body
        log_level : str
            Root log level applied by ``main()``

    Examples
    --------
    Create a configuration for tests:

        >>> cfg = PinworksConfig(pinata_jwt="test-jwt", _env_file=None)
        >>> cfg.request_timeout
        60.0
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PINWORKS_",
        case_sensitive=False,
    )

    # Upstream settings
    pinata_jwt: SecretStr | None = Field(
        default=None,
        description="Bearer credential for the upstream pinning service",
    )
    api_base_url: str = Field(
        default="https://api.pinata.cloud",
        description="Base URL for group and file listing",
    )
    uploads_base_url: str = Field(
        default="https://uploads.pinata.cloud",
        description="Base URL for multipart uploads",
    )
    request_timeout: float = Field(
        default=60.0,
        description="Per-request timeout in seconds",
        gt=0,
    )

    # Upload retry settings
    upload_max_attempts: int = Field(
        default=3,
        description="Total upload attempts, including the first",
        ge=1,
        le=10,
    )
    retry_base_delay: float = Field(
        default=2.0,
        description="Delay in seconds after the first retryable failure",
        ge=0,
    )

    # Composition settings
    thumbnail_concurrency: int = Field(
        default=1,
        description="Concurrent per-group thumbnail lookups (1 = sequential)",
        ge=1,
        le=32,
    )
    exact_photo_counts: bool = Field(
        default=False,
        description="Drain each group's files to report true photo counts",
    )
    favourites_group_id: str = Field(
        default=DEFAULT_FAVOURITES_GROUP_ID,
        description="Group served by the favourites carousel",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=3000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the gateway from a browser",
    )
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        description="Largest accepted inbound upload body in bytes",
        ge=1024,
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )


# Global configuration instance
# Loads values from environment variables (PINWORKS_* prefix) and .env file.
config = PinworksConfig()
