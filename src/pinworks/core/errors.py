"""Exception hierarchy for the Pinworks gateway.

Every failure the core can produce is a :class:`GatewayError`.  Each
subclass carries a ``category`` and a generic, user-facing ``public_message``
so the front door can map any propagated error to a response without
inspecting its type.  ``str(exc)`` always holds the original diagnostic
text.

Categories
----------
configuration
    The service itself is misconfigured (e.g. no upstream credential).
upstream-communication
    The upstream service could not be reached, or rejected the request.
malformed-data
    The upstream service answered with something that could not be decoded.
invalid-request
    The inbound request cannot be turned into a valid upstream call.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for all errors raised by the gateway core."""

    category: str = "internal"
    public_message: str = "Internal gateway error"
    status_code: int = 500


class ConfigurationError(GatewayError):
    """Raised when required configuration is missing or invalid.

    Surfaced before any network I/O and never retried.
    """

    category = "configuration"
    public_message = "Server configuration error"
    status_code = 500


class TransportError(GatewayError):
    """Raised when an upstream call fails at the transport level.

    Attributes:
        retryable: ``True`` when the failure was a timeout or a connection
            failure.  Only the upload retry policy looks at this flag;
            every other caller propagates the error as-is.
    """

    category = "upstream-communication"
    public_message = "Error communicating with external service"
    status_code = 502

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class RemoteServiceError(GatewayError):
    """Raised when the upstream service answers with a non-2xx status.

    The raw response body is kept verbatim for operator diagnosis; it is
    never parsed.

    Attributes:
        status: Upstream HTTP status code.
        body: Raw upstream response body.
    """

    category = "upstream-communication"
    public_message = "External API error"
    status_code = 502

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"API request failed with status: {status}. Body: {body}")
        self.status = status
        self.body = body


class MalformedResponseError(GatewayError):
    """Raised when an upstream payload cannot be decoded."""

    category = "malformed-data"
    public_message = "Malformed data from external service"
    status_code = 502


class UploadFormError(GatewayError):
    """Raised when an upload request cannot be turned into a valid form."""

    category = "invalid-request"
    public_message = "Invalid upload request"
    status_code = 400
