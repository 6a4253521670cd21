"""Bounded exponential-backoff retry for upstream submissions.

:class:`RetryPolicy` drives an operation *factory*: a zero-argument coroutine
function that builds and sends a fresh request on every call.  Requests whose
body is a single-consumption stream cannot be re-sent, so the policy never
holds on to a request between attempts.

Only :class:`~pinworks.core.errors.TransportError` instances flagged
``retryable`` (timeouts and connection failures) are retried.  Everything
else propagates on the attempt that raised it.

With the defaults (3 attempts, base delay 2s) three consecutive timeouts
produce waits of 2s, 4s and 8s and then the last error is raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pinworks.core.errors import GatewayError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(error: Exception) -> bool:
    """Return ``True`` for timeouts and connection failures."""
    return isinstance(error, TransportError) and error.retryable


class RetryPolicy:
    """Retry a coroutine factory on retryable transport errors.

    Attributes:
        max_attempts (int):
            Total number of attempts, including the first.
        base_delay (float):
            Wait after the first retryable failure; doubled after each
            following one.
        sleep:
            Coroutine used to wait.  Tests inject a recorder here.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.sleep = sleep

    def delay_for(self, failures: int) -> float:
        """Return the wait after the *failures*-th retryable failure (1-based)."""
        return self.base_delay * 2 ** (failures - 1)

    async def run(self, attempt: Callable[[], Awaitable[T]]) -> T:
        """Call *attempt* until it succeeds or the policy gives up.

        Args:
            attempt: Zero-argument coroutine function performing one full
                attempt, including rebuilding its request.

        Returns:
            The first successful result.

        Raises:
            GatewayError: The first non-retryable error, or the last
                retryable one once every attempt has been used.
        """
        last_error: GatewayError | None = None

        for failures in range(1, self.max_attempts + 1):
            try:
                return await attempt()
            except GatewayError as e:
                if not is_retryable(e):
                    raise
                last_error = e

            delay = self.delay_for(failures)
            logger.warning(
                "Retrying upload after %.1fs (attempt %d/%d): %s",
                delay,
                failures,
                self.max_attempts,
                last_error,
            )
            await self.sleep(delay)

        assert last_error is not None
        raise last_error
