"""Bounded retry with a fixed delay for model calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 4,
    delay_seconds: float = 1.0,
    *,
    action: str = "operation",
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation`` up to ``max_attempts`` times.

    Every failure is retried after ``delay_seconds``; once the attempts are
    used up the last exception propagates as is.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            attempt += 1
            _logger.warning(
                "%s failed (attempt %s/%s, status=%s): %s",
                action,
                attempt,
                max_attempts,
                _status_code_from_exception(exc),
                exc,
            )
            if attempt >= max_attempts:
                raise
            await sleep(delay_seconds)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings applied to every model call of the workflow."""

    max_attempts: int = 4
    delay_seconds: float = 1.0
    sleep: Sleep = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def run(self, operation: Callable[[], Awaitable[T]], *, action: str) -> T:
        """Run ``operation`` under this policy."""
        return await with_retry(
            operation,
            self.max_attempts,
            self.delay_seconds,
            action=action,
            sleep=self.sleep,
        )


def _status_code_from_exception(exc: Exception) -> str:
    """Extract an HTTP status code from an exception, if available."""
    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        response = getattr(exc, "response", None)
        status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
