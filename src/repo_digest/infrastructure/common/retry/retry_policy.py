from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from repo_digest.core.exceptions import UpstreamError
from repo_digest.infrastructure.observability.logger_factory_service import get_logger

logger = get_logger(__name__)

_T = TypeVar("_T")


def is_retryable_upstream(exc: BaseException) -> bool:
    """Network errors, timeouts, 5xx and 429 are flagged retryable by the gateway."""
    return isinstance(exc, UpstreamError) and exc.retryable


@dataclass(frozen=True)
class RetryPolicy:
    """Retries flaky GitHub calls. One attempt by default, i.e. fail fast."""

    max_attempts: int = 1
    initial_wait: float = 0.25
    max_wait: float = 5.0

    async def run(self, fn: Callable[[], Awaitable[_T]], operation: str = "upstream") -> _T:
        return await self._retrying(operation)(fn)

    def _retrying(self, operation: str) -> AsyncRetrying:
        def log_retry(state: RetryCallState) -> None:
            error = state.outcome.exception() if state.outcome else None
            logger.warning(
                "Retrying upstream call",
                operation=operation,
                attempt=state.attempt_number,
                max_attempts=self.max_attempts,
                error_type=type(error).__name__,
                error_details=str(error),
                error_retryable=True,
            )

        return AsyncRetrying(
            retry=retry_if_exception(is_retryable_upstream),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(multiplier=self.initial_wait, max=self.max_wait),
            before_sleep=log_retry,
            reraise=True,
        )
