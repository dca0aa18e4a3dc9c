"""
Retry-with-backoff policy for calls to the inference service.

A :class:`RetryPolicy` is a small value object (attempt bound plus
exponential backoff) that builds a :class:`tenacity.Retrying` controller.
Every call site that retries goes through :meth:`RetryPolicy.call` so the
behaviour is identical everywhere.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from tenacity import Retrying, stop_after_attempt

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """``max_attempts`` tries with ``base_delay * 2 ** (n - 1)`` seconds of
    sleep after the n-th failure (1s, 2s, 4s, ... by default)."""

    max_attempts: int = 3
    base_delay: float = 1.0

    def backoff(self, attempt: int) -> float:
        """Delay after failed attempt number ``attempt`` (1-based)."""
        return self.base_delay * 2 ** (attempt - 1)

    def _wait(self, retry_state: Any) -> float:
        return self.backoff(retry_state.attempt_number)

    def retrying(self, *, sleep: Optional[Callable[[float], None]] = None) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            sleep=sleep or time.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

    def call(
        self,
        fn: Callable[..., T],
        *args: Any,
        sleep: Optional[Callable[[float], None]] = None,
        **kwargs: Any,
    ) -> T:
        """Call ``fn`` until it succeeds or attempts run out.

        The last exception is re-raised unchanged once the policy gives up.
        """
        return self.retrying(sleep=sleep)(fn, *args, **kwargs)

    def _log_retry(self, retry_state: Any) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "Attempt %d/%d failed: %s. Retrying in %.0f seconds...",
            retry_state.attempt_number,
            self.max_attempts,
            exc,
            delay,
        )


SINGLE_ATTEMPT = RetryPolicy(max_attempts=1)
