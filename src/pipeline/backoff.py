"""
backoff.py

Bounded exponential retry around a single external call.

Only RateLimited is retried. NotFound and Fatal surface immediately so the
caller can decide between marking state terminal, skipping, or aborting.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, TypeVar

import config
from logger import get_logger
from pipeline.errors import Fatal, NotFound, RateLimited

logger = get_logger(__name__)
T = TypeVar("T")


class BackoffController:
    """
    Retry engine for one external operation at a time.

    The controller holds configuration only; every execute() call gets its
    own attempt counter, so one instance can be shared by the traversal and
    replay stages.

    Args:
        base_delay: seconds slept after the first rate-limited attempt
        max_attempts: total calls allowed per execute()
        sleep: injectable sleep function (tests pass a recorder)
    """

    def __init__(
        self,
        base_delay: float,
        max_attempts: int = config.DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.base_delay = base_delay
        self.max_attempts = max_attempts
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Delay after failed attempt number `attempt` (1-based)."""
        return self.base_delay * (2 ** (attempt - 1))

    def execute(self, operation: Callable[[], T], name: str = "") -> T:
        """
        Run operation, retrying while it raises RateLimited.

        Returns:
            The operation's result

        Raises:
            NotFound: immediately, never retried
            Fatal: on unretryable failure, or wrapping the last RateLimited
                once max_attempts is exhausted
        """
        label = name or getattr(operation, "__name__", "operation")
        last_limit: Optional[RateLimited] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()

            except RateLimited as e:
                last_limit = e

            except (NotFound, Fatal):
                raise

            except Exception as e:
                raise Fatal(f"{label} failed: {e}", status="unknown") from e

            if attempt == self.max_attempts:
                break

            delay = self.delay_for(attempt)
            logger.warning(
                f"{label} rate limited (attempt {attempt}/{self.max_attempts}), "
                f"retrying in {delay:g}s"
            )
            self._sleep(delay)

        logger.error(f"{label} still rate limited after {self.max_attempts} attempts")
        raise Fatal(
            f"{label} rate limited after {self.max_attempts} attempts: {last_limit}",
            status=last_limit.status if last_limit else "rate_limited",
        ) from last_limit
