"""Bounded, fixed-delay retries for one batch attempt."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence, TypeVar

from tenacity import RetryError, Retrying, before_sleep_log, stop_after_attempt, wait_fixed

from salaryslip.core.exceptions import RetryExhausted, RunInterrupted
from salaryslip.models.employee import Employee

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY_SECONDS = 5.0


class RetryCoordinator:
    """Runs a batch function up to ``max_attempts`` times.

    The delay between attempts blocks the calling thread. Setting the
    interrupt event (see ``cancel``) during a delay aborts with
    RunInterrupted instead of starting another attempt.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        interrupt: threading.Event | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._delay_seconds = delay_seconds
        self._interrupt = interrupt or threading.Event()

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def cancel(self) -> None:
        self._interrupt.set()

    def reset(self) -> None:
        self._interrupt.clear()

    @staticmethod
    def _interruptible_sleep(interrupt: threading.Event) -> Callable[[float], None]:
        def sleep(seconds: float) -> None:
            if interrupt.wait(seconds):
                raise RunInterrupted("Run interrupted while waiting to retry")

        return sleep

    def with_retry(
        self,
        batch: Sequence[Employee],
        process_fn: Callable[[Sequence[Employee]], T],
        interrupt: threading.Event | None = None,
    ) -> T:
        """Return ``process_fn(batch)``, retrying on any exception.

        ``interrupt`` scopes cancellation to one caller; without it the
        coordinator-wide event set by ``cancel`` applies.

        Raises:
            RetryExhausted: every attempt failed.
            RunInterrupted: cancelled during a retry delay.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_fixed(self._delay_seconds),
            sleep=self._interruptible_sleep(interrupt if interrupt is not None else self._interrupt),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        try:
            result = retrying(process_fn, batch)
        except RetryError as exc:
            last = exc.last_attempt
            error = last.exception()
            logger.error("Batch of %d records failed after %d attempts: %s", len(batch), last.attempt_number, error)
            raise RetryExhausted(last.attempt_number, error) from error

        attempts = retrying.statistics.get("attempt_number", 1)
        if attempts > 1:
            logger.info("Batch of %d records succeeded on attempt %d", len(batch), attempts)
        return result
