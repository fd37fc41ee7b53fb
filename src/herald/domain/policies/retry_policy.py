"""Retry policy: per-attempt timeout and jittered backoff decisions."""

from __future__ import annotations

import logging
import random
import threading
from typing import List, Optional

from herald.domain.config.retry import RetryMode, RetryOptions
from herald.domain.policies.error_classifier import ErrorClassification, classify_error

logger = logging.getLogger(__name__)

# Largest exponent for which EXPONENTIAL_BASE ** n stays a finite float.
_MAX_EXPONENT = 1023


class RetryPolicy:
    """Decides whether and how long to wait before retrying a failed attempt.

    The policy never sleeps or performs I/O; the retry loop that owns it does.
    Apart from drawing random numbers it has no side effects, so a single
    instance can be shared by every send of a client.
    """

    JITTER_FACTOR = 0.08
    EXPONENTIAL_BASE = 2.0

    def __init__(self, options: Optional[RetryOptions] = None, rng: Optional[random.Random] = None):
        """Initialize the policy

        Args:
            options: Retry options (defaults are used when None)
            rng: Random source for jitter; pass a seeded instance for deterministic runs
        """
        self.options = options or RetryOptions()
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()

    def classify_error(self, error: Optional[BaseException]) -> ErrorClassification:
        """Classify the failure of an attempt as retriable or fatal"""
        return classify_error(error)

    def calculate_try_timeout(self, attempt_count: int) -> float:
        """Timeout, in seconds, for a single attempt

        The timeout does not grow with the attempt count.
        """
        return self.options.try_timeout

    def calculate_retry_delay(self, error: Optional[BaseException], attempt_count: int) -> Optional[float]:
        """Compute how long to wait before retrying

        Args:
            error: Failure raised by the last attempt
            attempt_count: Number of retries already performed (0-based)

        Returns:
            Delay in seconds, or None when the operation should not be retried
        """
        options = self.options
        if (
            options.maximum_retries <= 0
            or options.maximum_delay <= 0
            or attempt_count >= options.maximum_retries
        ):
            return None

        if classify_error(error) is ErrorClassification.FATAL:
            logger.debug(f"Not retrying fatal error: {error!r}")
            return None

        if options.mode == RetryMode.EXPONENTIAL:
            exponent = min(max(attempt_count, 0), _MAX_EXPONENT)
            base_delay = options.delay * (self.EXPONENTIAL_BASE ** exponent)
        else:
            base_delay = options.delay

        delay = min(base_delay * self._jitter(), options.maximum_delay)
        logger.debug(f"Retry {attempt_count + 1}/{options.maximum_retries} scheduled in {delay:.3f}s")
        return delay

    def retry_schedule(self, error: Optional[BaseException], attempts: int) -> List[float]:
        """List the delays produced for attempts 0..attempts-1, stopping at the first refusal"""
        schedule = []
        for attempt in range(attempts):
            delay = self.calculate_retry_delay(error, attempt)
            if delay is None:
                break
            schedule.append(delay)
        return schedule

    def _jitter(self) -> float:
        with self._rng_lock:
            return self._rng.uniform(1.0 - self.JITTER_FACTOR, 1.0 + self.JITTER_FACTOR)
