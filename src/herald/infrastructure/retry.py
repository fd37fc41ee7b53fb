"""Retry loop built on tenacity and driven by a RetryPolicy.

tenacity owns the loop and the sleeping; the policy decides whether a failed
attempt is retried and how long to wait. The original error of the last
attempt is re-raised unchanged when the policy declines to retry.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from tenacity import RetryCallState, Retrying, stop_never
from tenacity.retry import retry_base
from tenacity.wait import wait_base

from herald.domain.policies.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)


def retry_count(retry_state: RetryCallState) -> int:
    """Number of retries already performed before the current attempt (0-based)"""
    return retry_state.attempt_number - 1


class retry_if_policy_allows(retry_base):
    """Retry while the policy returns a delay for the failed attempt.

    The computed delay is stored on the retry state so the wait strategy
    reuses it instead of drawing new jitter.
    """

    def __init__(self, policy: RetryPolicy):
        self.policy = policy

    def __call__(self, retry_state: RetryCallState) -> bool:
        outcome = retry_state.outcome
        if outcome is None or not outcome.failed:
            return False
        delay = self.policy.calculate_retry_delay(outcome.exception(), retry_count(retry_state))
        retry_state.policy_delay = delay
        return delay is not None


class wait_policy_delay(wait_base):
    """Wait for the delay chosen by retry_if_policy_allows"""

    def __call__(self, retry_state: RetryCallState) -> float:
        return getattr(retry_state, "policy_delay", None) or 0.0


def _before_sleep_log(policy: RetryPolicy) -> Callable[[RetryCallState], None]:
    def _log(retry_state: RetryCallState) -> None:
        if retry_state.outcome is None:
            return
        exception = retry_state.outcome.exception()
        delay = getattr(retry_state, "policy_delay", None) or 0.0
        logger.warning(
            f"Send failed (attempt {retry_state.attempt_number}/{policy.options.maximum_retries + 1}): "
            f"{exception!r}. Retrying in {delay:.3f}s..."
        )

    return _log


def create_retrying(
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
    before_sleep: Optional[Callable[[RetryCallState], None]] = None,
) -> Retrying:
    """Create a tenacity retry loop controlled by a policy

    Args:
        policy: Retry policy deciding whether and how long to wait
        sleep: Function used to wait between attempts
        before_sleep: Optional callback before sleep (defaults to logging)

    Returns:
        Retrying instance; iterate over it and wrap each attempt in ``with attempt:``
    """
    if before_sleep is None:
        before_sleep = _before_sleep_log(policy)

    return Retrying(
        sleep=sleep,
        stop=stop_never,
        wait=wait_policy_delay(),
        retry=retry_if_policy_allows(policy),
        before_sleep=before_sleep,
    )
