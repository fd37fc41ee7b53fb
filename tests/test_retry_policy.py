"""Tests for RetryPolicy"""

from __future__ import annotations

import random
import threading

import pytest
from pydantic import ValidationError

from herald.domain.config.retry import RetryMode, RetryOptions
from herald.domain.models.errors import PublishError
from herald.domain.policies.error_classifier import ErrorClassification
from herald.domain.policies.retry_policy import RetryPolicy


def _policy(**options) -> RetryPolicy:
    return RetryPolicy(RetryOptions(**options), rng=random.Random(1234))


class TestRetryOptions:
    """Tests for RetryOptions validation"""

    def test_defaults(self):
        options = RetryOptions()
        assert options.maximum_retries == 3
        assert options.mode == RetryMode.EXPONENTIAL
        assert options.try_timeout > 0

    @pytest.mark.parametrize(
        "field,value",
        [
            ("maximum_retries", -1),
            ("delay", -0.5),
            ("maximum_delay", -1.0),
            ("try_timeout", 0),
            ("try_timeout", -3),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError, match=field):
            RetryOptions(**{field: value})

    def test_invalid_mode_rejected(self):
        with pytest.raises(ValidationError, match="mode"):
            RetryOptions(mode="linear")

    def test_options_are_immutable(self):
        options = RetryOptions()
        with pytest.raises(ValidationError):
            options.delay = 5.0


class TestClassifyError:
    def test_policy_delegates_classification(self):
        policy = _policy()
        assert policy.classify_error(TimeoutError()) is ErrorClassification.RETRIABLE
        assert policy.classify_error(ValueError()) is ErrorClassification.FATAL


class TestCalculateTryTimeout:
    @pytest.mark.parametrize("attempt", [0, 1, 2, 10, 100])
    def test_timeout_is_attempt_invariant(self, attempt):
        policy = _policy(try_timeout=5.0)
        assert policy.calculate_try_timeout(attempt) == 5.0


class TestCalculateRetryDelay:
    def test_no_retry_without_maximum_retries(self):
        policy = _policy(maximum_retries=0, delay=1.0, maximum_delay=3600.0, mode="fixed")
        assert policy.calculate_retry_delay(TimeoutError(), -1) is None
        assert policy.calculate_retry_delay(TimeoutError(), 0) is None

    def test_no_retry_without_maximum_delay(self):
        policy = _policy(maximum_retries=99, delay=1.0, maximum_delay=0.0, mode="fixed")
        assert policy.calculate_retry_delay(TimeoutError(), 88) is None
        assert policy.calculate_retry_delay(PublishError("x", is_transient=True), 0) is None

    @pytest.mark.parametrize("attempt", [5, 6, 9, 14, 200])
    def test_no_retry_when_attempts_reach_maximum(self, attempt):
        policy = _policy(maximum_retries=5, delay=1.0, maximum_delay=3600.0, mode="fixed")
        assert policy.calculate_retry_delay(TimeoutError(), attempt) is None

    def test_retries_transient_domain_error(self):
        policy = _policy(maximum_retries=99, delay=1.0, maximum_delay=100.0, mode="fixed")
        assert policy.calculate_retry_delay(PublishError("busy", is_transient=True), 88) is not None

    def test_no_retry_for_fatal_error(self):
        policy = _policy(maximum_retries=99, delay=1.0, maximum_delay=100.0, mode="fixed")
        assert policy.calculate_retry_delay(ValueError("bad argument"), 1) is None
        assert policy.calculate_retry_delay(None, 1) is None

    @pytest.mark.parametrize("delay_seconds", [1, 2, 30, 60, 240])
    def test_delay_capped_at_maximum(self, delay_seconds):
        policy = _policy(maximum_retries=99, delay=float(delay_seconds), maximum_delay=1.0, mode="fixed")
        assert policy.calculate_retry_delay(TimeoutError(), 88) == 1.0

    @pytest.mark.parametrize("delay_seconds", [1, 2, 30, 60, 120])
    def test_fixed_mode_stays_within_jitter(self, delay_seconds):
        policy = _policy(maximum_retries=99, delay=float(delay_seconds), maximum_delay=72 * 3600.0, mode="fixed")
        variance = delay_seconds * policy.JITTER_FACTOR

        for _ in range(delay_seconds):
            delay = policy.calculate_retry_delay(TimeoutError(), 88)
            assert delay_seconds - variance <= delay <= delay_seconds + variance

    @pytest.mark.parametrize("iterations", [1, 2, 5, 10, 25])
    def test_exponential_mode_strictly_increases(self, iterations):
        policy = _policy(maximum_retries=99, delay=0.015, maximum_delay=50000 * 3600.0, mode="exponential")
        previous = 0.0

        for attempt in range(iterations):
            variance = policy.options.delay * attempt * policy.JITTER_FACTOR
            delay = policy.calculate_retry_delay(TimeoutError(), attempt)
            assert delay is not None, f"Attempt {attempt} did not have a value"
            assert delay > previous + variance, f"Attempt {attempt} produced an unexpected delay"
            previous = delay

    def test_exponential_mode_never_exceeds_maximum(self):
        policy = _policy(maximum_retries=99, delay=0.5, maximum_delay=10.0, mode="exponential")
        delays = policy.retry_schedule(TimeoutError(), 99)
        assert len(delays) == 99
        assert all(0 <= d <= 10.0 for d in delays)
        assert delays[-1] == 10.0

    def test_huge_attempt_count_saturates(self):
        policy = _policy(maximum_retries=100000, delay=1.0, maximum_delay=30.0, mode="exponential")
        assert policy.calculate_retry_delay(TimeoutError(), 5000) == 30.0

    def test_attempt_equal_to_maximum_returns_none(self):
        policy = _policy(maximum_retries=5, delay=1.0, maximum_delay=3600.0, mode="fixed")
        assert policy.calculate_retry_delay(TimeoutError(), 4) is not None
        assert policy.calculate_retry_delay(TimeoutError(), 5) is None

    def test_seeded_sources_give_identical_delays(self):
        options = RetryOptions(maximum_retries=10, delay=1.0, maximum_delay=100.0)
        first = RetryPolicy(options, rng=random.Random(7))
        second = RetryPolicy(options, rng=random.Random(7))
        assert first.retry_schedule(TimeoutError(), 10) == second.retry_schedule(TimeoutError(), 10)

    def test_zero_delay_is_still_a_retry(self):
        policy = _policy(maximum_retries=3, delay=0.0, maximum_delay=10.0, mode="exponential")
        assert policy.calculate_retry_delay(TimeoutError(), 0) == 0.0


class TestRetrySchedule:
    def test_schedule_stops_at_maximum_retries(self):
        policy = _policy(maximum_retries=3, delay=1.0, maximum_delay=100.0, mode="fixed")
        assert len(policy.retry_schedule(TimeoutError(), 10)) == 3

    def test_schedule_empty_for_fatal_error(self):
        policy = _policy(maximum_retries=3, delay=1.0, maximum_delay=100.0)
        assert policy.retry_schedule(KeyError("x"), 10) == []


def test_shared_policy_across_threads():
    policy = _policy(maximum_retries=10, delay=1.0, maximum_delay=100.0, mode="fixed")
    results = []
    lock = threading.Lock()

    def worker():
        for _ in range(200):
            delay = policy.calculate_retry_delay(TimeoutError(), 1)
            with lock:
                results.append(delay)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 800
    assert all(1.0 - policy.JITTER_FACTOR <= d <= 1.0 + policy.JITTER_FACTOR for d in results)
