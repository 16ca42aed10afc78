"""Tests for app/core/retry.py - Retry utilities."""

import pytest
from hypothesis import given
from hypothesis import settings as hypothesis_settings
from hypothesis import strategies as st

from app.core.retry import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BASE_DELAY,
    _calculate_delay,
    with_retry,
)


class TestCalculateDelay:
    """Unit tests for _calculate_delay function."""

    def test_first_attempt_uses_base_delay(self):
        assert _calculate_delay(0, base_delay=0.2) == 0.2

    def test_second_attempt_doubles_delay(self):
        assert _calculate_delay(1, base_delay=0.2) == 0.4

    def test_uses_default_base_delay(self):
        assert _calculate_delay(0) == DEFAULT_BASE_DELAY

    @hypothesis_settings(max_examples=50)
    @given(
        attempt=st.integers(min_value=0, max_value=10),
        base_delay=st.floats(min_value=0.01, max_value=1.0),
    )
    def test_exponential_backoff_property(self, attempt, base_delay):
        """Property: delay = base_delay * 2^attempt."""
        delay = _calculate_delay(attempt, base_delay)
        expected = base_delay * (2**attempt)
        assert abs(delay - expected) < 1e-9


class TestWithRetry:
    """Unit tests for with_retry."""

    def test_returns_result_on_first_success(self):
        sleeps: list[float] = []

        result = with_retry(lambda: "success", sleep=sleeps.append)

        assert result == "success"
        assert sleeps == []

    def test_retries_on_failure_then_succeeds(self):
        call_count = 0
        sleeps: list[float] = []

        def fail_then_succeed():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise PermissionError("file locked")
            return "success"

        result = with_retry(
            fail_then_succeed,
            attempts=3,
            exceptions=(PermissionError,),
            base_delay=0.01,
            sleep=sleeps.append,
        )

        assert result == "success"
        assert call_count == 2
        assert sleeps == [0.01]

    def test_raises_after_all_attempts_exhausted(self):
        call_count = 0
        sleeps: list[float] = []

        def always_fail():
            nonlocal call_count
            call_count += 1
            raise ValueError(f"error {call_count}")

        with pytest.raises(ValueError, match="error 3"):
            with_retry(
                always_fail,
                attempts=3,
                exceptions=(ValueError,),
                base_delay=0.01,
                sleep=sleeps.append,
            )

        assert call_count == 3
        # No sleep after the final attempt
        assert sleeps == [0.01, 0.02]

    def test_does_not_catch_unspecified_exceptions(self):
        call_count = 0

        def raise_file_not_found():
            nonlocal call_count
            call_count += 1
            raise FileNotFoundError("gone")

        with pytest.raises(FileNotFoundError):
            with_retry(
                raise_file_not_found,
                exceptions=(PermissionError,),
                sleep=lambda _: None,
            )

        assert call_count == 1

    def test_uses_default_attempts(self):
        call_count = 0

        def always_fail():
            nonlocal call_count
            call_count += 1
            raise ValueError("error")

        with pytest.raises(ValueError):
            with_retry(always_fail, exceptions=(ValueError,), sleep=lambda _: None)

        assert call_count == DEFAULT_ATTEMPTS
