"""Tests for the exponential-backoff retry helper."""

import asyncio
import time
from unittest.mock import AsyncMock, patch

import pytest

from newsletter_links.utils.retry import RetryExhausted, RetryOptions, retry

FAST = RetryOptions(max_attempts=3, initial_delay=0.01, max_delay=0.05, backoff_multiplier=2)


def flaky(failures: int, result="ok"):
    calls = []

    async def operation():
        calls.append(1)
        if len(calls) <= failures:
            raise ConnectionError(f"failure {len(calls)}")
        return result

    return operation, calls


class TestRetry:
    def test_returns_first_successful_result(self):
        operation, calls = flaky(0)

        assert asyncio.run(retry(operation, FAST)) == "ok"
        assert len(calls) == 1

    def test_succeeds_on_third_attempt_after_backing_off(self):
        operation, calls = flaky(2)

        start = time.monotonic()
        result = asyncio.run(retry(operation, FAST, "flaky op"))
        elapsed = time.monotonic() - start

        assert result == "ok"
        assert len(calls) == 3
        # 0.01 + 0.02
        assert elapsed >= 0.029

    def test_raises_after_all_attempts_fail(self):
        operation, calls = flaky(10)

        start = time.monotonic()
        with pytest.raises(RetryExhausted) as exc_info:
            asyncio.run(retry(operation, FAST, "delete UID 7"))
        elapsed = time.monotonic() - start

        err = exc_info.value
        assert len(calls) == 3
        assert err.attempts == 3
        assert err.context == "delete UID 7"
        assert "Failed delete UID 7 after 3 attempts" in str(err)
        assert "failure 3" in str(err)
        assert isinstance(err.__cause__, ConnectionError)
        # 0.01 + 0.02, no sleep after the last attempt
        assert elapsed >= 0.029

    def test_delays_grow_and_are_capped(self):
        operation, _ = flaky(10)
        options = RetryOptions(max_attempts=4, initial_delay=1.0, max_delay=3.0, backoff_multiplier=4)

        with patch("newsletter_links.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(RetryExhausted):
                asyncio.run(retry(operation, options))

        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 3.0, 3.0]

    def test_no_sleep_after_last_attempt(self):
        operation, _ = flaky(10)
        options = RetryOptions(max_attempts=1, initial_delay=5.0)

        with patch("newsletter_links.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(RetryExhausted):
                asyncio.run(retry(operation, options))

        sleep.assert_not_awaited()

    def test_rejects_zero_attempts(self):
        operation, calls = flaky(0)

        with pytest.raises(ValueError):
            asyncio.run(retry(operation, RetryOptions(max_attempts=0)))
        assert calls == []
