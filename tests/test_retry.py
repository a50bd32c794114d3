import asyncio
import inspect

import pytest

from jobsieve.retry import backoff_delay, retry


def test_sync_retry_succeeds_after_failures(no_sleep):
    calls = []

    @retry(max_attempts=3, base_delay=1.0, jitter=False)
    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise ConnectionError("boom")
        return "ok"

    assert flaky() == "ok"
    assert len(calls) == 3
    assert no_sleep == [1.0, 2.0]


def test_async_retry_exhausts_and_reraises(no_sleep):
    calls = []

    @retry(max_attempts=3, base_delay=1.0, jitter=False)
    async def always_fails():
        calls.append(1)
        raise RuntimeError("still broken")

    with pytest.raises(RuntimeError, match="still broken"):
        asyncio.run(always_fails())
    assert len(calls) == 3
    # Delays double and there is no wait after the final attempt.
    assert no_sleep == [1.0, 2.0]


def test_non_retryable_exception_is_not_retried(no_sleep):
    calls = []

    @retry(max_attempts=5, retryable=(ConnectionError,))
    async def bad_input():
        calls.append(1)
        raise ValueError("nope")

    with pytest.raises(ValueError):
        asyncio.run(bad_input())
    assert len(calls) == 1
    assert no_sleep == []


def test_wrapped_function_keeps_its_name():
    @retry()
    async def fetch_page():
        return 1

    assert fetch_page.__name__ == "fetch_page"
    assert inspect.iscoroutinefunction(fetch_page)


def test_backoff_delay_is_capped():
    kwargs = dict(base_delay=1.0, max_delay=5.0, backoff_factor=2.0, jitter=False)
    assert [backoff_delay(n, **kwargs) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_backoff_jitter_stays_within_bounds():
    for _ in range(20):
        delay = backoff_delay(2, base_delay=1.0, max_delay=30.0, backoff_factor=2.0, jitter=True)
        assert 1.0 <= delay <= 3.0


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        retry(max_attempts=0)
