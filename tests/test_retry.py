# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: test_retry.py
# -----------------------------------------------------------------------------
import logging

import pytest

from utility.retry import BackoffPolicy, poll_until, retry_async

log = logging.getLogger("test_retry")
NO_WAIT = BackoffPolicy(max_attempts=4, base_delay=0.0, max_delay=0.0)


class Flaky:
    def __init__(self, failures: int, exc_type=ConnectionError):
        self.failures = failures
        self.exc_type = exc_type
        self.calls = 0

    async def __call__(self, value):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc_type(f"failure {self.calls}")
        return value


@pytest.mark.asyncio
async def test_retry_async_recovers_from_transient_failures():
    fn = Flaky(failures=2)
    assert await retry_async(fn, "ok", policy=NO_WAIT, retry_if=lambda e: True, logger=log) == "ok"
    assert fn.calls == 3


@pytest.mark.asyncio
async def test_retry_async_reraises_last_error_when_exhausted():
    fn = Flaky(failures=10)
    with pytest.raises(ConnectionError, match="failure 4"):
        await retry_async(fn, "ok", policy=NO_WAIT, retry_if=lambda e: True, logger=log)
    assert fn.calls == NO_WAIT.max_attempts


@pytest.mark.asyncio
async def test_retry_async_does_not_retry_rejected_errors():
    fn = Flaky(failures=1, exc_type=ValueError)
    with pytest.raises(ValueError):
        await retry_async(
            fn, "ok", policy=NO_WAIT, retry_if=lambda e: not isinstance(e, ValueError), logger=log
        )
    assert fn.calls == 1


@pytest.mark.asyncio
async def test_poll_until_stops_when_done():
    seen = []

    async def counter():
        seen.append(len(seen) + 1)
        return seen[-1]

    assert await poll_until(counter, policy=NO_WAIT, is_done=lambda n: n >= 2, logger=log) == 2
    assert seen == [1, 2]


@pytest.mark.asyncio
async def test_poll_until_returns_last_result_when_never_done():
    calls = []

    async def empty():
        calls.append(1)
        return {}

    assert await poll_until(empty, policy=NO_WAIT, is_done=bool, logger=log) == {}
    assert len(calls) == NO_WAIT.max_attempts


def test_backoff_policy_validation():
    with pytest.raises(ValueError):
        BackoffPolicy(max_attempts=0)
    with pytest.raises(ValueError):
        BackoffPolicy(base_delay=-1)
