"""Tests for the poll-with-timeout primitive."""

import pytest

from authflow.errors import HarnessTimeoutError
from authflow.polling import poll_until


class Counter:
    """Probe that returns 1, 2, 3, ... on successive calls."""

    def __init__(self, fail_until: int = 0):
        self.calls = 0
        self.fail_until = fail_until

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.fail_until:
            raise RuntimeError(f"not ready ({self.calls})")
        return self.calls


@pytest.mark.asyncio
async def test_poll_returns_immediately_when_condition_holds():
    probe = Counter()

    result = await poll_until(probe, lambda v: v >= 1, timeout_ms=1000, interval_ms=10)

    assert result.ok is True
    assert result.value == 1
    assert result.attempts == 1
    assert probe.calls == 1


@pytest.mark.asyncio
async def test_poll_retries_until_condition_holds():
    probe = Counter()

    result = await poll_until(probe, lambda v: v >= 3, timeout_ms=1000, interval_ms=5)

    assert result.ok is True
    assert result.value == 3
    assert result.attempts == 3


@pytest.mark.asyncio
async def test_poll_times_out_with_last_observed_value():
    probe = Counter()

    result = await poll_until(
        probe, lambda v: v > 10_000, timeout_ms=50, interval_ms=10, description="counter to explode"
    )

    assert result.ok is False
    assert result.value == probe.calls
    assert result.elapsed_ms >= 40
    assert result.description == "counter to explode"

    with pytest.raises(HarnessTimeoutError) as exc_info:
        result.raise_for_timeout()
    assert "counter to explode" in str(exc_info.value)
    assert exc_info.value.actual == probe.calls


@pytest.mark.asyncio
async def test_probe_exceptions_count_as_not_yet():
    probe = Counter(fail_until=2)

    result = await poll_until(probe, lambda v: v >= 3, timeout_ms=1000, interval_ms=5)

    assert result.ok is True
    assert result.value == 3
    assert result.error is None


@pytest.mark.asyncio
async def test_persistent_probe_exception_is_reported():
    probe = Counter(fail_until=10_000)

    result = await poll_until(probe, timeout_ms=30, interval_ms=10)

    assert result.ok is False
    assert "RuntimeError" in result.error


@pytest.mark.asyncio
async def test_zero_timeout_still_probes_once():
    probe = Counter()

    result = await poll_until(probe, lambda v: v == 1, timeout_ms=0, interval_ms=10)

    assert result.ok is True
    assert probe.calls == 1


@pytest.mark.asyncio
async def test_default_predicate_is_truthiness():
    values = iter([None, [], ["cookie"]])

    async def probe():
        return next(values)

    result = await poll_until(probe, timeout_ms=1000, interval_ms=5)

    assert result.ok is True
    assert result.value == ["cookie"]
