"""
Poll-with-timeout primitive.

UI state changes asynchronously relative to driver actions, so nothing in the
harness checks the page once. Instead a probe is re-evaluated at a fixed
interval until a predicate holds or the time budget runs out. The outcome is
returned as a PollResult rather than raised, so callers decide which failure
kind a miss represents.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from .models import PollResult

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[Any]]
Predicate = Callable[[Any], bool]


def _truthy(value: Any) -> bool:
    return bool(value)


async def poll_until(
    probe: Probe,
    predicate: Optional[Predicate] = None,
    *,
    timeout_ms: int,
    interval_ms: int = 100,
    description: str = "condition"
) -> PollResult:
    """
    Re-run ``probe`` until ``predicate(value)`` holds or ``timeout_ms`` elapses.

    The probe always runs at least once. Exceptions raised by the probe are
    treated as "not yet" and remembered as the last observation.

    Args:
        probe: Coroutine function returning the observed value
        predicate: Test applied to each observation (defaults to truthiness)
        timeout_ms: Time budget in milliseconds
        interval_ms: Delay between two probes in milliseconds
        description: Human-readable expectation, used in failures

    Returns:
        PollResult with ok=True and the matching value, or ok=False and the
        last observed value
    """
    if predicate is None:
        predicate = _truthy

    loop = asyncio.get_running_loop()
    start = loop.time()
    deadline = start + timeout_ms / 1000
    attempts = 0
    value: Any = None
    last_error: Optional[str] = None

    while True:
        attempts += 1
        # A single probe may not outlive the budget
        probe_budget = max(deadline - loop.time(), interval_ms / 1000)
        try:
            value = await asyncio.wait_for(probe(), timeout=probe_budget)
            last_error = None
            if predicate(value):
                elapsed_ms = int((loop.time() - start) * 1000)
                logger.debug(f"    {description}: held after {attempts} attempt(s), {elapsed_ms}ms")
                return PollResult(
                    ok=True,
                    description=description,
                    value=value,
                    elapsed_ms=elapsed_ms,
                    attempts=attempts
                )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            last_error = f"{type(e).__name__}: {e}"

        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        await asyncio.sleep(min(interval_ms / 1000, remaining))

    elapsed_ms = int((loop.time() - start) * 1000)
    logger.debug(f"    {description}: not met after {attempts} attempt(s), {elapsed_ms}ms")
    return PollResult(
        ok=False,
        description=description,
        value=value,
        elapsed_ms=elapsed_ms,
        attempts=attempts,
        error=last_error
    )


def elapsed_since(start: float) -> int:
    """Milliseconds elapsed since a ``time.monotonic()`` reading."""
    return int((time.monotonic() - start) * 1000)
