"""
Failure taxonomy for scenarios.

Every failure a scenario can hit is one of four kinds. All of them carry the
expectation that was being checked, the last observed value and how long the
harness waited, so a report can be read without re-running the scenario.
"""

from typing import Any, Optional


class HarnessError(Exception):
    """Base class for scenario-terminating failures."""

    kind = "harness"

    def __init__(
        self,
        expectation: str,
        actual: Any = None,
        elapsed_ms: Optional[int] = None,
        detail: Optional[str] = None
    ):
        self.expectation = expectation
        self.actual = actual
        self.elapsed_ms = elapsed_ms
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [f"{self.kind}: expected {self.expectation}"]
        if self.actual is not None:
            parts.append(f"last observed {self.actual!r}")
        if self.elapsed_ms is not None:
            parts.append(f"after {self.elapsed_ms}ms")
        message = ", ".join(parts)
        if self.detail:
            message = f"{message} ({self.detail})"
        return message


class ElementResolutionError(HarnessError):
    """A target matched zero or several elements, or is not usable for the action."""

    kind = "element resolution"


class HarnessTimeoutError(HarnessError):
    """An awaited condition did not hold within its bound."""

    kind = "timeout"


class AssertionMismatchError(HarnessError, AssertionError):
    """A condition was observed but its value differs from the expectation."""

    kind = "assertion mismatch"


class FixtureSetupError(HarnessError):
    """Route registration or storage-state priming failed before the scenario ran."""

    kind = "fixture setup"
