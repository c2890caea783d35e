"""
Pydantic models shared across the harness.

Covers element targets, the data a scenario feeds into the application,
session cookies read back from the browser, the per-scenario fixture
configuration, and the result objects produced by the runner.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class TargetKind(str, Enum):
    """How an element target is located."""
    CSS = "css"
    ROLE = "role"


class Target(BaseModel):
    """
    An element of the application's DOM contract.

    Either a CSS selector, or an ARIA role with an accessible name. A target
    may be scoped inside another target (e.g. the password textbox that sits
    inside the sign-up password wrapper).
    """
    kind: TargetKind = Field(..., description="Locator strategy")
    selector: Optional[str] = Field(None, description="CSS selector (kind=css)")
    role: Optional[str] = Field(None, description="ARIA role (kind=role)")
    name: Optional[str] = Field(None, description="Accessible name (kind=role)")
    exact: bool = Field(default=True, description="Match the accessible name exactly")
    within: Optional["Target"] = Field(None, description="Parent target to scope the lookup")

    model_config = {"frozen": True}

    @model_validator(mode='after')
    def validate_shape(self):
        """Ensure the fields required by the locator strategy are present."""
        if self.kind == TargetKind.CSS:
            if not self.selector or not self.selector.strip():
                raise ValueError("CSS targets need a selector")
        elif not self.role:
            raise ValueError("Role targets need a role")
        return self

    @classmethod
    def css(cls, selector: str, within: Optional["Target"] = None) -> "Target":
        return cls(kind=TargetKind.CSS, selector=selector, within=within)

    @classmethod
    def by_role(cls, role: str, name: Optional[str] = None, within: Optional["Target"] = None,
                exact: bool = True) -> "Target":
        return cls(kind=TargetKind.ROLE, role=role, name=name, within=within, exact=exact)

    @classmethod
    def test_id(cls, value: str) -> "Target":
        """Target an element by its ``data-test`` attribute."""
        return cls.css(f'[data-test="{value}"]')

    def describe(self) -> str:
        if self.kind == TargetKind.CSS:
            own = self.selector
        elif self.name:
            own = f'role={self.role}[name="{self.name}"]'
        else:
            own = f"role={self.role}"
        if self.within is not None:
            return f"{self.within.describe()} >> {own}"
        return own

    def __str__(self) -> str:
        return self.describe()


class Credentials(BaseModel):
    """Username/password pair supplied to the login helper."""
    username: str
    password: str


class SignupIdentity(BaseModel):
    """Data entered on the registration form."""
    first_name: str
    last_name: str
    username: str
    password: str

    @property
    def credentials(self) -> Credentials:
        return Credentials(username=self.username, password=self.password)

    def with_unique_username(self, suffix: str) -> "SignupIdentity":
        """Copy of this identity whose username carries a per-run suffix."""
        return self.model_copy(update={'username': f"{self.username}{suffix}"})


class BankAccount(BaseModel):
    """Bank account entered during onboarding."""
    bank_name: str
    routing_number: str
    account_number: str


class SessionCookie(BaseModel):
    """A cookie read back from the browser context."""
    name: str
    value: str = ""
    domain: str = ""
    path: str = "/"
    expires: Optional[float] = Field(
        default=None,
        description="Epoch seconds; None for a session-only cookie"
    )
    http_only: bool = Field(default=False, alias="httpOnly")
    secure: bool = False
    same_site: Optional[str] = Field(default=None, alias="sameSite")

    model_config = {"populate_by_name": True}

    @field_validator('expires', mode='before')
    @classmethod
    def normalize_expires(cls, v: Any) -> Optional[float]:
        """Playwright reports session cookies with expires == -1."""
        if v is None:
            return None
        v = float(v)
        return None if v < 0 else v

    @property
    def is_session_only(self) -> bool:
        return self.expires is None

    @property
    def expires_at(self) -> Optional[datetime]:
        if self.expires is None:
            return None
        return datetime.fromtimestamp(self.expires, tz=timezone.utc)


class FixtureConfig(BaseModel):
    """
    Explicit per-scenario fixture configuration.

    Built once from the harness configuration and handed to the runner for
    every scenario, so what each scenario starts from is visible in one place.
    """
    storage_state_path: Path = Field(..., description="Baseline storage-state file (read-only)")
    intercept_patterns: List[str] = Field(
        default_factory=lambda: ["**/users", "**/graphql"],
        description="URL glob patterns to route through pass-through handlers"
    )
    record_requests: bool = Field(default=True, description="Record intercepted requests")

    model_config = {"frozen": True}

    @classmethod
    def from_config(cls, config) -> "FixtureConfig":
        return cls(
            storage_state_path=config.storage_state_path,
            intercept_patterns=list(config.intercept_patterns),
            record_requests=config.record_requests,
        )


class InterceptedRequest(BaseModel):
    """One request seen by the interception fixture."""
    method: str
    url: str
    pattern: str


class PollResult(BaseModel):
    """Outcome of a poll-with-timeout wait."""
    ok: bool
    description: str
    value: Any = None
    elapsed_ms: int = 0
    attempts: int = 0
    error: Optional[str] = Field(None, description="Last exception raised by the probe")

    def raise_for_timeout(self):
        """Raise HarnessTimeoutError when the condition never held."""
        if not self.ok:
            from .errors import HarnessTimeoutError
            raise HarnessTimeoutError(
                self.description,
                actual=self.value if self.error is None else self.error,
                elapsed_ms=self.elapsed_ms
            )
        return self


class ScenarioResult(BaseModel):
    """Result of running one scenario."""
    name: str
    success: bool
    error: Optional[str] = None
    error_type: Optional[str] = None
    elapsed_ms: int = 0
    screenshot: Optional[str] = Field(None, description="Failure screenshot path")
    intercepted: List[InterceptedRequest] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SuiteReport(BaseModel):
    """Aggregated results of a suite run."""
    results: List[ScenarioResult] = Field(default_factory=list)

    @property
    def passed(self) -> List[ScenarioResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[ScenarioResult]:
        return [r for r in self.results if not r.success]

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def summary(self) -> str:
        lines = []
        for result in self.results:
            status = "PASS" if result.success else "FAIL"
            line = f"{status}  {result.name} ({result.elapsed_ms}ms)"
            if result.error:
                line += f"\n      {result.error_type}: {result.error}"
            lines.append(line)
        lines.append(f"{len(self.passed)} passed, {len(self.failed)} failed")
        return "\n".join(lines)
