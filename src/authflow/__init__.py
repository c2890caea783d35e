"""
AuthFlow - browser-driven acceptance tests for authentication flows.

Drives a web application through Playwright to verify its sign-in redirect,
login success and failure, remember-me session cookie, sign-up validation,
onboarding and logout behavior.
"""

__version__ = "1.0.0"

from .config import get_config, AuthFlowConfig
from .errors import (
    HarnessError,
    ElementResolutionError,
    HarnessTimeoutError,
    AssertionMismatchError,
    FixtureSetupError,
)
from .models import Target, Credentials, SessionCookie, FixtureConfig, ScenarioResult, SuiteReport
from .action_driver import ActionDriver
from .assertions import Assertions
from .login import login
from .runner import ScenarioRunner, run_catalog
from .scenarios import CATALOG, scenario, list_scenarios

__all__ = [
    "get_config",
    "AuthFlowConfig",
    "HarnessError",
    "ElementResolutionError",
    "HarnessTimeoutError",
    "AssertionMismatchError",
    "FixtureSetupError",
    "Target",
    "Credentials",
    "SessionCookie",
    "FixtureConfig",
    "ScenarioResult",
    "SuiteReport",
    "ActionDriver",
    "Assertions",
    "login",
    "ScenarioRunner",
    "run_catalog",
    "CATALOG",
    "scenario",
    "list_scenarios",
]
