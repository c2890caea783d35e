"""
Scenario catalog.

Each scenario is an independent user journey: it receives a fresh browser
context through ScenarioContext, drives it with the ActionDriver and checks
the outcome with Assertions. Scenarios share no mutable state; the only
module-level data are the literal credentials and identities below.

Register new scenarios with the ``@scenario`` decorator.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple
import logging
import uuid

from playwright.async_api import BrowserContext, Page

from . import dom_contract as dom
from .action_driver import ActionDriver
from .assertions import Assertions
from .config import AuthFlowConfig
from .interception import InterceptionFixture
from .login import login, login_with
from .models import BankAccount, Credentials, SignupIdentity

logger = logging.getLogger(__name__)


# ============================================================================
# SCENARIO DATA - seeded users of the application under test
# ============================================================================

VALID_USER = Credentials(username="Heath93", password="s3cret")
EXISTING_USER_WRONG_PASSWORD = Credentials(username="testuser", password="INVALID")
UNKNOWN_USER = Credentials(username="invalidUserName", password="invalidPa$$word")

NEW_IDENTITY = SignupIdentity(
    first_name="Bob",
    last_name="Ross",
    username="PainterJoy90",
    password="s3cret",
)

ONBOARDING_BANK_ACCOUNT = BankAccount(
    bank_name="test1",
    routing_number="12345771r",
    account_number="5432107777",
)


# ============================================================================
# REGISTRY
# ============================================================================

@dataclass
class ScenarioContext:
    """Everything a scenario body may touch; built fresh for every run."""
    page: Page
    context: BrowserContext
    config: AuthFlowConfig
    driver: ActionDriver
    expect: Assertions
    fixture: InterceptionFixture


ScenarioBody = Callable[[ScenarioContext], Awaitable[None]]


@dataclass(frozen=True)
class Scenario:
    """A named, independent test case."""
    name: str
    description: str
    body: ScenarioBody = field(repr=False)
    tags: Tuple[str, ...] = ()


CATALOG: Dict[str, Scenario] = {}


def scenario(name: str, description: str, tags: Iterable[str] = ()):
    """
    Register a coroutine function as a scenario.

    Args:
        name: Unique scenario name
        description: One-line description shown by ``authflow list``
        tags: Labels used to select subsets of the catalog
    """
    def register(body: ScenarioBody) -> ScenarioBody:
        if name in CATALOG:
            raise ValueError(f"Scenario '{name}' is already registered")
        CATALOG[name] = Scenario(name=name, description=description, body=body, tags=tuple(tags))
        return body

    return register


def get_scenario(name: str) -> Scenario:
    """
    Look up a scenario by name.

    Raises:
        KeyError: If no scenario has that name
    """
    try:
        return CATALOG[name]
    except KeyError:
        raise KeyError(f"Unknown scenario '{name}'. Known scenarios: {', '.join(sorted(CATALOG))}") from None


def list_scenarios(names: Optional[Iterable[str]] = None, tags: Optional[Iterable[str]] = None) -> List[Scenario]:
    """
    Select scenarios from the catalog, in registration order.

    Args:
        names: Only these scenarios (unknown names raise KeyError)
        tags: Only scenarios carrying at least one of these tags
    """
    if names:
        selected = [get_scenario(n) for n in names]
    else:
        selected = list(CATALOG.values())

    if tags:
        wanted = set(tags)
        selected = [s for s in selected if wanted.intersection(s.tags)]

    return selected


# ============================================================================
# SCENARIOS
# ============================================================================

@scenario(
    "unauthenticated_redirect",
    "Visiting a protected page without a session redirects to sign-in",
    tags=("signin", "smoke"),
)
async def unauthenticated_redirect(ctx: ScenarioContext):
    await ctx.driver.navigate(dom.PROTECTED_PATH)
    await ctx.expect.expect_url(dom.SIGNIN_PATH)


@scenario(
    "login_success",
    "Valid credentials with remember-me land on the home page",
    tags=("signin", "smoke"),
)
async def login_success(ctx: ScenarioContext):
    await login_with(ctx.driver, VALID_USER, remember=True)
    await ctx.expect.expect_url(dom.HOME_PATH)


@scenario(
    "remember_me_persistence",
    "Remember-me issues a session cookie expiring in about 30 days; sign-out returns to sign-in",
    tags=("signin", "session"),
)
async def remember_me_persistence(ctx: ScenarioContext):
    login_time = datetime.now(timezone.utc)
    await login_with(ctx.driver, VALID_USER, remember=True)
    await ctx.expect.expect_url(dom.HOME_PATH)

    await ctx.driver.navigate(dom.HOME_PATH)
    await ctx.driver.wait_for_load_signal("domcontentloaded")

    cookie = await ctx.expect.expect_remember_me_cookie(login_time)
    logger.info(f"   Session cookie {cookie.name} expires {cookie.expires_at.isoformat()}")

    await ctx.driver.click(dom.SIDENAV_SIGNOUT)
    await ctx.expect.expect_url(dom.SIGNIN_PATH)


@scenario(
    "signup_login_logout",
    "A visitor signs up, logs in, completes onboarding and signs out",
    tags=("signup", "onboarding", "session"),
)
async def signup_login_logout(ctx: ScenarioContext):
    identity = NEW_IDENTITY
    if ctx.config.unique_signup:
        identity = identity.with_unique_username(uuid.uuid4().hex[:6])
    logger.info(f"   Signing up as {identity.username}")

    await ctx.driver.navigate(dom.HOME_PATH)
    await ctx.driver.click(dom.SIGNUP_LINK)
    await ctx.driver.wait_for_load_signal("domcontentloaded")
    await ctx.expect.expect_url(dom.SIGNUP_PATH)

    await ctx.driver.fill_field(dom.SIGNUP_FIRST_NAME, identity.first_name)
    await ctx.driver.fill_field(dom.SIGNUP_LAST_NAME, identity.last_name)
    await ctx.driver.fill_field(dom.SIGNUP_USERNAME, identity.username)
    await ctx.driver.fill_field(dom.SIGNUP_PASSWORD, identity.password)
    await ctx.driver.fill_field(dom.SIGNUP_CONFIRM_PASSWORD, identity.password)
    await ctx.driver.submit(dom.SIGNUP_SUBMIT)
    # Registration must complete before the login helper navigates away
    await ctx.expect.expect_url(dom.SIGNIN_PATH)

    await login_with(ctx.driver, identity.credentials)

    await ctx.expect.expect_visible(dom.ONBOARDING_DIALOG)
    await ctx.driver.click(dom.ONBOARDING_NEXT)

    bank = ONBOARDING_BANK_ACCOUNT
    await ctx.driver.fill_field(dom.BANK_NAME, bank.bank_name)
    await ctx.driver.fill_field(dom.BANK_ROUTING_NUMBER, bank.routing_number)
    await ctx.driver.fill_field(dom.BANK_ACCOUNT_NUMBER, bank.account_number)
    await ctx.driver.click(dom.BANK_SUBMIT)

    await ctx.driver.click(dom.ONBOARDING_NEXT)
    await ctx.expect.expect_hidden(dom.ONBOARDING_DIALOG)

    await ctx.driver.click(dom.SIDENAV_SIGNOUT)
    await ctx.expect.expect_url(dom.SIGNIN_PATH)

    # The signed-out session must not grant access any more
    await ctx.driver.navigate(dom.PROTECTED_PATH)
    await ctx.expect.expect_url(dom.SIGNIN_PATH)


@scenario(
    "login_field_validation",
    "Touched sign-in fields show helper text and keep submit disabled",
    tags=("signin", "validation"),
)
async def login_field_validation(ctx: ScenarioContext):
    await ctx.driver.navigate(dom.HOME_PATH)

    await ctx.driver.focus_then_blur(dom.SIGNIN_USERNAME_TEXTBOX)
    await ctx.expect.expect_visible(dom.helper_text("username"))

    await ctx.driver.fill_field(dom.SIGNIN_PASSWORD_TEXTBOX, "abc")
    await ctx.driver.blur(dom.SIGNIN_PASSWORD_TEXTBOX)
    await ctx.expect.expect_visible(dom.helper_text("password"))

    await ctx.expect.expect_disabled(dom.SIGNIN_SUBMIT_BUTTON)


@scenario(
    "signup_field_validation",
    "Touched sign-up fields and mismatched passwords show helper text and keep submit disabled",
    tags=("signup", "validation"),
)
async def signup_field_validation(ctx: ScenarioContext):
    await ctx.driver.navigate(dom.SIGNUP_PATH)

    for field_name in ("firstName", "lastName", "username"):
        await ctx.driver.focus_then_blur(dom.SIGNUP_FIELDS[field_name])
        await ctx.expect.expect_visible(dom.helper_text(field_name))

    await ctx.driver.fill_field(dom.SIGNUP_PASSWORD, "abc")
    await ctx.expect.expect_visible(dom.helper_text("password"))

    await ctx.driver.fill_field(dom.SIGNUP_CONFIRM_PASSWORD, "DIFFERENT PASSWOR")
    await ctx.expect.expect_visible(dom.helper_text("confirmPassword"))

    await ctx.expect.expect_disabled(dom.SIGNUP_SUBMIT)


@scenario(
    "invalid_username",
    "An unknown username shows the generic sign-in error",
    tags=("signin", "errors"),
)
async def invalid_username(ctx: ScenarioContext):
    await login_with(ctx.driver, UNKNOWN_USER)
    await ctx.expect.expect_text(dom.SIGNIN_ERROR, dom.SIGNIN_ERROR_TEXT)


@scenario(
    "invalid_password",
    "A wrong password for an existing user shows the same generic sign-in error",
    tags=("signin", "errors"),
)
async def invalid_password(ctx: ScenarioContext):
    await login(ctx.driver, EXISTING_USER_WRONG_PASSWORD.username, EXISTING_USER_WRONG_PASSWORD.password)
    await ctx.expect.expect_text(dom.SIGNIN_ERROR, dom.SIGNIN_ERROR_TEXT)


@scenario(
    "signin_submit_toggle",
    "Sign-in submit is enabled only while every field is valid",
    tags=("signin", "validation"),
)
async def signin_submit_toggle(ctx: ScenarioContext):
    await ctx.driver.navigate(dom.SIGNIN_PATH)
    await ctx.expect.expect_disabled(dom.SIGNIN_SUBMIT_BUTTON)

    await ctx.driver.fill_field(dom.SIGNIN_USERNAME, VALID_USER.username)
    await ctx.expect.expect_disabled(dom.SIGNIN_SUBMIT_BUTTON)

    await ctx.driver.fill_field(dom.SIGNIN_PASSWORD, VALID_USER.password)
    await ctx.expect.expect_enabled(dom.SIGNIN_SUBMIT_BUTTON)

    # One field at a time back to invalid and valid again
    await ctx.driver.fill_field(dom.SIGNIN_PASSWORD, "abc")
    await ctx.expect.expect_disabled(dom.SIGNIN_SUBMIT_BUTTON)
    await ctx.driver.fill_field(dom.SIGNIN_PASSWORD, VALID_USER.password)
    await ctx.expect.expect_enabled(dom.SIGNIN_SUBMIT_BUTTON)

    await ctx.driver.fill_field(dom.SIGNIN_USERNAME, "")
    await ctx.expect.expect_disabled(dom.SIGNIN_SUBMIT_BUTTON)
    await ctx.driver.fill_field(dom.SIGNIN_USERNAME, VALID_USER.username)
    await ctx.expect.expect_enabled(dom.SIGNIN_SUBMIT_BUTTON)


@scenario(
    "signup_password_mismatch",
    "Distinct password and confirmation keep sign-up disabled until they match",
    tags=("signup", "validation"),
)
async def signup_password_mismatch(ctx: ScenarioContext):
    identity = NEW_IDENTITY
    await ctx.driver.navigate(dom.SIGNUP_PATH)

    await ctx.driver.fill_field(dom.SIGNUP_FIRST_NAME, identity.first_name)
    await ctx.driver.fill_field(dom.SIGNUP_LAST_NAME, identity.last_name)
    await ctx.driver.fill_field(dom.SIGNUP_USERNAME, identity.username)
    await ctx.driver.fill_field(dom.SIGNUP_PASSWORD, identity.password)
    await ctx.driver.fill_field(dom.SIGNUP_CONFIRM_PASSWORD, identity.password + "x")

    await ctx.expect.expect_visible(dom.helper_text("confirmPassword"))
    await ctx.expect.expect_disabled(dom.SIGNUP_SUBMIT)

    await ctx.driver.fill_field(dom.SIGNUP_CONFIRM_PASSWORD, identity.password)
    await ctx.expect.expect_hidden(dom.helper_text("confirmPassword"))
    await ctx.expect.expect_enabled(dom.SIGNUP_SUBMIT)


@scenario(
    "signup_submit_toggle",
    "Sign-up submit is enabled only while every field is valid",
    tags=("signup", "validation"),
)
async def signup_submit_toggle(ctx: ScenarioContext):
    identity = NEW_IDENTITY
    valid = {
        "firstName": identity.first_name,
        "lastName": identity.last_name,
        "username": identity.username,
        "password": identity.password,
        "confirmPassword": identity.password,
    }
    invalid = {"password": "abc", "confirmPassword": identity.password + "x"}

    await ctx.driver.navigate(dom.SIGNUP_PATH)
    await ctx.expect.expect_disabled(dom.SIGNUP_SUBMIT)

    for field_name, value in valid.items():
        await ctx.driver.fill_field(dom.SIGNUP_FIELDS[field_name], value)
    await ctx.expect.expect_enabled(dom.SIGNUP_SUBMIT)

    # Empty required fields and a short or mismatched password each disable submit
    for field_name, target in dom.SIGNUP_FIELDS.items():
        await ctx.driver.fill_field(target, invalid.get(field_name, ""))
        await ctx.expect.expect_disabled(dom.SIGNUP_SUBMIT)
        await ctx.driver.fill_field(target, valid[field_name])
        await ctx.expect.expect_enabled(dom.SIGNUP_SUBMIT)
