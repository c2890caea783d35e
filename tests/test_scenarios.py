"""
Scenario catalog tests.

Registry behavior, plus every catalog scenario executed against the
scripted FakeAuthApp.
"""

import pytest

from authflow import dom_contract as dom
from authflow.action_driver import ActionDriver
from authflow.assertions import Assertions
from authflow.errors import AssertionMismatchError
from authflow.interception import InterceptionFixture
from authflow.models import FixtureConfig
from authflow.scenarios import (
    CATALOG,
    ScenarioContext,
    get_scenario,
    list_scenarios,
    scenario,
)

from fakes import FakeAuthApp, FakePage

REQUIRED_SCENARIOS = [
    "unauthenticated_redirect",
    "login_success",
    "remember_me_persistence",
    "signup_login_logout",
    "login_field_validation",
    "signup_field_validation",
    "invalid_username",
    "invalid_password",
]


@pytest.fixture
def app_page():
    page = FakePage()
    page.app = FakeAuthApp(page)
    return page


def make_context(page, config) -> ScenarioContext:
    driver = ActionDriver(page, config)
    return ScenarioContext(
        page=page,
        context=page.context,
        config=config,
        driver=driver,
        expect=Assertions(page, config, driver),
        fixture=InterceptionFixture(FixtureConfig.from_config(config)),
    )


class TestRegistry:

    def test_catalog_contains_required_scenarios(self):
        for name in REQUIRED_SCENARIOS:
            assert name in CATALOG, f"Scenario {name} missing from catalog"

    def test_scenarios_have_descriptions_and_tags(self):
        for s in CATALOG.values():
            assert s.description
            assert s.tags

    def test_duplicate_registration_is_rejected(self):
        with pytest.raises(ValueError):
            @scenario("login_success", "again")
            async def duplicate(ctx):
                pass

    def test_unknown_scenario_lists_known_names(self):
        with pytest.raises(KeyError) as exc_info:
            get_scenario("does_not_exist")
        assert "login_success" in str(exc_info.value)

    def test_list_scenarios_by_name_keeps_requested_order(self):
        selected = list_scenarios(names=["invalid_password", "login_success"])
        assert [s.name for s in selected] == ["invalid_password", "login_success"]

    def test_list_scenarios_by_tag(self):
        selected = list_scenarios(tags=["validation"])

        assert selected
        assert all("validation" in s.tags for s in selected)
        assert "login_field_validation" in [s.name for s in selected]
        assert "login_success" not in [s.name for s in selected]


@pytest.mark.parametrize("name", sorted(CATALOG))
@pytest.mark.asyncio
async def test_scenario_passes_against_conforming_app(name, app_page, fast_config):
    await get_scenario(name).body(make_context(app_page, fast_config))


@pytest.mark.asyncio
async def test_signup_flow_leaves_no_usable_session(app_page, fast_config):
    await get_scenario("signup_login_logout").body(make_context(app_page, fast_config))

    assert app_page.app.current_user is None
    assert "PainterJoy90" in app_page.app.onboarded
    assert app_page.url == "http://app.test/signin"


@pytest.mark.asyncio
async def test_unique_signup_username(app_page, fast_config):
    config = fast_config.model_copy(update={'unique_signup': True})

    await get_scenario("signup_login_logout").body(make_context(app_page, config))

    registered = [u for u in app_page.app.users if u.startswith("PainterJoy90")]
    assert len(registered) == 1
    assert registered[0] != "PainterJoy90"


@pytest.mark.asyncio
async def test_login_success_detects_missing_redirect(app_page, fast_config):
    """An application that stays on sign-in after valid credentials fails the scenario."""
    app_page.app.users["Heath93"] = "something-else"

    with pytest.raises(AssertionMismatchError):
        await get_scenario("login_success").body(make_context(app_page, fast_config))


@pytest.mark.asyncio
async def test_remember_me_detects_unexpected_lifetime(app_page, fast_config):
    """The application issues a 30 day cookie; a 7 day expectation must fail."""
    config = fast_config.model_copy(update={'remember_me_days': 7})

    with pytest.raises(AssertionMismatchError) as exc_info:
        await get_scenario("remember_me_persistence").body(make_context(app_page, config))
    assert "7 days" in exc_info.value.expectation


@pytest.mark.asyncio
async def test_invalid_login_errors_are_identical(app_page, fast_config):
    """Unknown user and wrong password surface the same text."""
    for name in ("invalid_username", "invalid_password"):
        await get_scenario(name).body(make_context(app_page, fast_config))
        assert app_page.elements[str(dom.SIGNIN_ERROR)][0].text == dom.SIGNIN_ERROR_TEXT


@pytest.mark.asyncio
async def test_signup_toggle_catches_field_ignored_by_validation(app_page, fast_config):
    """Submit that stays enabled with an empty last name fails the toggle scenario."""
    check_fields = app_page.app._signup_errors

    def ignore_last_name():
        errors = check_fields()
        errors["lastName"] = False
        return errors

    app_page.app._signup_errors = ignore_last_name

    with pytest.raises(AssertionMismatchError) as exc_info:
        await get_scenario("signup_submit_toggle").body(make_context(app_page, fast_config))
    assert "to be disabled" in exc_info.value.expectation


def test_signup_toggle_is_a_validation_scenario():
    assert "signup_submit_toggle" in [s.name for s in list_scenarios(tags=["signup", "validation"])]
