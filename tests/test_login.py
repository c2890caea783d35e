"""Tests for the login helper."""

import pytest

from authflow import dom_contract as dom
from authflow.action_driver import ActionDriver
from authflow.login import login, login_with
from authflow.models import Credentials


@pytest.fixture
def signin_page(page):
    page.add(dom.SIGNIN_USERNAME)
    page.add(dom.SIGNIN_PASSWORD)
    page.add(dom.SIGNIN_REMEMBER)
    page.add(dom.SIGNIN_SUBMIT)
    return page


@pytest.mark.asyncio
async def test_login_fills_form_and_submits(signin_page, fast_config):
    await login(ActionDriver(signin_page, fast_config), "Heath93", "s3cret")

    assert signin_page.visited == ["http://app.test/signin"]
    assert signin_page.elements[str(dom.SIGNIN_USERNAME)][0].value == "Heath93"
    assert signin_page.elements[str(dom.SIGNIN_PASSWORD)][0].value == "s3cret"
    assert signin_page.elements[str(dom.SIGNIN_SUBMIT)][0].clicks == 1


@pytest.mark.asyncio
async def test_login_leaves_remember_me_unchecked_by_default(signin_page, fast_config):
    await login(ActionDriver(signin_page, fast_config), "Heath93", "s3cret")

    assert signin_page.elements[str(dom.SIGNIN_REMEMBER)][0].checked is False


@pytest.mark.asyncio
async def test_login_with_remember_me(signin_page, fast_config):
    await login_with(ActionDriver(signin_page, fast_config), Credentials(username="Heath93", password="s3cret"),
                     remember=True)

    assert signin_page.elements[str(dom.SIGNIN_REMEMBER)][0].checked is True


@pytest.mark.asyncio
async def test_login_makes_no_assertions(signin_page, fast_config):
    """The helper returns right after submit, whatever page the app shows."""
    signin_page.elements[str(dom.SIGNIN_SUBMIT)][0].on_click = lambda: signin_page.go("/personal")

    await login(ActionDriver(signin_page, fast_config), "nobody", "nothing")

    assert signin_page.url == "http://app.test/personal"
