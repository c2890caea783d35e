"""Tests for the polling assertion engine."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from authflow import dom_contract as dom
from authflow.assertions import Assertions
from authflow.errors import AssertionMismatchError, ElementResolutionError, HarnessTimeoutError

from fakes import FakeElement


@pytest.fixture
def expect(page, fast_config):
    return Assertions(page, fast_config)


def later(delay: float, action):
    """Run ``action`` after ``delay`` seconds while an assertion polls."""
    async def run():
        await asyncio.sleep(delay)
        action()
    return asyncio.ensure_future(run())


def session_cookie(expires: float) -> dict:
    return {
        'name': 'connect.sid',
        'value': 's%3Aabc',
        'domain': 'app.test',
        'path': '/',
        'expires': expires,
        'httpOnly': True,
        'secure': False,
        'sameSite': 'Lax',
    }


class TestExpectUrl:

    @pytest.mark.asyncio
    async def test_relative_path_matches(self, expect, page):
        page.go("/signin")

        await expect.expect_url(dom.SIGNIN_PATH)

    @pytest.mark.asyncio
    async def test_waits_for_url_to_change(self, expect, page):
        page.go("/signin")
        task = later(0.05, lambda: page.go("/"))

        await expect.expect_url(dom.HOME_PATH)
        await task

    @pytest.mark.asyncio
    async def test_mismatch_reports_last_url(self, expect, page):
        page.go("/personal")

        with pytest.raises(AssertionMismatchError) as exc_info:
            await expect.expect_url(dom.SIGNIN_PATH)

        assert exc_info.value.actual == "http://app.test/personal"
        assert exc_info.value.elapsed_ms >= 150
        assert "http://app.test/signin" in exc_info.value.expectation


class TestElementExpectations:

    @pytest.mark.asyncio
    async def test_visible(self, expect, page):
        page.add(dom.ONBOARDING_DIALOG)

        await expect.expect_visible(dom.ONBOARDING_DIALOG)

    @pytest.mark.asyncio
    async def test_visible_waits_for_element_to_appear(self, expect, page):
        task = later(0.05, lambda: page.add(dom.helper_text("username")))

        await expect.expect_visible(dom.helper_text("username"))
        await task

    @pytest.mark.asyncio
    async def test_missing_element_times_out(self, expect):
        with pytest.raises(HarnessTimeoutError) as exc_info:
            await expect.expect_visible(dom.ONBOARDING_DIALOG)

        assert exc_info.value.actual == "no matching element"

    @pytest.mark.asyncio
    async def test_text_of_missing_element_times_out(self, expect):
        with pytest.raises(HarnessTimeoutError) as exc_info:
            await expect.expect_text(dom.SIGNIN_ERROR, dom.SIGNIN_ERROR_TEXT)

        assert not isinstance(exc_info.value, AssertionMismatchError)
        assert exc_info.value.elapsed_ms >= 150

    @pytest.mark.asyncio
    async def test_hidden_element_fails_visibility(self, expect, page):
        page.add(dom.ONBOARDING_DIALOG, FakeElement(visible=False))

        with pytest.raises(AssertionMismatchError):
            await expect.expect_visible(dom.ONBOARDING_DIALOG)

    @pytest.mark.asyncio
    async def test_expect_hidden(self, expect, page):
        page.add(dom.ONBOARDING_DIALOG)
        task = later(0.05, lambda: page.remove(dom.ONBOARDING_DIALOG))

        await expect.expect_hidden(dom.ONBOARDING_DIALOG)
        await task

    @pytest.mark.asyncio
    async def test_text_equality(self, expect, page):
        page.add(dom.SIGNIN_ERROR, FakeElement(text=" Username or password is invalid "))

        await expect.expect_text(dom.SIGNIN_ERROR, dom.SIGNIN_ERROR_TEXT)

    @pytest.mark.asyncio
    async def test_text_mismatch_reports_actual_text(self, expect, page):
        page.add(dom.SIGNIN_ERROR, FakeElement(text="Wrong password"))

        with pytest.raises(AssertionMismatchError) as exc_info:
            await expect.expect_text(dom.SIGNIN_ERROR, dom.SIGNIN_ERROR_TEXT)

        assert exc_info.value.actual == "Wrong password"

    @pytest.mark.asyncio
    async def test_disabled_and_enabled(self, expect, page):
        button = page.add(dom.SIGNUP_SUBMIT, FakeElement(disabled=True))

        await expect.expect_disabled(dom.SIGNUP_SUBMIT)
        with pytest.raises(AssertionMismatchError):
            await expect.expect_enabled(dom.SIGNUP_SUBMIT)

        button.disabled = False
        await expect.expect_enabled(dom.SIGNUP_SUBMIT)

    @pytest.mark.asyncio
    async def test_multiple_matches_are_a_resolution_failure(self, expect, page):
        page.add(dom.SIGNIN_ERROR, FakeElement(text="a"), FakeElement(text="b"))

        with pytest.raises(ElementResolutionError):
            await expect.expect_text(dom.SIGNIN_ERROR, "a")


class TestCookies:

    @pytest.mark.asyncio
    async def test_expect_cookie_returns_matching_cookie(self, expect, page):
        page.context.cookie_jar.append(session_cookie(expires=-1))

        cookie = await expect.expect_cookie("connect.sid")

        assert cookie.name == "connect.sid"
        assert cookie.is_session_only

    @pytest.mark.asyncio
    async def test_expect_cookie_waits_for_cookie(self, expect, page):
        task = later(0.05, lambda: page.context.cookie_jar.append(session_cookie(expires=-1)))

        await expect.expect_cookie("connect.sid")
        await task

    @pytest.mark.asyncio
    async def test_absent_cookie_times_out(self, expect, page):
        with pytest.raises(HarnessTimeoutError) as exc_info:
            await expect.expect_cookie("connect.sid")

        assert exc_info.value.actual == "no such cookie"

    @pytest.mark.asyncio
    async def test_remember_me_cookie_expires_in_thirty_days(self, expect, page):
        login_time = datetime.now(timezone.utc)
        expires = (login_time + timedelta(days=30)).timestamp()
        page.context.cookie_jar.append(session_cookie(expires=expires))

        cookie = await expect.expect_remember_me_cookie(login_time)

        assert cookie.expires == expires

    @pytest.mark.asyncio
    async def test_session_only_cookie_is_not_remembered(self, expect, page):
        page.context.cookie_jar.append(session_cookie(expires=-1))

        with pytest.raises(AssertionMismatchError):
            await expect.expect_remember_me_cookie(datetime.now(timezone.utc))

    @pytest.mark.parametrize("days", [1, 29, 31, 365])
    @pytest.mark.asyncio
    async def test_remember_me_cookie_outside_window_fails(self, expect, page, days):
        login_time = datetime.now(timezone.utc)
        page.context.cookie_jar.append(session_cookie(expires=(login_time + timedelta(days=days)).timestamp()))

        with pytest.raises(AssertionMismatchError):
            await expect.expect_remember_me_cookie(login_time)

    @pytest.mark.asyncio
    async def test_expect_no_cookie(self, expect, page):
        await expect.expect_no_cookie("connect.sid")

        page.context.cookie_jar.append(session_cookie(expires=-1))
        with pytest.raises(AssertionMismatchError):
            await expect.expect_no_cookie("connect.sid")
