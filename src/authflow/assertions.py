"""
Assertion engine: declarative expectations evaluated against page state.

Each expectation polls the page at config.poll_interval for up to
config.assertion_timeout. It passes silently, or raises a failure carrying
the expectation, the last observed value and the time spent waiting:

- HarnessTimeoutError when the subject (element, cookie) never appeared
- AssertionMismatchError when it was observed with a different value
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
import logging

from playwright.async_api import Page

from .action_driver import ActionDriver
from .config import AuthFlowConfig
from .errors import AssertionMismatchError, ElementResolutionError
from .logging_config import log_action
from .models import SessionCookie, Target
from .polling import poll_until

logger = logging.getLogger(__name__)

CookiePredicate = Callable[[SessionCookie], bool]


class Assertions:
    """Polling expectations bound to one scenario's page."""

    def __init__(self, page: Page, config: AuthFlowConfig, driver: Optional[ActionDriver] = None):
        """
        Initialize the assertion engine.

        Args:
            page: Playwright page owned by the current scenario
            config: AuthFlowConfig with base URL, assertion timeout and poll interval
            driver: ActionDriver used to build locators (created if omitted)
        """
        self.page = page
        self.config = config
        self.driver = driver or ActionDriver(page, config)

    async def _poll(self, probe, predicate, description: str, timeout_ms: Optional[int] = None):
        return await poll_until(
            probe,
            predicate,
            timeout_ms=timeout_ms if timeout_ms is not None else self.config.assertion_timeout,
            interval_ms=self.config.poll_interval,
            description=description
        )

    def _fail(self, action: str, result) -> None:
        """Raise for an observed value that differs from the expectation."""
        log_action(action, f"{result.description}; last observed {result.value!r}", success=False, logger=logger)
        raise AssertionMismatchError(
            result.description,
            actual=result.value if result.error is None else result.error,
            elapsed_ms=result.elapsed_ms
        )

    def _timeout(self, action: str, result) -> None:
        """Raise for a condition whose subject never showed up within the bound."""
        log_action(action, f"{result.description}; nothing observed after {result.elapsed_ms}ms",
                   success=False, logger=logger)
        result.raise_for_timeout()

    # ------------------------------------------------------------------
    # URL
    # ------------------------------------------------------------------

    async def expect_url(self, expected: str, timeout_ms: Optional[int] = None):
        """
        Expect the current page URL to equal a path or absolute URL.

        Relative paths are resolved against the configured base URL.
        """
        expected_url = self.config.url_for(expected)

        async def current_url():
            return self.page.url

        result = await self._poll(
            current_url,
            lambda url: url == expected_url,
            f"URL to be {expected_url}",
            timeout_ms
        )
        if not result.ok:
            self._fail("expect_url", result)
        log_action("expect_url", expected_url, logger=logger)

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    async def _element_state(self, target: Target, state: str, predicate, description: str,
                             timeout_ms: Optional[int]):
        """
        Poll one property of a single element.

        The probe counts matches first: a count above one is an element
        resolution failure, a count of zero is observed as None.
        """
        locator = self.driver.locator(target)

        async def probe():
            count = await locator.count()
            if count > 1:
                return {'count': count}
            if count == 0:
                return {'count': 0, state: None}
            if state == 'visible':
                value = await locator.is_visible()
            elif state == 'text':
                texts = await locator.all_text_contents()
                value = texts[0].strip() if texts else None
            elif state == 'disabled':
                value = await locator.is_disabled(timeout=self.config.poll_interval)
            else:
                raise ValueError(f"Unknown element state '{state}'")
            return {'count': 1, state: value}

        def check(observed):
            return observed['count'] > 1 or (observed['count'] == 1 and predicate(observed[state]))

        result = await self._poll(probe, check, description, timeout_ms)

        if result.ok and result.value['count'] > 1:
            raise ElementResolutionError(
                f"exactly one element for {target}",
                actual=f"{result.value['count']} matches",
                elapsed_ms=result.elapsed_ms
            )
        if not result.ok:
            if not isinstance(result.value, dict) or result.value.get('count') == 0:
                self._timeout(f"expect_{state}", result.model_copy(update={'value': "no matching element"}))
            self._fail(f"expect_{state}", result.model_copy(update={'value': result.value.get(state)}))

        return result.value[state]

    async def expect_visible(self, target: Target, timeout_ms: Optional[int] = None):
        """Expect a single element to be rendered and visible."""
        await self._element_state(
            target, 'visible', lambda visible: visible is True,
            f"{target} to be visible", timeout_ms
        )
        log_action("expect_visible", str(target), logger=logger)

    async def expect_hidden(self, target: Target, timeout_ms: Optional[int] = None):
        """Expect an element to be absent or not visible."""
        locator = self.driver.locator(target)

        async def probe():
            return [await locator.nth(i).is_visible() for i in range(await locator.count())]

        result = await self._poll(probe, lambda flags: not any(flags), f"{target} to be hidden", timeout_ms)
        if not result.ok:
            self._fail("expect_hidden", result)
        log_action("expect_hidden", str(target), logger=logger)

    async def expect_text(self, target: Target, text: str, timeout_ms: Optional[int] = None):
        """Expect a single element's text content to equal a literal string."""
        await self._element_state(
            target, 'text', lambda actual: actual == text,
            f"{target} to have text {text!r}", timeout_ms
        )
        log_action("expect_text", f"{target} == {text!r}", logger=logger)

    async def expect_disabled(self, target: Target, timeout_ms: Optional[int] = None):
        """Expect a single element to be disabled."""
        await self._element_state(
            target, 'disabled', lambda disabled: disabled is True,
            f"{target} to be disabled", timeout_ms
        )
        log_action("expect_disabled", str(target), logger=logger)

    async def expect_enabled(self, target: Target, timeout_ms: Optional[int] = None):
        """Expect a single element to be enabled."""
        await self._element_state(
            target, 'disabled', lambda disabled: disabled is False,
            f"{target} to be enabled", timeout_ms
        )
        log_action("expect_enabled", str(target), logger=logger)

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    async def cookies(self) -> List[SessionCookie]:
        """Cookies of the current browsing context that apply to the page URL."""
        raw = await self.page.context.cookies(self.page.url)
        return [SessionCookie.model_validate(c) for c in raw]

    async def expect_cookie(
        self,
        name: str,
        predicate: Optional[CookiePredicate] = None,
        description: Optional[str] = None,
        timeout_ms: Optional[int] = None
    ) -> SessionCookie:
        """
        Wait for a cookie with the given name that satisfies ``predicate``.

        Reading cookies right after a navigation can race the response that
        sets them, hence the poll.

        Args:
            name: Cookie name
            predicate: Additional attribute check (e.g., expires is defined)
            description: Expectation text used in failures

        Returns:
            The matching SessionCookie
        """
        description = description or f"cookie {name!r} to be present"

        async def probe():
            return [c for c in await self.cookies() if c.name == name]

        def check(matches):
            return any(predicate is None or predicate(c) for c in matches)

        result = await self._poll(probe, check, description, timeout_ms)
        if not result.ok:
            if not result.value:
                self._timeout("expect_cookie", result.model_copy(update={'value': "no such cookie"}))
            observed = [c.model_dump(by_alias=True) for c in result.value]
            self._fail("expect_cookie", result.model_copy(update={'value': observed}))

        cookie = next(c for c in result.value if predicate is None or predicate(c))
        log_action("expect_cookie", f"{name} (expires={cookie.expires_at})", logger=logger)
        return cookie

    async def expect_no_cookie(self, name: str, timeout_ms: Optional[int] = None):
        """Expect no cookie with the given name in the current context."""
        async def probe():
            return [c.name for c in await self.cookies() if c.name == name]

        result = await self._poll(probe, lambda names: not names, f"no cookie {name!r}", timeout_ms)
        if not result.ok:
            self._fail("expect_no_cookie", result)
        log_action("expect_no_cookie", name, logger=logger)

    async def expect_remember_me_cookie(self, login_time: datetime, name: Optional[str] = None) -> SessionCookie:
        """
        Expect a session cookie that outlives the browser session.

        The cookie's expiry must fall strictly between
        ``login_time + (days - tolerance)`` and ``login_time + (days + tolerance)``.

        Args:
            login_time: Timezone-aware time the login was submitted
            name: Cookie name (defaults to config.session_cookie_name)

        Returns:
            The matching SessionCookie
        """
        name = name or self.config.session_cookie_name
        if login_time.tzinfo is None:
            login_time = login_time.replace(tzinfo=timezone.utc)

        days = self.config.remember_me_days
        tolerance = self.config.remember_me_tolerance_days
        earliest = (login_time + timedelta(days=days - tolerance)).timestamp()
        latest = (login_time + timedelta(days=days + tolerance)).timestamp()

        return await self.expect_cookie(
            name,
            lambda c: c.expires is not None and earliest < c.expires < latest,
            description=f"cookie {name!r} to expire in about {days} days"
        )
