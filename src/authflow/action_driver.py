"""
Action driver: primitive operations against one live page.

Key Design:
- Stateless and strictly sequential; every call is awaited before the next
- Targets must resolve to exactly one element, otherwise the scenario fails
- The only internal retry is Playwright's actionability waiting before
  click/fill, bounded by element_timeout
- Playwright errors are translated into the harness failure taxonomy here,
  so scenario bodies and the runner never see raw Playwright exceptions
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging

from playwright.async_api import Page, Locator
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import AuthFlowConfig
from .errors import ElementResolutionError, HarnessError, HarnessTimeoutError
from .logging_config import log_action
from .models import Target, TargetKind
from .polling import poll_until

logger = logging.getLogger(__name__)

LOAD_SIGNALS = ("load", "domcontentloaded", "networkidle")


class ActionDriver:
    """
    Primitive browser actions for one page/browser-context pair.

    All operations mutate live page state. None of them asserts on the
    outcome; callers follow up with the Assertions engine.
    """

    def __init__(self, page: Page, config: AuthFlowConfig):
        """
        Initialize the driver.

        Args:
            page: Playwright page owned by the current scenario
            config: AuthFlowConfig with base URL and timeouts
        """
        self.page = page
        self.config = config

    # ------------------------------------------------------------------
    # Element resolution
    # ------------------------------------------------------------------

    def locator(self, target: Target) -> Locator:
        """Build the Playwright locator for a target without waiting for it."""
        scope = self.page if target.within is None else self.locator(target.within)

        if target.kind == TargetKind.CSS:
            return scope.locator(target.selector)

        if target.name is None:
            return scope.get_by_role(target.role)
        return scope.get_by_role(target.role, name=target.name, exact=target.exact)

    async def resolve(self, target: Target) -> Locator:
        """
        Wait for a target to match and require exactly one element.

        Args:
            target: Element target from the DOM contract

        Returns:
            Locator matching exactly one element

        Raises:
            ElementResolutionError: If zero elements match within
                element_timeout, or more than one element matches
        """
        locator = self.locator(target)
        result = await poll_until(
            locator.count,
            lambda count: count >= 1,
            timeout_ms=self.config.element_timeout,
            interval_ms=self.config.poll_interval,
            description=f"{target} to match an element"
        )

        if not result.ok:
            raise ElementResolutionError(
                f"exactly one element for {target}",
                actual="0 matches" if result.error is None else result.error,
                elapsed_ms=result.elapsed_ms
            )

        if result.value > 1:
            raise ElementResolutionError(
                f"exactly one element for {target}",
                actual=f"{result.value} matches",
                elapsed_ms=result.elapsed_ms
            )

        return locator

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def navigate(self, path: str, wait_until: str = "load"):
        """
        Load a path relative to the application's base URL.

        Args:
            path: Application path (e.g., "/signin") or absolute URL
            wait_until: Load signal goto waits for

        Returns:
            Playwright Response (or None for same-document navigations)

        Raises:
            HarnessTimeoutError: If navigation exceeds navigation_timeout
            HarnessError: If navigation fails for any other reason
        """
        url = self.config.url_for(path)
        try:
            response = await self.page.goto(
                url,
                wait_until=wait_until,
                timeout=self.config.navigation_timeout
            )
        except PlaywrightTimeoutError as e:
            log_action("navigate", f"{url} timed out", success=False, logger=logger)
            raise HarnessTimeoutError(
                f"navigation to {url}",
                actual=self.page.url,
                elapsed_ms=self.config.navigation_timeout
            ) from e
        except PlaywrightError as e:
            log_action("navigate", f"{url} failed: {e.message}", success=False, logger=logger)
            raise HarnessError(f"navigation to {url}", actual=self.page.url, detail=e.message) from e

        status = response.status if response is not None else "-"
        log_action("navigate", f"{url} [{status}] -> {self.page.url}", logger=logger)
        return response

    async def fill_field(self, target: Target, value: str):
        """
        Fill exactly one editable input.

        Args:
            target: Input target
            value: Text to enter (replaces existing content)

        Raises:
            ElementResolutionError: If the target does not resolve to exactly
                one element, or the element is not editable
        """
        locator = await self.resolve(target)

        try:
            editable = await locator.is_editable(timeout=self.config.element_timeout)
        except PlaywrightError as e:
            raise ElementResolutionError(f"{target} to be editable", detail=e.message) from e
        if not editable:
            log_action("fill", f"{target} is not editable", success=False, logger=logger)
            raise ElementResolutionError(f"{target} to be editable", actual="read-only or disabled")

        await self._act("fill", target, locator.fill(value, timeout=self.config.element_timeout))
        logger.debug(f"    -> filled {target} ({len(value)} chars)")

    async def click(self, target: Target):
        """
        Click exactly one element once it is actionable.

        Args:
            target: Element target
        """
        locator = await self.resolve(target)
        await self._act("click", target, locator.click(timeout=self.config.element_timeout))

    async def set_checkbox(self, target: Target, checked: bool):
        """
        Bring a checkbox into the requested state; no-op if already there.

        Args:
            target: Checkbox target
            checked: Desired state
        """
        locator = await self.resolve(target)

        try:
            current = await locator.is_checked(timeout=self.config.element_timeout)
        except PlaywrightError as e:
            raise ElementResolutionError(f"{target} to be a checkbox", detail=e.message) from e

        if current == checked:
            log_action("set_checkbox", f"{target} already {'checked' if checked else 'unchecked'}", logger=logger)
            return

        if checked:
            await self._act("check", target, locator.check(timeout=self.config.element_timeout))
        else:
            await self._act("uncheck", target, locator.uncheck(timeout=self.config.element_timeout))

    async def submit(self, target: Target):
        """
        Click a submit control.

        Does not wait for the resulting navigation; follow with an explicit
        wait or assertion.
        """
        await self.click(target)

    async def blur(self, target: Target):
        """Move focus away from a field so the application validates it."""
        locator = await self.resolve(target)
        await self._act("blur", target, locator.blur(timeout=self.config.element_timeout))

    async def focus_then_blur(self, target: Target):
        """Focus a field by clicking it, then blur it without typing."""
        await self.click(target)
        await self.blur(target)

    async def wait_for_load_signal(self, kind: str = "domcontentloaded"):
        """
        Suspend until the page reports a readiness signal.

        Args:
            kind: One of "load", "domcontentloaded", "networkidle"

        Raises:
            ValueError: If kind is not a known load signal
            HarnessTimeoutError: If the signal is not reached within
                navigation_timeout
        """
        if kind not in LOAD_SIGNALS:
            raise ValueError(f"Unknown load signal '{kind}'. Expected one of {', '.join(LOAD_SIGNALS)}")

        try:
            await self.page.wait_for_load_state(kind, timeout=self.config.navigation_timeout)
        except PlaywrightTimeoutError as e:
            log_action("wait_for_load", f"{kind} timed out", success=False, logger=logger)
            raise HarnessTimeoutError(
                f"load signal '{kind}'",
                actual=self.page.url,
                elapsed_ms=self.config.navigation_timeout
            ) from e

        log_action("wait_for_load", f"{kind} @ {self.page.url}", logger=logger)

    async def screenshot(self, label: str = "screenshot") -> Optional[Path]:
        """
        Save a viewport screenshot for diagnosis.

        Args:
            label: Label used in the file name

        Returns:
            Path of the saved file, or None if saving is disabled or failed
        """
        if not self.config.save_screenshots:
            return None

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")[:-3]
        path = self.config.get_screenshot_path(f"screenshot_{timestamp}_{label}.png")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await self.page.screenshot(path=str(path), full_page=False)
        except Exception as e:
            logger.warning(f"  ->  Screenshot failed for {label}: {e}")
            return None

        logger.debug(f"  ->  Screenshot saved: {path.name}")
        return path

    async def _act(self, action: str, target: Target, operation):
        """Await a locator operation, translating Playwright failures."""
        try:
            await operation
        except PlaywrightTimeoutError as e:
            log_action(action, f"{target} not actionable", success=False, logger=logger)
            raise HarnessTimeoutError(
                f"{target} to become actionable for {action}",
                elapsed_ms=self.config.element_timeout,
                detail=e.message
            ) from e
        except PlaywrightError as e:
            log_action(action, f"{target} failed: {e.message}", success=False, logger=logger)
            raise ElementResolutionError(f"{action} on {target}", detail=e.message) from e

        log_action(action, str(target), logger=logger)
