"""
Scenario runner.

Key Design:
- One browser per suite, one fresh BrowserContext per scenario
  launch -> (new context -> fixture -> body -> close context)* -> close
- Every scenario receives the same explicit FixtureConfig; nothing is
  configured ambiently between scenarios
- A failing scenario becomes a ScenarioResult; siblings keep running
- Scenarios are never retried; the body is bounded by scenario_timeout so a
  stuck page cannot hang the suite
"""

import asyncio
import logging
import time
from typing import Iterable, List, Optional

from playwright.async_api import async_playwright, Browser, Playwright

from .action_driver import ActionDriver
from .assertions import Assertions
from .config import AuthFlowConfig
from .errors import FixtureSetupError, HarnessTimeoutError
from .interception import InterceptionFixture, context_options, prime_storage_state
from .logging_config import scenario_logging
from .models import FixtureConfig, ScenarioResult, SuiteReport
from .polling import elapsed_since
from .scenarios import Scenario, ScenarioContext, list_scenarios

logger = logging.getLogger(__name__)


class ScenarioRunner:
    """
    Runs catalog scenarios in isolated browser contexts.

    Use as an async context manager:

        async with ScenarioRunner(config) as runner:
            report = await runner.run_suite(list_scenarios(), fixture_config)
    """

    def __init__(self, config: AuthFlowConfig):
        """
        Initialize the runner.

        Args:
            config: AuthFlowConfig with browser and timeout settings
        """
        self.config = config
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None

    async def __aenter__(self) -> "ScenarioRunner":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def start(self):
        """
        Launch Playwright and the configured browser.

        Browser selection follows config.browser_type. If the launch fails
        the Playwright driver is stopped before the error propagates.
        """
        self.playwright = await async_playwright().start()

        if self.config.browser_type == "webkit":
            browser_launcher = self.playwright.webkit
        elif self.config.browser_type == "firefox":
            browser_launcher = self.playwright.firefox
        else:
            browser_launcher = self.playwright.chromium

        launch_kwargs = {
            'headless': self.config.headless,
            'slow_mo': self.config.slow_mo,
        }
        if self.config.browser_args:
            launch_kwargs['args'] = self.config.browser_args

        try:
            self.browser = await browser_launcher.launch(**launch_kwargs)
        except Exception as e:
            logger.error(f"❌ Browser launch failed ({self.config.browser_type}): {e}")
            await self.close()
            raise

        logger.info(
            f"✅ Browser launched: {self.config.browser_type} "
            f"(headless={self.config.headless}, base_url={self.config.base_url})"
        )

    async def close(self):
        """
        Close browser and clean up resources.

        Always called on context-manager exit, including after failures.
        """
        try:
            if self.browser:
                await self.browser.close()
                logger.info("Browser closed")

            if self.playwright:
                await self.playwright.stop()

        except Exception as e:
            logger.warning(f"Error closing browser: {e}")

        finally:
            self.browser = None
            self.playwright = None

    async def run_scenario(self, scenario: Scenario, fixture_config: FixtureConfig) -> ScenarioResult:
        """
        Run one scenario in a fresh browser context.

        Args:
            scenario: Scenario from the catalog
            fixture_config: Storage-state baseline and interception patterns

        Returns:
            ScenarioResult; failures are reported, never raised
        """
        if self.browser is None:
            raise RuntimeError("ScenarioRunner.start() must be called before running scenarios")

        with scenario_logging(scenario.name):
            return await self._run_in_context(scenario, fixture_config)

    async def _run_in_context(self, scenario: Scenario, fixture_config: FixtureConfig) -> ScenarioResult:
        start = time.monotonic()
        fixture = InterceptionFixture(fixture_config)
        driver: Optional[ActionDriver] = None
        context = None

        logger.info("=" * 70)
        logger.info(f" Scenario: {scenario.name}")
        logger.info(f"   {scenario.description}")
        logger.info("=" * 70)

        try:
            try:
                prime_storage_state(fixture_config.storage_state_path)
                context = await self.browser.new_context(**context_options(self.config, fixture_config))
                context.set_default_timeout(self.config.element_timeout)
                context.set_default_navigation_timeout(self.config.navigation_timeout)
                page = await context.new_page()
                await fixture.install(page)
            except FixtureSetupError:
                raise
            except Exception as e:
                raise FixtureSetupError("isolated browser context for the scenario", detail=str(e)) from e

            driver = ActionDriver(page, self.config)
            ctx = ScenarioContext(
                page=page,
                context=context,
                config=self.config,
                driver=driver,
                expect=Assertions(page, self.config, driver),
                fixture=fixture,
            )

            try:
                await asyncio.wait_for(scenario.body(ctx), timeout=self.config.scenario_timeout)
            except asyncio.TimeoutError as e:
                raise HarnessTimeoutError(
                    f"scenario '{scenario.name}' to finish",
                    actual=page.url,
                    elapsed_ms=elapsed_since(start)
                ) from e

            elapsed_ms = elapsed_since(start)
            logger.info(f"✅ PASSED: {scenario.name} ({elapsed_ms}ms)")
            return ScenarioResult(
                name=scenario.name,
                success=True,
                elapsed_ms=elapsed_ms,
                intercepted=list(fixture.intercepted),
            )

        except Exception as e:
            elapsed_ms = elapsed_since(start)
            logger.error(f"❌ FAILED: {scenario.name}: {type(e).__name__}: {e}")

            screenshot = None
            if driver is not None:
                screenshot = await driver.screenshot(f"{scenario.name}_error")

            return ScenarioResult(
                name=scenario.name,
                success=False,
                error=str(e),
                error_type=type(e).__name__,
                elapsed_ms=elapsed_ms,
                screenshot=str(screenshot) if screenshot else None,
                intercepted=list(fixture.intercepted),
            )

        finally:
            await fixture.uninstall()
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    logger.warning(f"Error closing context for {scenario.name}: {e}")

    async def run_suite(self, scenarios: Iterable[Scenario], fixture_config: FixtureConfig) -> SuiteReport:
        """
        Run scenarios sequentially, or concurrently up to config.max_parallel.

        Results keep the order of ``scenarios`` regardless of scheduling.
        """
        scenarios = list(scenarios)
        logger.info(f" Running {len(scenarios)} scenario(s), max_parallel={self.config.max_parallel}")

        if self.config.max_parallel == 1:
            results = [await self.run_scenario(s, fixture_config) for s in scenarios]
        else:
            semaphore = asyncio.Semaphore(self.config.max_parallel)

            async def bounded(s: Scenario) -> ScenarioResult:
                async with semaphore:
                    return await self.run_scenario(s, fixture_config)

            results = list(await asyncio.gather(*(bounded(s) for s in scenarios)))

        report = SuiteReport(results=results)
        logger.info(f" Suite finished: {len(report.passed)} passed, {len(report.failed)} failed")
        return report


async def run_catalog(
    config: AuthFlowConfig,
    names: Optional[List[str]] = None,
    tags: Optional[List[str]] = None
) -> SuiteReport:
    """
    Run catalog scenarios with a fixture configuration derived from ``config``.

    Args:
        config: Harness configuration
        names: Scenario names to run (default: all)
        tags: Only scenarios carrying one of these tags

    Returns:
        SuiteReport for the selected scenarios
    """
    scenarios = list_scenarios(names=names, tags=tags)
    fixture_config = FixtureConfig.from_config(config)

    async with ScenarioRunner(config) as runner:
        return await runner.run_suite(scenarios, fixture_config)
