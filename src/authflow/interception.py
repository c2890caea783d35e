"""
Network interception fixture.

Runs before every scenario:
1. Primes a storage-state baseline with no cookies and no local storage, so
   every scenario context starts unauthenticated.
2. Registers pass-through routes for the application's data endpoints (the
   REST user collection and the GraphQL endpoint). Requests continue
   unmodified; the routes are the seam where latency, errors or mock payloads
   can be injected later without touching scenario bodies.

If either step fails the scenario fails before any action runs.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from playwright.async_api import Page, Route, Request

from .config import AuthFlowConfig
from .errors import FixtureSetupError
from .models import FixtureConfig, InterceptedRequest

logger = logging.getLogger(__name__)

EMPTY_STORAGE_STATE: Dict[str, Any] = {"cookies": [], "origins": []}


def prime_storage_state(path: Path) -> Path:
    """
    Ensure the empty-authentication storage-state baseline exists.

    The file is written once and only read afterwards; scenarios never write
    to it. An existing file must describe an unauthenticated state.

    Args:
        path: Location of the baseline file

    Returns:
        The path of the baseline file

    Raises:
        FixtureSetupError: If the file cannot be written or read, or it
            carries cookies or local storage
    """
    try:
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(EMPTY_STORAGE_STATE, indent=2), encoding="utf-8")
            logger.info(f"✅ Storage-state baseline written: {path}")

        state = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise FixtureSetupError(f"readable storage-state baseline at {path}", detail=str(e)) from e

    if state.get("cookies") or state.get("origins"):
        raise FixtureSetupError(
            f"unauthenticated storage-state baseline at {path}",
            actual=f"{len(state.get('cookies', []))} cookie(s), {len(state.get('origins', []))} origin(s)"
        )

    return path


def context_options(config: AuthFlowConfig, fixture_config: FixtureConfig) -> Dict[str, Any]:
    """
    Keyword arguments for ``browser.new_context`` for one scenario.

    Args:
        config: Harness configuration
        fixture_config: Per-scenario fixture configuration

    Returns:
        Dict with storage_state, base_url and viewport
    """
    return {
        'storage_state': str(fixture_config.storage_state_path),
        'base_url': config.base_url,
        'viewport': config.viewport_size,
    }


class InterceptionFixture:
    """
    Pass-through route handlers for one scenario's page.

    Routes are scoped to the page and are discarded together with the
    scenario's browser context.
    """

    def __init__(self, fixture_config: FixtureConfig):
        """
        Initialize the fixture.

        Args:
            fixture_config: Patterns to intercept and whether to record requests
        """
        self.fixture_config = fixture_config
        self.intercepted: List[InterceptedRequest] = []
        self._installed: List[str] = []
        self._page: Optional[Page] = None

    def _handler_for(self, pattern: str):
        async def handle(route: Route, request: Request):
            if self.fixture_config.record_requests:
                self.intercepted.append(
                    InterceptedRequest(method=request.method, url=request.url, pattern=pattern)
                )
            logger.debug(f"    route {pattern}: {request.method} {request.url}")
            await route.continue_()

        return handle

    async def install(self, page: Page):
        """
        Register a pass-through route for every configured pattern.

        Raises:
            FixtureSetupError: If any route cannot be registered
        """
        self._page = page
        for pattern in self.fixture_config.intercept_patterns:
            try:
                await page.route(pattern, self._handler_for(pattern))
            except Exception as e:
                logger.error(f"❌ Route registration failed for {pattern}: {e}")
                raise FixtureSetupError(f"route registered for {pattern}", detail=str(e)) from e
            self._installed.append(pattern)

        logger.info(f"✅ Interception installed: {', '.join(self._installed) or 'no patterns'}")

    async def uninstall(self):
        """Remove the routes registered by install()."""
        if self._page is None:
            return

        for pattern in self._installed:
            try:
                await self._page.unroute(pattern)
            except Exception as e:
                # The context may already be closed
                logger.debug(f"    unroute {pattern} skipped: {e}")

        self._installed = []
        self._page = None

    def requests_for(self, pattern: str) -> List[InterceptedRequest]:
        """Requests recorded for one pattern."""
        return [r for r in self.intercepted if r.pattern == pattern]
