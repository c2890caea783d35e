"""
Configuration management for the AuthFlow acceptance harness.

Loads configuration from environment variables (prefix ``AUTHFLOW_``) and an
optional ``.env`` file, with defaults suitable for a locally running
application on port 3000.
"""

import os
from pathlib import Path
from typing import List, Optional
from urllib.parse import urljoin

from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings


class AuthFlowConfig(BaseSettings):
    """Configuration for the AuthFlow harness."""

    # Application under test
    base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the application under test"
    )

    # Browser Configuration
    browser_type: str = Field(
        default="chromium",
        pattern="^(chromium|firefox|webkit)$",
        description="Browser engine: 'chromium', 'firefox', or 'webkit'"
    )

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode"
    )

    slow_mo: int = Field(
        default=0,
        ge=0,
        le=5000,
        description="Slow down browser actions by N milliseconds (for debugging)"
    )

    # Browser Viewport
    viewport_width: int = Field(
        default=1280,
        ge=800,
        le=3840,
        description="Browser viewport width"
    )

    viewport_height: int = Field(
        default=1024,
        ge=600,
        le=2160,
        description="Browser viewport height"
    )

    # Timeouts (in milliseconds unless noted)
    navigation_timeout: int = Field(
        default=30000,
        ge=1000,
        le=180000,
        description="Navigation timeout in milliseconds"
    )

    element_timeout: int = Field(
        default=10000,
        ge=100,
        le=60000,
        description="Element resolution and actionability timeout in milliseconds"
    )

    assertion_timeout: int = Field(
        default=5000,
        ge=100,
        le=60000,
        description="How long an assertion keeps polling before it fails, in milliseconds"
    )

    poll_interval: int = Field(
        default=100,
        ge=10,
        le=5000,
        description="Delay between two polls of the page state, in milliseconds"
    )

    scenario_timeout: int = Field(
        default=120,
        ge=5,
        le=1800,
        description="Hard upper bound for one scenario body, in seconds"
    )

    # Suite scheduling
    max_parallel: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Number of scenarios run concurrently (1 = sequential)"
    )

    # Authentication contract
    session_cookie_name: str = Field(
        default="connect.sid",
        description="Name of the session cookie issued at login"
    )

    remember_me_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Expected lifetime of a remembered session in days"
    )

    remember_me_tolerance_days: int = Field(
        default=1,
        ge=0,
        le=30,
        description="Accepted deviation of the remembered cookie expiry in days"
    )

    # Network interception
    intercept_patterns: List[str] = Field(
        default_factory=lambda: ["**/users", "**/graphql"],
        description="URL glob patterns routed through the interception fixture"
    )

    record_requests: bool = Field(
        default=True,
        description="Record intercepted requests for inspection"
    )

    # Scenario data
    unique_signup: bool = Field(
        default=False,
        description="Append a per-run suffix to the sign-up username"
    )

    # Paths
    workspace_root: Optional[Path] = Field(
        default=None,
        description="Workspace root directory"
    )

    log_dir: Optional[Path] = Field(
        default=None,
        description="Directory for log files"
    )

    state_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding the baseline storage-state file"
    )

    # Development/Debug
    save_screenshots: bool = Field(
        default=True,
        description="Save a screenshot when a scenario fails"
    )

    screenshot_dir: Optional[Path] = Field(
        default=None,
        description="Directory to save failure screenshots"
    )

    live_tests: bool = Field(
        default=False,
        description="Run the live browser tests against base_url"
    )

    model_config = ConfigDict(
        env_prefix="AUTHFLOW_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create necessary directories."""
        # Accept a bare BASE_URL like most front-end tooling does
        if 'base_url' not in kwargs and os.getenv('BASE_URL') and not os.getenv('AUTHFLOW_BASE_URL'):
            kwargs['base_url'] = os.getenv('BASE_URL')

        super().__init__(**kwargs)

        if self.workspace_root is None:
            self.workspace_root = Path.cwd()

        if self.log_dir is None:
            self.log_dir = self.workspace_root / "logs"

        if self.state_dir is None:
            self.state_dir = self.workspace_root / ".authflow"

        if self.screenshot_dir is None:
            self.screenshot_dir = self.workspace_root / "screenshots"

        self._create_directories()

    def log_config(self):
        """Log configuration settings for debugging."""
        import logging
        import json
        logger = logging.getLogger(__name__)

        config_dict = {}
        for field_name in type(self).model_fields:
            value = getattr(self, field_name)
            if isinstance(value, Path):
                config_dict[field_name] = str(value)
            else:
                config_dict[field_name] = value

        logger.info("=" * 60)
        logger.info("AuthFlow Configuration")
        logger.info("=" * 60)
        logger.info(json.dumps(config_dict, indent=2))
        logger.info("=" * 60)

    def _create_directories(self):
        """Create necessary directories if they don't exist."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.state_dir.mkdir(parents=True, exist_ok=True)

        if self.save_screenshots:
            self.screenshot_dir.mkdir(parents=True, exist_ok=True)

    @property
    def browser_args(self) -> list:
        """
        Get Playwright browser launch arguments (only used for Chromium).

        Returns:
            List of browser arguments
        """
        args = []

        if self.headless and self.browser_type == "chromium":
            args.extend([
                '--disable-gpu',
                '--no-sandbox',
                '--disable-dev-shm-usage',
                '--disable-setuid-sandbox'
            ])

        return args

    @property
    def viewport_size(self) -> dict:
        """
        Get viewport size as dictionary.

        Returns:
            Dictionary with width and height
        """
        return {
            'width': self.viewport_width,
            'height': self.viewport_height
        }

    @property
    def storage_state_path(self) -> Path:
        """Path of the empty-authentication storage-state baseline."""
        return self.state_dir / "auth.json"

    def url_for(self, path: str) -> str:
        """
        Resolve an application path against ``base_url``.

        Absolute URLs are returned unchanged.

        Args:
            path: Path such as "/signin" or a full URL

        Returns:
            Absolute URL
        """
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.base_url.rstrip('/') + '/', path.lstrip('/'))

    def get_log_path(self, log_name: str = "authflow.log") -> Path:
        """
        Get full path for a log file.

        Args:
            log_name: Name of the log file

        Returns:
            Path to the log file
        """
        return self.log_dir / log_name

    def get_screenshot_path(self, filename: str) -> Path:
        """
        Get full path for a screenshot file.

        Args:
            filename: Name of the screenshot file

        Returns:
            Path to the screenshot file
        """
        return self.screenshot_dir / filename


# Global configuration instance
_config: Optional[AuthFlowConfig] = None


def get_config() -> AuthFlowConfig:
    """
    Get the global configuration instance.

    Returns:
        AuthFlowConfig instance
    """
    global _config
    if _config is None:
        _config = AuthFlowConfig()
    return _config


def reload_config() -> AuthFlowConfig:
    """
    Reload configuration from environment.

    Returns:
        New AuthFlowConfig instance
    """
    global _config
    _config = AuthFlowConfig()
    return _config


def set_config(config: AuthFlowConfig):
    """
    Set the global configuration instance.

    Args:
        config: AuthFlowConfig instance to set
    """
    global _config
    _config = config


# Convenience functions for common configurations

def get_dev_config() -> AuthFlowConfig:
    """
    Get development configuration (visible browser, slow motion).

    Returns:
        AuthFlowConfig configured for watching scenarios run
    """
    return AuthFlowConfig(
        browser_type="chromium",
        headless=False,
        slow_mo=500,
        save_screenshots=True
    )


def get_test_config(temp_dir: Optional[Path] = None) -> AuthFlowConfig:
    """
    Get test configuration.

    Loads settings from .env file first, then allows environment variable
    overrides. Output directories go under ``temp_dir`` when given.

    Configure via .env file or environment variables:
      - AUTHFLOW_BASE_URL=http://localhost:3000
      - AUTHFLOW_BROWSER_TYPE=chromium|firefox|webkit
      - AUTHFLOW_HEADLESS=true|false
      - AUTHFLOW_LIVE_TESTS=true (enables the live browser tests)

    Args:
        temp_dir: Directory for test outputs (optional)

    Returns:
        AuthFlowConfig configured for testing with .env + environment overrides
    """
    from dotenv import load_dotenv
    env_file = Path.cwd() / '.env'
    if env_file.exists():
        load_dotenv(env_file)

    headless_env = os.getenv('AUTHFLOW_HEADLESS', 'true').lower()
    headless = headless_env in ('true', '1', 'yes')
    slow_mo = int(os.getenv('AUTHFLOW_SLOW_MO', '0' if headless else '250'))

    kwargs = {
        'headless': headless,
        'slow_mo': slow_mo,
        'save_screenshots': True,
    }
    if temp_dir is not None:
        kwargs.update(
            workspace_root=temp_dir,
            log_dir=temp_dir / "logs",
            state_dir=temp_dir / "state",
            screenshot_dir=temp_dir / "screenshots",
        )

    return AuthFlowConfig(**kwargs)


def get_ci_config() -> AuthFlowConfig:
    """
    Get configuration for unattended CI runs.

    Returns:
        AuthFlowConfig with a headless browser and no slow motion
    """
    return AuthFlowConfig(
        headless=True,
        slow_mo=0,
        save_screenshots=True
    )
