"""
Pytest configuration and fixtures for AuthFlow tests.

Unit tests run the harness against the in-memory fakes in ``fakes.py``.
Live tests (tests/test_live_catalog.py) need a running application and are
skipped unless AUTHFLOW_LIVE_TESTS=true.
"""

import logging

import pytest

from authflow.config import AuthFlowConfig, get_test_config, set_config
from authflow.logging_config import setup_logging

from fakes import BASE_URL, FakePage


@pytest.fixture(scope='session', autouse=True)
def test_config(tmp_path_factory):
    """
    Set up the session configuration and logging.

    Uses a temporary directory for logs, storage state and screenshots.
    """
    temp_dir = tmp_path_factory.mktemp("authflow")
    config = get_test_config(temp_dir)
    set_config(config)

    log_file = config.get_log_path('test_session.log')
    setup_logging(level='DEBUG', use_colors=False, log_to_file=True, log_file=str(log_file))

    logger = logging.getLogger('authflow.test')
    logger.info("=" * 80)
    logger.info("AuthFlow Test Session Started")
    logger.info("=" * 80)
    logger.info(f"Test output directory: {temp_dir}")
    logger.info(f"Base URL: {config.base_url}")

    yield config

    logger.info("=" * 80)
    logger.info("AuthFlow Test Session Complete")
    logger.info("=" * 80)


@pytest.fixture
def fast_config(tmp_path):
    """Config with short timeouts pointing at the fake application."""
    return AuthFlowConfig(
        base_url=BASE_URL,
        workspace_root=tmp_path,
        element_timeout=200,
        assertion_timeout=200,
        navigation_timeout=1000,
        poll_interval=10,
        scenario_timeout=5,
    )


@pytest.fixture
def page():
    return FakePage()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their names."""
    for item in items:
        if "live" in item.nodeid.lower():
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)
