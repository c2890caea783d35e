"""
Logging configuration for the AuthFlow harness.

Console logging (stdout) with colored level names on a terminal, plain
formatting in CI logs, and an optional file handler.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Scenario running in the current asyncio task ("-" outside a scenario)
current_scenario: ContextVar[str] = ContextVar("authflow_scenario", default="-")


# ANSI color codes for terminal output
class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    MAGENTA = '\033[95m'
    CYAN = '\033[96m'


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.RED + Colors.BOLD
    }

    def format(self, record):
        """Format log record with colors."""
        # Copy so other handlers keep the uncolored level name
        record = logging.makeLogRecord(record.__dict__)
        if record.levelno in self.LEVEL_COLORS:
            record.levelname = (
                f"{self.LEVEL_COLORS[record.levelno]}"
                f"{record.levelname:8s}"
                f"{Colors.RESET}"
            )

        return super().format(record)


class ScenarioFilter(logging.Filter):
    """Stamp every record with the name of the scenario that emitted it."""

    def filter(self, record):
        record.scenario = current_scenario.get()
        return True


@contextmanager
def scenario_logging(name: str) -> Iterator[None]:
    """
    Attribute log records emitted inside the block to a scenario.

    The name lives in a ContextVar, so scenarios running concurrently in
    separate tasks keep their own name.
    """
    token = current_scenario.set(name)
    try:
        yield
    finally:
        current_scenario.reset(token)


def setup_logging(
    level: str = "INFO",
    use_colors: bool = True,
    log_to_file: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Set up logging configuration for AuthFlow.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_colors: Use colored output for console (default True)
        log_to_file: Also log to file (default False)
        log_file: Path to log file (if log_to_file is True)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.addFilter(ScenarioFilter())

    if use_colors and sys.stdout.isatty():
        console_format = (
            f"{Colors.CYAN}%(asctime)s{Colors.RESET} | "
            f"%(levelname)s | "
            f"{Colors.MAGENTA}%(name)s{Colors.RESET} | "
            f"%(message)s"
        )
        console_formatter = ColoredFormatter(
            console_format,
            datefmt='%H:%M:%S'
        )
    else:
        console_format = (
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )
        console_formatter = logging.Formatter(
            console_format,
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_to_file and log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(ScenarioFilter())

        file_format = (
            "%(asctime)s | %(levelname)-8s | %(scenario)s | %(name)s | "
            "%(filename)s:%(lineno)d | %(message)s"
        )
        file_formatter = logging.Formatter(
            file_format,
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    # asyncio debug output drowns the action log
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_action(
    action: str,
    details: str,
    success: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log a driver action or assertion in a structured format.

    Inside a scenario the line is prefixed with the scenario name, e.g.
    ``✓ [login_success] expect_url      | http://localhost:3000/``.

    Args:
        action: Action type (e.g., 'fill', 'click', 'expect_url')
        details: Details about the action
        success: Whether the action succeeded
        logger: Logger instance (uses root if None)
    """
    if logger is None:
        logger = logging.getLogger()

    status = "✓" if success else "✗"
    level = logging.INFO if success else logging.ERROR

    scenario = current_scenario.get()
    prefix = f"{status} [{scenario}]" if scenario != "-" else status
    message = f"{prefix} {action:15s} | {details}"
    logger.log(level, message)
