import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv


load_dotenv()

GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

PACKAGE_LOGGER = "temporal_closure"


class ANSIColors:
    """Terminal colors per level."""

    DEBUG = "\033[36m"
    INFO = "\033[32m"
    WARNING = "\033[33m"
    ERROR = "\033[31m"
    CRITICAL = "\033[1;31m"
    RESET = "\033[0m"


class ClosureFormatter(logging.Formatter):
    """Colors records locally, emits workflow annotations under GitHub Actions."""

    def format(self, record):
        message = super().format(record)

        if GITHUB_ACTIONS:
            if record.levelno == logging.DEBUG:
                return f"::debug::{message}"
            if record.levelno == logging.WARNING:
                return f"::warning::{message}"
            if record.levelno >= logging.ERROR:
                return f"::error::{message}"
            return message

        color = {
            logging.DEBUG: ANSIColors.DEBUG,
            logging.INFO: ANSIColors.INFO,
            logging.WARNING: ANSIColors.WARNING,
            logging.ERROR: ANSIColors.ERROR,
            logging.CRITICAL: ANSIColors.CRITICAL,
        }.get(record.levelno, ANSIColors.RESET)
        return f"{color}{message}{ANSIColors.RESET}"


def resolve_level(level: Optional[str] = None) -> str:
    """Pick the log level from the argument or LOG_LEVEL, falling back to INFO."""
    candidate = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if candidate not in VALID_LOG_LEVELS:
        return "INFO"
    return candidate


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger.

    Only the package logger is touched, so applications embedding the
    engine keep control of the root logger. Calling again just updates
    the level. Records go to stderr so stdout stays free for reports.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(getattr(h, "_temporal_closure", False) for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ClosureFormatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
        handler._temporal_closure = True
        package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, resolve_level(level)))
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module of this package."""
    return logging.getLogger(name)
