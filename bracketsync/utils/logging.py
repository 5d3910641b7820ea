"""Logging utilities for the bracket sync engine."""

import logging
import os

# Global state
_console_logging_enabled = None
_file_logger = None

DEFAULT_LOG_FILE = "/tmp/bracketsync_debug.log"


def _console_enabled() -> bool:
    """Console output is on unless a caller embedding the engine turned it off"""
    if _console_logging_enabled is not None:
        return _console_logging_enabled
    return True


def set_console_logging(enabled: bool):
    """Explicitly enable/disable console logging"""
    global _console_logging_enabled
    _console_logging_enabled = enabled


def mask_token(token: str | None) -> str:
    """Only ever show the last four characters of a credential"""
    return "***" + token[-4:] if token else "None"


def _get_file_logger() -> logging.Logger:
    global _file_logger

    if _file_logger is None:
        _file_logger = logging.getLogger("bracketsync_file")
        _file_logger.setLevel(logging.DEBUG)
        file_handler = logging.FileHandler(
            os.environ.get("BRACKETSYNC_LOG_FILE", DEFAULT_LOG_FILE)
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        _file_logger.addHandler(file_handler)
        _file_logger.propagate = False
    return _file_logger


def log(message: str, level: int = logging.INFO):
    """
    Log a message:
    - Always logs to file for debugging
    - Also logs to console for CLI operations
    - Skips console output when an embedding app disabled it
    """
    _get_file_logger().log(level, message)

    if _console_enabled():
        print(message)
