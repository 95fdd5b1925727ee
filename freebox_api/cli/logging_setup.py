"""
Logging Configuration Module

This module provides logging setup for the freebox-api CLI. The library
itself only logs to the "freebox-api" logger and never installs handlers.

License: MIT
"""

import logging
import sys

_logging_configured = False


def setup_logging(debug: bool = False, quiet: bool = False) -> None:
    """
    Configure logging for the CLI application.

    Args:
        debug: If True, enable debug-level logging
        quiet: If True, only show warnings and errors
    """
    global _logging_configured

    if _logging_configured:
        return

    _logging_configured = True

    if debug:
        level = logging.DEBUG
        formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        level = logging.WARNING if quiet else logging.INFO
        formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=[console_handler], force=True)

    # Reduce noise from HTTP and mDNS libraries unless debugging
    noisy_level = logging.DEBUG if debug else logging.WARNING
    for name in ("urllib3", "requests", "zeroconf"):
        logging.getLogger(name).setLevel(noisy_level)
    logging.getLogger("freebox-api").setLevel(level)

    logging.getLogger(__name__).debug(f"Logging configured: level={logging.getLevelName(level)}")
