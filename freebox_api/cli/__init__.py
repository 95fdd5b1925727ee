"""
Command Line Interface Package for the Freebox API Client

- args.py: Argument parsing and validation
- formatters.py: Output formatting
- logging_setup.py: Logging configuration
- main.py: Command dispatch and entry point

License: MIT
"""

from .main import main

__all__ = ["main"]
