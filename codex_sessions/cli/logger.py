"""
CLI logging setup - routes library logging to stderr for command-line usage.

Services log through the standard logging module; the CLI decides how much
of it the user sees.
"""

from __future__ import annotations

import logging
import sys


class CLIFormatter(logging.Formatter):
    """Formats records as `[LEVEL] message`."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        return f'[{record.levelname}] {message}'


def configure_logging(verbose: bool = False) -> None:
    """
    Configure the root logger for CLI usage.

    Args:
        verbose: If True, show debug and info messages. If False, only warnings/errors.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(CLIFormatter('%(message)s'))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing.formatter, CLIFormatter):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
