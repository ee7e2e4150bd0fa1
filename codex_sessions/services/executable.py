"""
Codex CLI executable resolution.

Search order (first candidate that exists on disk wins):
1. Explicit override passed by the caller
2. CODEX_CLI_PATH environment variable
3. Default install location (~/.codex/bin/codex.exe)
4. PATH lookup (`where` on Windows, `which` elsewhere)

The found file is not otherwise validated.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys

from codex_sessions.paths import CLI_PATH_ENV_VAR, DEFAULT_CLI_PATH

__all__ = [
    'CLI_NAME',
    'resolve_codex_executable',
]

logger = logging.getLogger(__name__)

CLI_NAME = 'codex'


def resolve_codex_executable(explicit_path: str | None = None) -> str | None:
    """
    Locate the Codex CLI.

    Args:
        explicit_path: Caller-supplied override; ignored when empty

    Returns:
        Path to the executable, or None if none was found
    """
    candidates = [
        _normalize_path(explicit_path),
        _normalize_path(os.environ.get(CLI_PATH_ENV_VAR)),
        str(DEFAULT_CLI_PATH),
    ]

    for candidate in candidates:
        if candidate and os.path.exists(candidate):
            return candidate

    discovered = _discover_from_path()
    if discovered:
        logger.debug(f'Found {CLI_NAME} on PATH: {discovered}')
    return discovered


def _normalize_path(path: str | None) -> str | None:
    if not path or not path.strip():
        return None
    return os.path.abspath(os.path.expanduser(path.strip()))


def _discover_from_path() -> str | None:
    if sys.platform == 'win32':
        return _first_line_of(['where', f'{CLI_NAME}.exe']) or _first_line_of(['where', CLI_NAME])
    return _first_line_of(['which', CLI_NAME])


def _first_line_of(command: list[str]) -> str | None:
    """Run a lookup command and return the first non-empty output line."""
    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except OSError:
        # Lookup tool itself is unavailable
        return None

    if result.returncode != 0:
        return None

    for line in result.stdout.splitlines():
        if line.strip():
            return line.strip()
    return None
