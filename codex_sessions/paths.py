"""
Path conventions for Codex CLI session storage.

The Codex CLI writes each session either as a directory holding a
`session_meta` file, or as a single append-only `.jsonl` log whose first
`session_meta` record describes the session. Sessions live under
~/.codex/sessions unless CODEX_SESSION_PATH points elsewhere.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

__all__ = [
    'CLI_PATH_ENV_VAR',
    'DEFAULT_CLI_PATH',
    'DEFAULT_META_FILE',
    'DEFAULT_SESSION_ROOT',
    'META_RECORD_TYPE',
    'SESSION_ID_PATTERN',
    'SESSION_LOG_SUFFIX',
    'SESSION_ROOT_ENV_VAR',
    'get_session_root_path',
    'is_session_id',
]

SESSION_ROOT_ENV_VAR = 'CODEX_SESSION_PATH'
CLI_PATH_ENV_VAR = 'CODEX_CLI_PATH'

DEFAULT_SESSION_ROOT = Path.home() / '.codex' / 'sessions'
DEFAULT_CLI_PATH = Path.home() / '.codex' / 'bin' / 'codex.exe'

# Filename used when a session is stored as a directory
DEFAULT_META_FILE = 'session_meta'

# Record-type tag identifying the metadata record
META_RECORD_TYPE = 'session_meta'

SESSION_LOG_SUFFIX = '.jsonl'

# UUIDv7: version nibble 7, variant nibble 8-b
SESSION_ID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-7[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE,
)


def is_session_id(value: object) -> bool:
    """Check whether value is a UUIDv7 session id string."""
    return isinstance(value, str) and SESSION_ID_PATTERN.match(value) is not None


def get_session_root_path() -> Path:
    """
    Resolve the root directory holding Codex sessions.

    Reads CODEX_SESSION_PATH at call time so changes made after import are
    honored. An empty value falls back to the default location.

    Returns:
        Absolute path of the session root (may not exist)
    """
    configured = os.environ.get(SESSION_ROOT_ENV_VAR)
    if configured:
        return Path(configured).expanduser().resolve()
    return DEFAULT_SESSION_ROOT
