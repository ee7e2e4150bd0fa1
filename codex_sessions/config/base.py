"""
Configuration for codex-sessions.

Settings are read from environment variables (and optionally a .env file
named by LOAD_ENV_FILE). Field names match the environment variable names.
"""

from __future__ import annotations

import os
import pathlib
from typing import TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings

from codex_sessions.paths import DEFAULT_META_FILE, DEFAULT_SESSION_ROOT

T = TypeVar('T', bound='SessionManagerSettings')


class SessionManagerSettings(pydantic_settings.BaseSettings):
    """Configuration shared by the CLI and the MCP server."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='forbid',  # Reject unknown keys in .env files
    )

    # Application metadata
    APP_NAME: str = 'codex-sessions'
    VERSION: str = '0.1.0'

    # Session storage
    CODEX_SESSION_PATH: pathlib.Path = DEFAULT_SESSION_ROOT
    META_FILE_NAME: str = DEFAULT_META_FILE

    # Codex CLI executable override (empty/unset = search)
    CODEX_CLI_PATH: str | None = None

    # Terminal used to surface resumed sessions on Linux
    TERMINAL_EMULATOR: str = 'x-terminal-emulator'

    @pydantic.field_validator('META_FILE_NAME')
    @classmethod
    def validate_meta_file_name(cls, v: str) -> str:
        """Metadata file name must be a bare file name."""
        v = v.strip()
        if not v or '/' in v or '\\' in v:
            raise ValueError('META_FILE_NAME must be a non-empty file name without separators')
        return v

    @pydantic.field_validator('CODEX_SESSION_PATH')
    @classmethod
    def expand_session_path(cls, v: pathlib.Path) -> pathlib.Path:
        return v.expanduser()


def get_settings(settings_class: type[T], env_file: str | None = None) -> T:
    """
    Factory for creating settings with dynamic .env file loading.

    LOAD_ENV_FILE environment variable specifies custom .env file path.
    When unset, loads from environment variables only.

    Args:
        settings_class: Settings class to instantiate
        env_file: Optional path to .env file (overrides LOAD_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return settings_class()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T]) -> T:
    """
    Lazy settings - defers instantiation until first access.

    Args:
        settings_class: Settings class to instantiate

    Returns:
        Proxy that instantiates settings on first access
    """
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))


# Module-level singleton (lazy-loaded)
settings = lazy_settings(SessionManagerSettings)
