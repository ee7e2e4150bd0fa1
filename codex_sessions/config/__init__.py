"""Configuration for codex-sessions."""

from codex_sessions.config.base import SessionManagerSettings, get_settings, lazy_settings, settings

__all__ = [
    'SessionManagerSettings',
    'get_settings',
    'lazy_settings',
    'settings',
]
