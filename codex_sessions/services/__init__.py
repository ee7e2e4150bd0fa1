"""Service layer for session discovery and guarded session operations."""

from codex_sessions.services.delete import delete_session, path_matches_session
from codex_sessions.services.executable import resolve_codex_executable
from codex_sessions.services.manager import SessionManager
from codex_sessions.services.meta import load_session_meta
from codex_sessions.services.resume import resume_session
from codex_sessions.services.scanner import scan_sessions
from codex_sessions.services.watcher import SessionWatcher, WatchError, WatchUpdated, create_session_watcher

__all__ = [
    'SessionManager',
    'SessionWatcher',
    'WatchError',
    'WatchUpdated',
    'create_session_watcher',
    'delete_session',
    'load_session_meta',
    'path_matches_session',
    'resolve_codex_executable',
    'resume_session',
    'scan_sessions',
]
