"""
Session manager - the operations presentation layers call.

Wraps the scanner, loader, watcher and guarded operations behind five calls:
list_sessions, get_session_detail, resume_session, delete_session and
subscribe_to_changes. Resume and delete never raise here: every outcome comes
back as a response with either a result or a stable error code.

The manager owns at most one watcher. It is created by the first subscription
(or start_watching) and released by close(). While it runs, the session list
is cached and invalidated by change events; without it every list call scans.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from codex_sessions.config.base import SessionManagerSettings
from codex_sessions.exceptions import DeleteSessionError, ResumeSessionError, SessionOperationError
from codex_sessions.paths import DEFAULT_META_FILE, get_session_root_path, is_session_id
from codex_sessions.schemas.operations import (
    DeleteSessionResponse,
    OperationErrorInfo,
    ResumeSessionResponse,
    ScannedSession,
    SessionDetailView,
    SessionEvent,
    SessionSummaryView,
)
from codex_sessions.schemas.session_meta import NormalizedSessionMeta, display_instructions, parse_instructions
from codex_sessions.services.delete import delete_session
from codex_sessions.services.meta import load_session_meta
from codex_sessions.services.resume import DEFAULT_TERMINAL, resume_session
from codex_sessions.services.scanner import scan_sessions
from codex_sessions.services.watcher import SessionWatcher, SessionWatcherEvent, WatchUpdated, create_session_watcher

__all__ = [
    'SessionEventCallback',
    'SessionManager',
    'to_detail_view',
    'to_summary_view',
]

logger = logging.getLogger(__name__)

type SessionEventCallback = Callable[[SessionEvent], None]


class SessionManager:
    """
    Consumer-facing session operations for one session root.

    Safe to call from several threads; scans themselves are not serialized.
    """

    def __init__(
        self,
        root_path: Path | str | None = None,
        *,
        meta_file_name: str = DEFAULT_META_FILE,
        cli_path: str | None = None,
        terminal: str = DEFAULT_TERMINAL,
    ) -> None:
        self.root_path = Path(os.path.abspath(root_path)) if root_path else get_session_root_path()
        self.meta_file_name = meta_file_name
        self.cli_path = cli_path
        self.terminal = terminal

        self._lock = threading.Lock()
        self._generation = 0
        self._cache: tuple[int, list[SessionSummaryView]] | None = None
        self._subscribers: dict[int, SessionEventCallback] = {}
        self._next_token = 0
        self._watcher: SessionWatcher | None = None

    @classmethod
    def from_settings(cls, settings: SessionManagerSettings) -> SessionManager:
        return cls(
            settings.CODEX_SESSION_PATH,
            meta_file_name=settings.META_FILE_NAME,
            cli_path=settings.CODEX_CLI_PATH,
            terminal=settings.TERMINAL_EMULATOR,
        )

    # ==========================================================================
    # Queries
    # ==========================================================================

    def list_sessions(self, force_refresh: bool = False) -> list[SessionSummaryView]:
        """
        List all sessions under the root, newest first.

        Args:
            force_refresh: Scan even if a cached list is still current

        Returns:
            One view per scanned session, including missing/corrupted ones
        """
        with self._lock:
            generation = self._generation
            if not force_refresh and self._watcher is not None and self._cache is not None:
                cached_generation, cached_views = self._cache
                if cached_generation == generation:
                    return list(cached_views)

        sessions = scan_sessions(self.root_path, self.meta_file_name)
        views = [to_summary_view(session, self.root_path) for session in sessions]

        with self._lock:
            # A change seen mid-scan leaves the cache stale
            self._cache = (generation, views)
        return list(views)

    def get_session_detail(self, session_id: str, session_path: Path | str) -> SessionDetailView | None:
        """
        Load one session's detail view.

        Returns:
            The detail view, or None when the metadata is missing or invalid
        """
        resolved = Path(os.path.abspath(session_path))
        meta = load_session_meta(resolved, self.meta_file_name)
        if meta.summary is None:
            return None
        if meta.summary.id != session_id:
            logger.debug(f'Detail requested for {session_id} but {resolved} holds {meta.summary.id}')
        return to_detail_view(meta, resolved)

    # ==========================================================================
    # Guarded Operations
    # ==========================================================================

    def resume_session(self, session_id: str, session_path: str) -> ResumeSessionResponse:
        """Validate the request and resume the session in a new terminal."""
        try:
            session_id, resolved = _validate_request(session_id, session_path, ResumeSessionError)
            result = resume_session(
                session_id,
                resolved,
                self.meta_file_name,
                self.cli_path,
                terminal=self.terminal,
            )
        except SessionOperationError as e:
            return ResumeSessionResponse(success=False, error=OperationErrorInfo(code=e.code, message=e.message))
        except Exception as e:
            logger.exception(f'Unexpected error resuming session {session_id}')
            return ResumeSessionResponse(
                success=False,
                error=OperationErrorInfo(code='SPAWN_FAILED', message=str(e) or 'Unknown error resuming session'),
            )
        return ResumeSessionResponse(success=True, result=result)

    def delete_session(self, session_id: str, session_path: str) -> DeleteSessionResponse:
        """Validate the request and delete the session. Not undoable."""
        try:
            session_id, resolved = _validate_request(session_id, session_path, DeleteSessionError)
            result = delete_session(session_id, resolved, self.meta_file_name)
        except SessionOperationError as e:
            return DeleteSessionResponse(success=False, error=OperationErrorInfo(code=e.code, message=e.message))
        except Exception as e:
            logger.exception(f'Unexpected error deleting session {session_id}')
            return DeleteSessionResponse(
                success=False,
                error=OperationErrorInfo(code='REMOVE_FAILED', message=str(e) or 'Unknown error deleting session'),
            )
        self._invalidate()
        return DeleteSessionResponse(success=True, result=result)

    # ==========================================================================
    # Change Notifications
    # ==========================================================================

    def subscribe_to_changes(self, callback: SessionEventCallback) -> Callable[[], None]:
        """
        Register for session change events, starting the watcher if needed.

        If the watcher cannot start, callback receives an error event before
        this returns.

        Returns:
            Function removing the subscription (safe to call more than once)
        """
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback

        self.start_watching()

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def start_watching(self) -> bool:
        """Start the watcher if it is not running. Returns whether it runs."""
        with self._lock:
            if self._watcher is not None:
                return True

        watcher = create_session_watcher(self.root_path, self._on_watch_event)
        if watcher is None:
            return False

        with self._lock:
            if self._watcher is None:
                self._watcher = watcher
                return True
        # Lost a race with another starter
        watcher.dispose()
        return True

    @property
    def watching(self) -> bool:
        return self._watcher is not None

    def close(self) -> None:
        """Release the watcher and drop all subscriptions."""
        with self._lock:
            watcher, self._watcher = self._watcher, None
            self._subscribers.clear()
            self._cache = None
        if watcher is not None:
            watcher.dispose()

    def __enter__(self) -> SessionManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _invalidate(self) -> None:
        with self._lock:
            self._generation += 1

    def _drop_watcher(self) -> None:
        with self._lock:
            watcher, self._watcher = self._watcher, None
            self._generation += 1
        if watcher is not None:
            watcher.dispose()

    def _on_watch_event(self, event: SessionWatcherEvent) -> None:
        if isinstance(event, WatchUpdated):
            self._invalidate()
            session_event = SessionEvent(kind='updated', path=event.path)
        else:
            # The watch is dead; fall back to scanning on every list call
            self._drop_watcher()
            session_event = SessionEvent(kind='error', message=str(event.cause) or 'Unknown session watcher error.')

        with self._lock:
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            try:
                callback(session_event)
            except Exception:
                logger.exception('Session change subscriber failed')


# ==============================================================================
# Request Validation
# ==============================================================================


def _validate_request(
    session_id: str | None,
    session_path: str | None,
    error_class: type[ResumeSessionError] | type[DeleteSessionError],
) -> tuple[str, Path]:
    """Trim and check request fields before an operation runs."""
    normalized_id = (session_id or '').strip()
    normalized_path = (session_path or '').strip()

    if not normalized_id or not is_session_id(normalized_id):
        raise error_class('INVALID_ID', f'Session id "{normalized_id}" is not valid')
    if not normalized_path:
        raise error_class('MISSING_META', 'Session path is required')

    return normalized_id, Path(os.path.abspath(normalized_path))


# ==============================================================================
# View Mapping
# ==============================================================================


def to_summary_view(session: ScannedSession, root_path: Path) -> SessionSummaryView:
    """
    Flatten a scanned session for listing.

    Fields missing from an invalid session fall back to its raw payload, then
    to filesystem-derived or 'unknown' values.
    """
    meta = session.meta
    summary = meta.summary
    raw = meta.raw_payload or {}
    relative_path = _relative_to_root(session.session_path, root_path)

    if summary is not None:
        return SessionSummaryView(
            id=summary.id,
            created_at_iso=summary.created_at_iso,
            cwd=summary.cwd,
            originator=summary.originator,
            cli_version=summary.cli_version,
            instructions=display_instructions(summary.instructions),
            status=meta.status,
            session_path=session.session_path,
            metadata_path=meta.meta_path,
        )

    fallback_time = session.file_stats.mtime or session.file_stats.ctime or datetime.now(UTC).timestamp()
    return SessionSummaryView(
        id=_raw_str(raw, 'id') or relative_path,
        created_at_iso=_iso_from_timestamp(fallback_time),
        cwd=_raw_str(raw, 'cwd') or session.session_path,
        originator=_raw_str(raw, 'originator') or 'unknown',
        cli_version=_raw_str(raw, 'cli_version') or 'unknown',
        instructions=display_instructions(parse_instructions(raw.get('instructions'))),
        status=meta.status,
        session_path=session.session_path,
        metadata_path=meta.meta_path,
        error_code=meta.error.code if meta.error else None,
    )


def to_detail_view(meta: NormalizedSessionMeta, session_path: Path) -> SessionDetailView:
    """Build the detail view of a session with valid metadata."""
    summary = meta.summary
    if summary is None:
        raise ValueError('Detail view requires a valid summary')
    return SessionDetailView(
        id=summary.id,
        created_at_iso=summary.created_at_iso,
        cwd=summary.cwd,
        originator=summary.originator,
        cli_version=summary.cli_version,
        source=summary.source,
        instructions=display_instructions(summary.instructions),
        status=meta.status,
        session_path=str(session_path),
        metadata_path=meta.meta_path,
        etag=meta.etag,
    )


def _relative_to_root(session_path: str, root_path: Path) -> str:
    root = str(root_path)
    if session_path.startswith(root):
        return session_path[len(root) :].lstrip('/\\')
    return session_path


def _raw_str(raw: dict[str, object], key: str) -> str | None:
    value = raw.get(key)
    return value if isinstance(value, str) and value else None


def _iso_from_timestamp(timestamp: float) -> str:
    """Format epoch seconds as ISO-8601 UTC with millisecond precision and a Z suffix."""
    return datetime.fromtimestamp(timestamp, UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
