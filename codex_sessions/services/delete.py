"""
Session delete service - guarded, non-undoable removal of a session.

Safety checks before anything is removed:
- The requested id must be a UUIDv7
- The session path must exist
- The session's metadata must load and name the requested id

Path identity fallback:
    When metadata is unusable or names a different session, removal still
    proceeds if the requested id appears in the session path (any component,
    case-insensitive). Sessions with broken metadata can then be cleaned up
    as long as their file or directory name carries the id. The result
    reports `matched_by_path=True` when this fallback authorized the removal.

Removal is recursive and forced. A target that disappears before or during
removal counts as removed. Callers must obtain explicit confirmation first.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from collections.abc import Callable
from pathlib import Path
from typing import Any

from codex_sessions.exceptions import DeleteSessionError
from codex_sessions.paths import DEFAULT_META_FILE, is_session_id
from codex_sessions.schemas.operations.delete import DeleteResult
from codex_sessions.services.meta import load_session_meta

__all__ = [
    'delete_session',
    'path_matches_session',
]

logger = logging.getLogger(__name__)


def delete_session(
    session_id: str,
    session_path: Path | str,
    meta_file_name: str = DEFAULT_META_FILE,
) -> DeleteResult:
    """
    Delete a session directory or log file after verifying its identity.

    Args:
        session_id: UUIDv7 of the session to delete
        session_path: Session directory or log file
        meta_file_name: Meta file name inside session directories

    Returns:
        DeleteResult naming the removed path

    Raises:
        DeleteSessionError: INVALID_ID, MISSING_META, ID_MISMATCH or REMOVE_FAILED
        OSError: If metadata cannot be read for reasons other than absence
    """
    normalized_id = session_id.strip()
    if not is_session_id(normalized_id):
        raise DeleteSessionError('INVALID_ID', f'Session id "{session_id}" is not a valid UUIDv7')

    resolved_path = Path(os.path.abspath(session_path))
    try:
        resolved_path.stat()
    except OSError as e:
        raise DeleteSessionError('MISSING_META', f'Session path "{resolved_path}" does not exist', cause=e) from e

    meta = load_session_meta(resolved_path, meta_file_name)
    matches_path = path_matches_session(resolved_path, normalized_id)

    if meta.status != 'ok' or meta.summary is None:
        if not matches_path:
            raise DeleteSessionError(
                'MISSING_META',
                meta.error.message if meta.error else f'Unable to read session metadata for "{resolved_path}"',
                cause=meta.error,
            )
        logger.warning(f'Deleting {resolved_path} by path identity: metadata is {meta.status}')
    elif meta.summary.id != normalized_id:
        if not matches_path:
            raise DeleteSessionError(
                'ID_MISMATCH',
                f'Session id mismatch: requested({normalized_id}) vs meta({meta.summary.id})',
            )
        logger.warning(f'Deleting {resolved_path} by path identity: metadata names {meta.summary.id}')
    else:
        # Metadata confirmed the id; the path match played no part
        matches_path = False

    try:
        _remove_path(resolved_path)
    except OSError as e:
        logger.error(f'Failed to delete session at {resolved_path}: {e}')
        raise DeleteSessionError('REMOVE_FAILED', f'Failed to delete session at "{resolved_path}"', cause=e) from e

    logger.info(f'Deleted session {normalized_id} at {resolved_path}')
    return DeleteResult(session_id=normalized_id, removed_path=str(resolved_path), matched_by_path=matches_path)


def path_matches_session(path: Path | str, session_id: str) -> bool:
    """Check whether the session id appears in the path (case-insensitive)."""
    lower_id = session_id.lower()
    lower_path = str(path).lower()
    if lower_id in lower_path:
        return True
    return lower_id in os.path.basename(lower_path)


# ==============================================================================
# Removal
# ==============================================================================


def _remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree. Already-gone counts as success."""
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        return

    if stat.S_ISDIR(mode):
        try:
            shutil.rmtree(path, onexc=_force_remove)
        except FileNotFoundError:
            pass
        return

    try:
        path.unlink()
    except FileNotFoundError:
        return
    except PermissionError as e:
        _force_remove(os.unlink, str(path), e)


def _force_remove(func: Callable[..., Any], path: str, exc: BaseException) -> None:
    """rmtree error handler: skip vanished entries, clear a read-only bit once."""
    if isinstance(exc, FileNotFoundError):
        return
    if not isinstance(exc, PermissionError) or func not in (os.unlink, os.remove, os.rmdir):
        raise exc

    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        return
    if mode & stat.S_IWUSR:
        # Entry is writable; the denial lies elsewhere (e.g. the parent directory)
        raise exc

    os.chmod(path, stat.S_IMODE(mode) | stat.S_IWUSR)
    try:
        func(path)
    except FileNotFoundError:
        return
