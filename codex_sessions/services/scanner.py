"""
Session scanner - finds every session under a root directory.

Walks the tree depth-first with an explicit stack (no recursion limit).
Session candidates are:
- directories containing a `session_meta` file
- `.jsonl` files

A directory that is a session is still descended into; sessions may nest.
Paths that cannot be statted or listed are skipped without aborting the scan.

Results are ordered newest first by metadata creation time, falling back to
file modification time, then creation time. Sessions with exactly equal sort
keys have no defined relative order.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from codex_sessions.paths import DEFAULT_META_FILE, SESSION_LOG_SUFFIX
from codex_sessions.schemas.operations.scan import FileStats, ScannedSession
from codex_sessions.schemas.session_meta import NormalizedSessionMeta
from codex_sessions.services.meta import load_session_meta

__all__ = [
    'compute_sort_key',
    'scan_sessions',
]

logger = logging.getLogger(__name__)


def scan_sessions(root_path: Path | str, meta_file_name: str = DEFAULT_META_FILE) -> list[ScannedSession]:
    """
    Discover all sessions under root_path.

    Args:
        root_path: Directory to walk (a missing root yields an empty list)
        meta_file_name: File name marking a directory as a session

    Returns:
        Sessions ordered newest first

    Raises:
        OSError: If reading a candidate's metadata fails for a reason other
            than the file being absent (see load_session_meta)
    """
    root = Path(os.path.abspath(root_path))
    candidates: list[tuple[float, ScannedSession]] = []
    visited_dirs: set[tuple[int, int]] = set()
    stack: list[Path] = [root]

    while stack:
        current = stack.pop()

        try:
            current_stats = current.stat()
        except OSError as e:
            logger.debug(f'Skipping {current}: {e}')
            continue

        if stat.S_ISDIR(current_stats.st_mode):
            # Symlinked directories can form cycles
            dir_key = (current_stats.st_dev, current_stats.st_ino)
            if dir_key in visited_dirs:
                continue
            visited_dirs.add(dir_key)

            if _has_meta_file(current, meta_file_name):
                candidates.append(_record(current, current_stats, meta_file_name))

            try:
                entries = os.listdir(current)
            except OSError as e:
                logger.debug(f'Cannot list {current}: {e}')
                continue

            stack.extend(current / entry for entry in entries)
            continue

        if stat.S_ISREG(current_stats.st_mode) and current.name.endswith(SESSION_LOG_SUFFIX):
            candidates.append(_record(current, current_stats, meta_file_name))

    # list.sort is stable; reverse=True keeps discovery order among ties
    candidates.sort(key=lambda item: item[0], reverse=True)
    logger.info(f'Found {len(candidates)} session(s) under {root}')
    return [session for _, session in candidates]


def compute_sort_key(meta: NormalizedSessionMeta, file_stats: FileStats) -> float:
    """Creation time from metadata, else mtime, else ctime, else 0 (seconds)."""
    if meta.status == 'ok' and meta.summary is not None:
        return meta.summary.created_at.timestamp()
    return file_stats.mtime or file_stats.ctime or 0.0


def _has_meta_file(directory: Path, meta_file_name: str) -> bool:
    try:
        return (directory / meta_file_name).exists()
    except OSError:
        return False


def _record(path: Path, path_stats: os.stat_result, meta_file_name: str) -> tuple[float, ScannedSession]:
    meta = load_session_meta(path, meta_file_name)
    file_stats = FileStats(
        mtime=path_stats.st_mtime,
        ctime=getattr(path_stats, 'st_birthtime', path_stats.st_ctime),
    )
    session = ScannedSession(session_path=str(path), meta=meta, file_stats=file_stats)
    return compute_sort_key(meta, file_stats), session
