"""
Scan operation schemas.

Models for sessions discovered by the directory scanner. A fresh list is built
on every scan; entries carry no identity across scans beyond path and id.
"""

from __future__ import annotations

from codex_sessions.base_model import StrictModel
from codex_sessions.schemas.session_meta import NormalizedSessionMeta
from codex_sessions.schemas.types import PathStr


class FileStats(StrictModel):
    """Filesystem timestamps of a session path (seconds since the epoch)."""

    mtime: float
    ctime: float  # Birth time where the platform reports it, else status-change time


class ScannedSession(StrictModel):
    """One session candidate found under the root."""

    session_path: PathStr  # Session directory or .jsonl log file
    meta: NormalizedSessionMeta
    file_stats: FileStats
