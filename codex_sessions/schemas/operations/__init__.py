"""
Operation schemas for service results.

This package contains Pydantic models returned by the scanner, the guarded
resume/delete operations, and the consumer-facing session manager.
"""

from __future__ import annotations

from codex_sessions.schemas.operations.delete import DeleteResult
from codex_sessions.schemas.operations.events import SessionEvent
from codex_sessions.schemas.operations.responses import (
    DeleteSessionResponse,
    OperationErrorInfo,
    ResumeSessionResponse,
)
from codex_sessions.schemas.operations.resume import ResumeResult
from codex_sessions.schemas.operations.scan import FileStats, ScannedSession
from codex_sessions.schemas.operations.views import SessionDetailView, SessionSummaryView

__all__ = [
    # Scan
    'FileStats',
    'ScannedSession',
    # Resume
    'ResumeResult',
    'ResumeSessionResponse',
    # Delete
    'DeleteResult',
    'DeleteSessionResponse',
    # Shared
    'OperationErrorInfo',
    # Events
    'SessionEvent',
    # Views
    'SessionDetailView',
    'SessionSummaryView',
]
