"""
Consumer-facing view schemas.

Flattened session representations handed to presentation layers (CLI, MCP).
Summary views are built for every scanned session, including missing and
corrupted ones, using whatever raw metadata survived.
"""

from __future__ import annotations

from codex_sessions.base_model import StrictModel
from codex_sessions.schemas.types import PathStr, SessionMetaErrorCode, SessionMetaStatus


class SessionSummaryView(StrictModel):
    """Row in the session list."""

    id: str  # Falls back to raw payload id, then root-relative path
    created_at_iso: str
    cwd: str
    originator: str
    cli_version: str
    instructions: str | None  # Stringified for display
    status: SessionMetaStatus
    session_path: PathStr
    metadata_path: PathStr | None
    error_code: SessionMetaErrorCode | None = None


class SessionDetailView(StrictModel):
    """Detail pane for one valid session."""

    id: str
    created_at_iso: str
    cwd: str
    originator: str
    cli_version: str
    source: str
    instructions: str | None
    status: SessionMetaStatus
    session_path: PathStr
    metadata_path: PathStr | None
    etag: str | None
    notes: str | None = None
