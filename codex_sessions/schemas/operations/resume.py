"""
Resume operation schemas.
"""

from __future__ import annotations

from codex_sessions.base_model import StrictModel
from codex_sessions.schemas.types import PathStr


class ResumeResult(StrictModel):
    """Outcome of launching `codex resume` for a session."""

    session_id: str
    meta_path: PathStr
    cli_path: PathStr | None  # None when no executable was found
    command: str  # Exact shell command that was launched
    simulated: bool  # True when a placeholder echo ran instead of the CLI
