"""
Delete operation schemas.
"""

from __future__ import annotations

from codex_sessions.base_model import StrictModel
from codex_sessions.schemas.types import PathStr


class DeleteResult(StrictModel):
    """Execution result."""

    session_id: str
    removed_path: PathStr
    # True when the path embedding the id was what authorized the removal
    # (metadata was unusable or named a different session)
    matched_by_path: bool = False
