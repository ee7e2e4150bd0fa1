"""
Session change event schema.

Delivered to subscribers of the session manager. `updated` means the session
tree changed and the list should be re-fetched; `error` carries a message
describing a watch failure.
"""

from __future__ import annotations

from typing import Literal

from codex_sessions.base_model import StrictModel
from codex_sessions.schemas.types import PathStr


class SessionEvent(StrictModel):
    kind: Literal['updated', 'error']
    path: PathStr | None = None  # Changed path, for 'updated'
    message: str | None = None  # Failure description, for 'error'
