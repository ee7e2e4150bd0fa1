"""
Operation response envelopes.

Resume and delete never raise across the consumer boundary: every outcome is
reported as a response carrying either a result or a stable error code.
"""

from __future__ import annotations

from codex_sessions.base_model import StrictModel
from codex_sessions.exceptions import SessionOperationErrorCode
from codex_sessions.schemas.operations.delete import DeleteResult
from codex_sessions.schemas.operations.resume import ResumeResult


class OperationErrorInfo(StrictModel):
    """Error code plus human-readable message."""

    code: SessionOperationErrorCode
    message: str


class ResumeSessionResponse(StrictModel):
    success: bool
    result: ResumeResult | None = None
    error: OperationErrorInfo | None = None


class DeleteSessionResponse(StrictModel):
    success: bool
    result: DeleteResult | None = None
    error: OperationErrorInfo | None = None
