"""
Shared exceptions for codex-sessions.

Domain-specific exceptions raised by the guarded session operations.

Exception Hierarchy:
    CodexSessionError (base)
    └── SessionOperationError (guarded operation failures, carries a stable code)
        ├── ResumeSessionError (resume refused or failed to launch)
        └── DeleteSessionError (delete refused or failed to remove)

Error codes are stable strings consumed by presentation layers. Warning-class
codes describe a refused request; error-class codes describe an operation that
was attempted and failed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

__all__ = [
    'ERROR_SEVERITY',
    'CodexSessionError',
    'DeleteSessionError',
    'DeleteSessionErrorCode',
    'ErrorSeverity',
    'ResumeSessionError',
    'ResumeSessionErrorCode',
    'SessionOperationError',
    'SessionOperationErrorCode',
]

type ResumeSessionErrorCode = Literal['INVALID_ID', 'MISSING_META', 'ID_MISMATCH', 'CLI_NOT_FOUND', 'SPAWN_FAILED']
type DeleteSessionErrorCode = Literal['INVALID_ID', 'MISSING_META', 'ID_MISMATCH', 'REMOVE_FAILED']
type SessionOperationErrorCode = Literal[
    'INVALID_ID',
    'MISSING_META',
    'ID_MISMATCH',
    'CLI_NOT_FOUND',
    'SPAWN_FAILED',
    'REMOVE_FAILED',
]
type ErrorSeverity = Literal['warning', 'error']

ERROR_SEVERITY: Mapping[str, ErrorSeverity] = {
    'CLI_NOT_FOUND': 'warning',
    'INVALID_ID': 'warning',
    'MISSING_META': 'warning',
    'ID_MISMATCH': 'warning',
    'SPAWN_FAILED': 'error',
    'REMOVE_FAILED': 'error',
}


class CodexSessionError(Exception):
    """Base exception for all codex-sessions errors."""


class SessionOperationError(CodexSessionError):
    """Base exception for resume/delete failures.

    Attributes:
        code: Stable error code (see ERROR_SEVERITY)
        message: Human-readable message
        cause: Underlying exception or loader error, if any
    """

    def __init__(self, code: SessionOperationErrorCode, message: str, cause: object | None = None) -> None:
        self.code = code
        self.message = message
        self.cause = cause
        super().__init__(message)

    @property
    def severity(self) -> ErrorSeverity:
        return ERROR_SEVERITY.get(self.code, 'error')

    def __repr__(self) -> str:
        return f'{type(self).__name__}(code={self.code!r}, message={self.message!r})'


class ResumeSessionError(SessionOperationError):
    """Raised when a session cannot be resumed."""

    def __init__(self, code: ResumeSessionErrorCode, message: str, cause: object | None = None) -> None:
        super().__init__(code, message, cause)


class DeleteSessionError(SessionOperationError):
    """Raised when a session cannot be deleted."""

    def __init__(self, code: DeleteSessionErrorCode, message: str, cause: object | None = None) -> None:
        super().__init__(code, message, cause)
