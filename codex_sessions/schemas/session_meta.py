"""
Session metadata schemas.

Models for the `session_meta` record written by the Codex CLI and for the
normalized result produced by the metadata loader.

Wire shape:
    {"type": "session_meta", "payload": {"id", "timestamp", "cwd", "originator",
     "cli_version", "instructions", "source"}}
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime
from typing import Annotated, Any, Literal, Self

import pydantic

from codex_sessions.base_model import StrictModel
from codex_sessions.schemas.types import PathStr, SessionMetaErrorCode, SessionMetaStatus

__all__ = [
    'REQUIRED_PAYLOAD_FIELDS',
    'Instructions',
    'NormalizedSessionMeta',
    'SessionMetaError',
    'SessionMetaPayload',
    'SessionSummary',
    'StructuredInstructions',
    'TextInstructions',
    'display_instructions',
    'parse_instructions',
]

# Every payload field except `instructions` must be present and non-null
REQUIRED_PAYLOAD_FIELDS: Sequence[str] = ('id', 'timestamp', 'cwd', 'originator', 'cli_version', 'source')


# ==============================================================================
# Instructions
# ==============================================================================


class TextInstructions(StrictModel):
    """Instructions stored as plain text."""

    kind: Literal['text'] = 'text'
    text: str

    def display(self) -> str:
        return self.text


class StructuredInstructions(StrictModel):
    """Instructions stored as any other JSON value (object, array, number, bool)."""

    kind: Literal['structured'] = 'structured'
    value: pydantic.JsonValue

    def display(self) -> str:
        return json.dumps(self.value, ensure_ascii=False)


type Instructions = Annotated[TextInstructions | StructuredInstructions, pydantic.Field(discriminator='kind')]
"""Opaque instructions; absence is represented by None."""


def parse_instructions(raw: object) -> TextInstructions | StructuredInstructions | None:
    """Wrap a raw `instructions` value in its variant."""
    if raw is None:
        return None
    if isinstance(raw, str):
        return TextInstructions(text=raw)
    return StructuredInstructions(value=raw)


def display_instructions(instructions: TextInstructions | StructuredInstructions | None) -> str | None:
    """Stringify instructions for display."""
    return instructions.display() if instructions is not None else None


# ==============================================================================
# Wire Payload
# ==============================================================================


class SessionMetaPayload(StrictModel):
    """Payload of a `session_meta` record.

    Unknown keys are ignored: the CLI owns the format and may add fields.
    """

    model_config = pydantic.ConfigDict(extra='ignore', strict=True, frozen=True)

    id: str
    timestamp: str
    cwd: str
    originator: str
    cli_version: str
    instructions: pydantic.JsonValue = None
    source: str


# ==============================================================================
# Normalized Result
# ==============================================================================


class SessionSummary(StrictModel):
    """Validated view of a session's metadata.

    `created_at_iso` is the timestamp exactly as written by the CLI. Consumers
    needing the wire format must use it rather than re-serializing `created_at`.
    """

    id: str
    created_at: datetime
    created_at_iso: str
    cwd: str
    originator: str
    cli_version: str
    instructions: Instructions | None
    source: str


class SessionMetaError(StrictModel):
    """Why metadata could not be loaded."""

    code: SessionMetaErrorCode
    message: str
    cause: str | None = None
    missing_fields: Sequence[str] | None = None


class NormalizedSessionMeta(StrictModel):
    """Result of loading one session's metadata.

    Invariant: status == 'ok' iff summary is set iff error is None.
    `etag` fingerprints the backing file (path, mtime, size) and is only
    comparable between loads of the same `meta_path`.
    """

    status: SessionMetaStatus
    summary: SessionSummary | None = None
    raw_record: dict[str, Any] | None = None  # Unparsed record, kept even when invalid
    error: SessionMetaError | None = None
    etag: str | None = None
    meta_path: PathStr | None = None

    @pydantic.model_validator(mode='after')
    def check_status_consistency(self) -> Self:
        ok = self.status == 'ok'
        if ok != (self.summary is not None) or ok != (self.error is None):
            raise ValueError(f'Inconsistent metadata result: status={self.status!r}')
        return self

    @property
    def raw_payload(self) -> dict[str, Any] | None:
        """The raw record's payload, if it is an object."""
        if self.raw_record is None:
            return None
        payload = self.raw_record.get('payload')
        return payload if isinstance(payload, dict) else None
