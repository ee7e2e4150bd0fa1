"""
Shared type definitions for schemas.

Centralizes common type annotations used across metadata and operation schemas.
"""

from __future__ import annotations

from typing import Literal


type PathStr = str
"""A filesystem path (file or directory) as a string."""

type SessionMetaStatus = Literal['ok', 'missing', 'corrupted']
"""Outcome of loading one session's metadata."""

type SessionMetaErrorCode = Literal[
    'MISSING_FILE',  # Session path or its meta file does not exist
    'INVALID_FILE',  # Not a regular file, wrong record type, no meta record in log, bad field types
    'INVALID_JSON',  # Single-record meta file is not parseable JSON
    'MISSING_FIELDS',  # Required payload fields absent or null
    'INVALID_ID',  # Payload id is not a UUIDv7
    'INVALID_TIMESTAMP',  # Payload timestamp is not a parseable date/time
]
