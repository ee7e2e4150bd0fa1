"""
Session metadata loader - reads and validates one session's `session_meta`.

A session is either:
- a directory containing a `session_meta` file (one JSON record), or
- a `.jsonl` append log whose first `session_meta` line is authoritative, or
- any other regular file holding a single `session_meta` record.

Failure policy:
- Absence (path or meta file not found) -> status 'missing'
- Malformation (bad JSON, wrong type, missing fields, bad id/timestamp) -> status 'corrupted'
- Anything else (permissions, disk errors) propagates to the caller. Such
  errors are never reported as 'missing'.
"""

from __future__ import annotations

import json
import logging
import os
import stat
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pydantic

from codex_sessions.paths import DEFAULT_META_FILE, META_RECORD_TYPE, SESSION_LOG_SUFFIX, is_session_id
from codex_sessions.schemas.session_meta import (
    REQUIRED_PAYLOAD_FIELDS,
    NormalizedSessionMeta,
    SessionMetaError,
    SessionMetaPayload,
    SessionSummary,
    parse_instructions,
)
from codex_sessions.schemas.types import SessionMetaErrorCode

__all__ = [
    'create_etag',
    'load_session_meta',
    'parse_timestamp',
]

logger = logging.getLogger(__name__)

# Errors meaning "nothing is there" - everything else is fatal
ABSENT_ERRORS = (FileNotFoundError, NotADirectoryError)


def load_session_meta(session_path: Path | str, meta_file_name: str = DEFAULT_META_FILE) -> NormalizedSessionMeta:
    """
    Load and validate session metadata.

    Args:
        session_path: Session directory, `.jsonl` log, or single-record meta file
        meta_file_name: Meta file name expected inside session directories

    Returns:
        NormalizedSessionMeta describing the outcome. `meta_path` is None only
        when the session path itself does not exist.

    Raises:
        OSError: On I/O failures other than the resource being absent
    """
    resolved = Path(os.path.abspath(session_path))

    try:
        session_stats = resolved.stat()
    except ABSENT_ERRORS:
        return _missing(f'Missing session resource at {resolved}', meta_path=None)

    if stat.S_ISREG(session_stats.st_mode):
        etag = create_etag(resolved, session_stats)
        if resolved.name.endswith(SESSION_LOG_SUFFIX):
            return _load_from_log(resolved, etag)
        return _load_single_record(resolved, etag)

    if stat.S_ISDIR(session_stats.st_mode):
        meta_path = resolved / meta_file_name
        try:
            meta_stats = meta_path.stat()
        except ABSENT_ERRORS:
            return _missing(f'Missing {meta_file_name} at {meta_path}', meta_path=meta_path)

        etag = create_etag(meta_path, meta_stats)
        if not stat.S_ISREG(meta_stats.st_mode):
            return _corrupted('INVALID_FILE', f'{meta_file_name} is not a file', meta_path=meta_path, etag=etag)
        return _load_single_record(meta_path, etag)

    return _corrupted(
        'INVALID_FILE',
        f'Unsupported session resource at {resolved}',
        meta_path=resolved,
        etag=create_etag(resolved, session_stats),
    )


def create_etag(path: Path, stats: os.stat_result | None) -> str:
    """Fingerprint a file from its modification time and size (not a content hash)."""
    if stats is None:
        return f'{path}:0:0'
    return f'{path}:{stats.st_mtime_ns}:{stats.st_size}'


def parse_timestamp(value: object) -> datetime | None:
    """
    Parse an ISO-8601 timestamp.

    Timestamps without a UTC offset are taken as UTC.

    Returns:
        Timezone-aware datetime, or None if value is not a parseable string
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# ==============================================================================
# Readers
# ==============================================================================


def _read_text(path: Path) -> str | None:
    """Read a file as UTF-8. Returns None if it vanished since it was statted."""
    try:
        return path.read_text(encoding='utf-8')
    except ABSENT_ERRORS:
        return None


def _read_bytes(path: Path) -> bytes | None:
    """Read a file's raw bytes. Returns None if it vanished since it was statted."""
    try:
        return path.read_bytes()
    except ABSENT_ERRORS:
        return None


def _load_from_log(path: Path, etag: str) -> NormalizedSessionMeta:
    """Find the first `session_meta` line in a JSONL log.

    Lines are decoded one at a time; undecodable or unparseable lines are
    skipped, and so are lines of other record types. The first matching line
    wins even if later lines also claim to be metadata.
    """
    data = _read_bytes(path)
    if data is None:
        return _missing(f'Missing session resource at {path}', meta_path=path)

    skipped = 0
    for raw_line in data.split(b'\n'):
        if not raw_line.strip():
            continue
        try:
            record = json.loads(raw_line.decode('utf-8'))
        except ValueError:
            # UnicodeDecodeError included: a line cut mid-character while the CLI writes
            skipped += 1
            continue
        if isinstance(record, dict) and record.get('type') == META_RECORD_TYPE:
            if skipped:
                logger.debug(f'Skipped {skipped} malformed line(s) before {META_RECORD_TYPE} in {path}')
            return _normalize_record(path, record, etag)

    return _corrupted(
        'INVALID_FILE',
        f'Unable to locate {META_RECORD_TYPE} entry inside {path}',
        meta_path=path,
        etag=etag,
    )


def _load_single_record(path: Path, etag: str) -> NormalizedSessionMeta:
    """Parse a file holding exactly one JSON record."""
    try:
        text = _read_text(path)
    except UnicodeDecodeError as e:
        return _corrupted('INVALID_JSON', f'Unable to decode {path} as UTF-8', meta_path=path, etag=etag, cause=e)
    if text is None:
        return _missing(f'Missing session resource at {path}', meta_path=path)

    try:
        record = json.loads(text)
    except ValueError as e:
        return _corrupted('INVALID_JSON', f'Unable to parse JSON at {path}', meta_path=path, etag=etag, cause=e)

    return _normalize_record(path, record, etag)


# ==============================================================================
# Validation
# ==============================================================================


def _normalize_record(path: Path, record: Any, etag: str) -> NormalizedSessionMeta:
    """Validate a candidate record and build the summary."""
    if not isinstance(record, dict):
        return _corrupted(
            'INVALID_FILE',
            f'Expected a JSON object in {path}, got {type(record).__name__}',
            meta_path=path,
            etag=etag,
        )

    raw_record: dict[str, Any] = record
    record_type = record.get('type')
    if record_type != META_RECORD_TYPE:
        return _corrupted(
            'INVALID_FILE',
            f'Unexpected meta type "{record_type}"',
            meta_path=path,
            etag=etag,
            raw_record=raw_record,
        )

    payload = record.get('payload')
    if not isinstance(payload, dict):
        payload = {}

    missing_fields = [field for field in REQUIRED_PAYLOAD_FIELDS if payload.get(field) is None]
    if missing_fields:
        return _corrupted(
            'MISSING_FIELDS',
            f'{META_RECORD_TYPE} is missing required fields: {", ".join(missing_fields)}',
            meta_path=path,
            etag=etag,
            raw_record=raw_record,
            missing_fields=missing_fields,
        )

    session_id = payload['id']
    if not is_session_id(session_id):
        return _corrupted(
            'INVALID_ID',
            f'Invalid session id "{session_id}"',
            meta_path=path,
            etag=etag,
            raw_record=raw_record,
        )

    created_at = parse_timestamp(payload['timestamp'])
    if created_at is None:
        return _corrupted(
            'INVALID_TIMESTAMP',
            f'Invalid timestamp "{payload["timestamp"]}"',
            meta_path=path,
            etag=etag,
            raw_record=raw_record,
        )

    try:
        parsed = SessionMetaPayload.model_validate(payload)
    except pydantic.ValidationError as e:
        fields = sorted({str(err['loc'][0]) for err in e.errors() if err['loc']})
        return _corrupted(
            'INVALID_FILE',
            f'{META_RECORD_TYPE} has fields of the wrong type: {", ".join(fields)}',
            meta_path=path,
            etag=etag,
            raw_record=raw_record,
            cause=e,
        )

    summary = SessionSummary(
        id=parsed.id,
        created_at=created_at,
        created_at_iso=parsed.timestamp,
        cwd=parsed.cwd,
        originator=parsed.originator,
        cli_version=parsed.cli_version,
        instructions=parse_instructions(parsed.instructions),
        source=parsed.source,
    )

    return NormalizedSessionMeta(
        status='ok',
        summary=summary,
        raw_record=raw_record,
        etag=etag,
        meta_path=str(path),
    )


# ==============================================================================
# Result Builders
# ==============================================================================


def _missing(message: str, meta_path: Path | None) -> NormalizedSessionMeta:
    return NormalizedSessionMeta(
        status='missing',
        error=SessionMetaError(code='MISSING_FILE', message=message),
        meta_path=str(meta_path) if meta_path is not None else None,
    )


def _corrupted(
    code: SessionMetaErrorCode,
    message: str,
    *,
    meta_path: Path,
    etag: str | None,
    raw_record: dict[str, Any] | None = None,
    missing_fields: list[str] | None = None,
    cause: BaseException | None = None,
) -> NormalizedSessionMeta:
    return NormalizedSessionMeta(
        status='corrupted',
        raw_record=raw_record,
        error=SessionMetaError(
            code=code,
            message=message,
            cause=str(cause) if cause is not None else None,
            missing_fields=missing_fields,
        ),
        etag=etag,
        meta_path=str(meta_path),
    )
