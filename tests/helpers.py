"""Builders for on-disk Codex session fixtures."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

SESSION_ID = '0199dc75-7be5-7ae2-98a3-5be0079041b5'
OTHER_SESSION_ID = '0199e18a-70b1-72e0-a75d-94fa9223ca99'
UUID4_ID = '3f2b8c1e-9d4a-4c6b-8e2f-1a2b3c4d5e6f'


def make_meta_record(
    session_id: str = SESSION_ID,
    timestamp: str = '2025-10-13T07:25:11.013Z',
    *,
    drop: Iterable[str] = (),
    **payload_overrides: Any,
) -> dict[str, Any]:
    """A `session_meta` record as the Codex CLI writes it."""
    payload: dict[str, Any] = {
        'id': session_id,
        'timestamp': timestamp,
        'cwd': '/home/dev/projects/session_manager',
        'originator': 'codex_cli_rs',
        'cli_version': '0.46.0',
        'instructions': None,
        'source': 'cli',
    }
    payload.update(payload_overrides)
    for field in drop:
        payload.pop(field)
    return {'timestamp': timestamp, 'type': 'session_meta', 'payload': payload}


def make_log_record(text: str = 'hello') -> dict[str, Any]:
    """A non-metadata log line."""
    return {
        'timestamp': '2025-10-13T07:26:00.000Z',
        'type': 'response_item',
        'payload': {'type': 'message', 'role': 'assistant', 'content': [{'type': 'text', 'text': text}]},
    }


def write_session_dir(parent: Path, name: str, record: dict[str, Any] | None = None, raw: str | None = None) -> Path:
    """Create a session directory; writes `session_meta` unless both record and raw are None."""
    session_dir = parent / name
    session_dir.mkdir(parents=True)
    if raw is not None:
        (session_dir / 'session_meta').write_text(raw, encoding='utf-8')
    elif record is not None:
        (session_dir / 'session_meta').write_text(json.dumps(record), encoding='utf-8')
    return session_dir


def write_session_log(parent: Path, name: str, lines: Iterable[dict[str, Any] | str]) -> Path:
    """Create a `.jsonl` session log; string lines are written verbatim."""
    parent.mkdir(parents=True, exist_ok=True)
    log_path = parent / name
    rendered = [line if isinstance(line, str) else json.dumps(line) for line in lines]
    log_path.write_text('\n'.join(rendered) + '\n', encoding='utf-8')
    return log_path
