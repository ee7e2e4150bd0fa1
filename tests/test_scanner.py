"""Tests for session discovery and ordering."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from helpers import (
    OTHER_SESSION_ID,
    SESSION_ID,
    make_log_record,
    make_meta_record,
    write_session_dir,
    write_session_log,
)

from codex_sessions.schemas.operations import FileStats
from codex_sessions.services.meta import load_session_meta
from codex_sessions.services.scanner import compute_sort_key, scan_sessions

THIRD_SESSION_ID = '0199f0a1-1c2d-7e3f-8a4b-5c6d7e8f9a0b'

# Epoch seconds used to pin file modification times
YEAR_2000 = 946684800.0
YEAR_2030 = 1893456000.0


def test_missing_root_yields_nothing(tmp_path: Path) -> None:
    assert scan_sessions(tmp_path / 'does-not-exist') == []


def test_empty_root_yields_nothing(session_root: Path) -> None:
    assert scan_sessions(session_root) == []


def test_finds_directory_session(session_root: Path) -> None:
    session_dir = write_session_dir(session_root / '2025' / '10' / '13', 'rollout-a', make_meta_record())

    sessions = scan_sessions(session_root)

    assert len(sessions) == 1
    assert sessions[0].session_path == str(session_dir)
    assert sessions[0].meta.status == 'ok'
    assert sessions[0].file_stats.mtime > 0


def test_directories_without_meta_are_not_sessions(session_root: Path) -> None:
    (session_root / 'scratch' / 'deeper').mkdir(parents=True)
    (session_root / 'scratch' / 'notes.txt').write_text('hi', encoding='utf-8')

    assert scan_sessions(session_root) == []


def test_finds_log_sessions_and_ignores_other_files(session_root: Path) -> None:
    log_path = write_session_log(session_root / '2025' / '10', 'rollout.jsonl', [make_meta_record()])
    (session_root / '2025' / 'readme.md').write_text('# notes', encoding='utf-8')
    (session_root / 'rollout.json').write_text('{}', encoding='utf-8')

    sessions = scan_sessions(session_root)

    assert [s.session_path for s in sessions] == [str(log_path)]


def test_newest_first(session_root: Path) -> None:
    write_session_dir(session_root, 'older', make_meta_record(SESSION_ID, '2025-10-13T07:25:11.013Z'))
    write_session_log(
        session_root / 'nested',
        'newer.jsonl',
        [make_meta_record(OTHER_SESSION_ID, '2025-10-15T09:00:00.000Z'), make_log_record()],
    )
    write_session_dir(session_root, 'middle', make_meta_record(THIRD_SESSION_ID, '2025-10-14T00:00:00Z'))

    sessions = scan_sessions(session_root)

    ids = [s.meta.summary.id for s in sessions if s.meta.summary is not None]
    assert ids == [OTHER_SESSION_ID, THIRD_SESSION_ID, SESSION_ID]


def test_nested_sessions_are_both_found(session_root: Path) -> None:
    parent = write_session_dir(session_root, 'parent', make_meta_record(SESSION_ID))
    child = write_session_dir(parent, 'child', make_meta_record(OTHER_SESSION_ID, '2025-10-14T00:00:00Z'))
    log_path = write_session_log(parent, 'rollout.jsonl', [make_meta_record(THIRD_SESSION_ID, '2025-10-12T00:00:00Z')])

    sessions = scan_sessions(session_root)

    assert [s.session_path for s in sessions] == [str(child), str(parent), str(log_path)]


def test_invalid_sessions_sort_by_modification_time(session_root: Path) -> None:
    valid = write_session_dir(session_root, 'valid', make_meta_record())
    future = write_session_log(session_root, 'future.jsonl', [make_log_record()])
    past = write_session_dir(session_root, 'past', raw='{oops')
    os.utime(future, (YEAR_2030, YEAR_2030))
    os.utime(past, (YEAR_2000, YEAR_2000))

    sessions = scan_sessions(session_root)

    assert [s.session_path for s in sessions] == [str(future), str(valid), str(past)]
    assert [s.meta.status for s in sessions] == ['corrupted', 'ok', 'corrupted']


def test_unlistable_directory_is_skipped(session_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    blocked = session_root / 'blocked'
    blocked.mkdir()
    write_session_log(blocked, 'hidden.jsonl', [make_meta_record(OTHER_SESSION_ID)])
    visible = write_session_dir(session_root, 'visible', make_meta_record())

    real_listdir = os.listdir

    def listdir(path: str | Path) -> list[str]:
        if Path(path) == blocked:
            raise PermissionError(13, 'Permission denied', str(path))
        return real_listdir(path)

    monkeypatch.setattr(os, 'listdir', listdir)

    sessions = scan_sessions(session_root)

    assert [s.session_path for s in sessions] == [str(visible)]


@pytest.mark.skipif(sys.platform == 'win32', reason='symlinks need privileges on Windows')
def test_symlink_cycles_terminate(session_root: Path) -> None:
    session_dir = write_session_dir(session_root, 'looped', make_meta_record())
    (session_dir / 'back-to-root').symlink_to(session_root, target_is_directory=True)

    sessions = scan_sessions(session_root)

    assert [s.session_path for s in sessions] == [str(session_dir)]


def test_custom_meta_file_name_marks_directories(session_root: Path) -> None:
    session_dir = session_root / 'custom'
    session_dir.mkdir()
    (session_dir / 'meta.json').write_text('{}', encoding='utf-8')

    assert scan_sessions(session_root) == []
    assert [s.session_path for s in scan_sessions(session_root, 'meta.json')] == [str(session_dir)]


def test_sort_key_prefers_metadata_time(session_root: Path) -> None:
    session_dir = write_session_dir(session_root, 's', make_meta_record(timestamp='2025-10-13T00:00:00Z'))
    meta = load_session_meta(session_dir)

    key = compute_sort_key(meta, FileStats(mtime=YEAR_2030, ctime=YEAR_2030))

    assert key == pytest.approx(1760313600.0)


@pytest.mark.parametrize(
    ('stats', 'expected'),
    [
        (FileStats(mtime=YEAR_2030, ctime=YEAR_2000), YEAR_2030),
        (FileStats(mtime=0.0, ctime=YEAR_2000), YEAR_2000),
        (FileStats(mtime=0.0, ctime=0.0), 0.0),
    ],
)
def test_sort_key_falls_back_to_file_times(tmp_path: Path, stats: FileStats, expected: float) -> None:
    meta = load_session_meta(tmp_path / 'gone')

    assert compute_sort_key(meta, stats) == expected
