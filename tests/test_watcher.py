"""Tests for the session tree watcher."""

from __future__ import annotations

import queue
import threading
import time
from pathlib import Path
from types import SimpleNamespace

import pytest

from codex_sessions.services.watcher import (
    SessionWatcherEvent,
    WatchError,
    WatchUpdated,
    _ForwardingHandler,
    create_session_watcher,
)

EVENT_TIMEOUT = 5.0


def _fake_event(event_type: str, src_path: str) -> SimpleNamespace:
    return SimpleNamespace(event_type=event_type, src_path=src_path, is_directory=False)


def test_missing_root_reports_error_and_returns_none(tmp_path: Path) -> None:
    events: list[SessionWatcherEvent] = []

    watcher = create_session_watcher(tmp_path / 'missing', events.append)

    assert watcher is None
    assert len(events) == 1
    assert isinstance(events[0], WatchError)
    assert isinstance(events[0].cause, FileNotFoundError)


def test_reports_file_changes(session_root: Path) -> None:
    events: queue.Queue[SessionWatcherEvent] = queue.Queue()
    watcher = create_session_watcher(session_root, events.put)
    assert watcher is not None

    try:
        (session_root / 'rollout.jsonl').write_text('{}\n', encoding='utf-8')
        event = events.get(timeout=EVENT_TIMEOUT)
    finally:
        watcher.dispose()

    assert isinstance(event, WatchUpdated)
    assert event.kind == 'updated'


def test_reports_nested_changes(session_root: Path) -> None:
    nested = session_root / '2025' / '10' / '13'
    nested.mkdir(parents=True)
    seen = threading.Event()

    def listener(event: SessionWatcherEvent) -> None:
        if isinstance(event, WatchUpdated) and event.path and 'deep.jsonl' in event.path:
            seen.set()

    watcher = create_session_watcher(session_root, listener)
    assert watcher is not None

    with watcher:
        (nested / 'deep.jsonl').write_text('{}\n', encoding='utf-8')
        assert seen.wait(EVENT_TIMEOUT)


def test_dispose_is_idempotent(session_root: Path) -> None:
    watcher = create_session_watcher(session_root, lambda event: None)
    assert watcher is not None

    watcher.dispose()
    watcher.dispose()

    assert watcher.disposed


def test_no_events_after_dispose(session_root: Path) -> None:
    events: list[SessionWatcherEvent] = []
    watcher = create_session_watcher(session_root, events.append)
    assert watcher is not None

    watcher.dispose()
    events.clear()
    (session_root / 'late.jsonl').write_text('{}\n', encoding='utf-8')
    time.sleep(0.5)

    assert events == []


# ==============================================================================
# Event translation
# ==============================================================================


@pytest.mark.parametrize('event_type', ['opened', 'closed_no_write'])
def test_read_only_access_is_ignored(event_type: str) -> None:
    events: list[SessionWatcherEvent] = []
    handler = _ForwardingHandler('/sessions', events.append, threading.Event())

    handler.on_any_event(_fake_event(event_type, '/sessions/rollout.jsonl'))

    assert events == []


@pytest.mark.parametrize('event_type', ['created', 'modified', 'deleted', 'moved', 'closed'])
def test_changes_become_updates(event_type: str) -> None:
    events: list[SessionWatcherEvent] = []
    handler = _ForwardingHandler('/sessions', events.append, threading.Event())

    handler.on_any_event(_fake_event(event_type, '/sessions/rollout.jsonl'))

    assert events == [WatchUpdated(path='/sessions/rollout.jsonl')]


@pytest.mark.parametrize('event_type', ['deleted', 'moved'])
def test_root_removal_is_an_error(event_type: str) -> None:
    events: list[SessionWatcherEvent] = []
    handler = _ForwardingHandler('/sessions', events.append, threading.Event())

    handler.on_any_event(_fake_event(event_type, '/sessions'))

    assert len(events) == 1
    assert isinstance(events[0], WatchError)
    assert isinstance(events[0].cause, FileNotFoundError)


def test_stopped_handler_drops_events() -> None:
    events: list[SessionWatcherEvent] = []
    stopped = threading.Event()
    stopped.set()
    handler = _ForwardingHandler('/sessions', events.append, stopped)

    handler.on_any_event(_fake_event('modified', '/sessions/rollout.jsonl'))

    assert events == []


def test_listener_failure_does_not_escape(caplog: pytest.LogCaptureFixture) -> None:
    def listener(event: SessionWatcherEvent) -> None:
        raise RuntimeError('listener blew up')

    handler = _ForwardingHandler('/sessions', listener, threading.Event())

    handler.on_any_event(_fake_event('modified', '/sessions/rollout.jsonl'))

    assert 'listener failed' in caplog.text
