"""
Session tree watcher - reports filesystem changes under the session root.

Each change notification from the OS becomes one `updated` event; consumers
treat it as "re-scan", so bursts need no coalescing. Read-only access events
(open, close-without-write) are not changes and are dropped, otherwise a
re-scan would trigger itself.

If the watch cannot be established, the listener receives a single `error`
event before create_session_watcher returns None. Removal of the watched root
after establishment is reported as an `error` event; the watch is not torn
down by it.

The returned handle owns the OS watch until dispose() is called. dispose() is
idempotent.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import attrs
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

__all__ = [
    'SessionWatcher',
    'SessionWatcherEvent',
    'WatchError',
    'WatchListener',
    'WatchUpdated',
    'create_session_watcher',
]

logger = logging.getLogger(__name__)

IGNORED_EVENT_TYPES = frozenset({'opened', 'closed_no_write'})


@attrs.define(frozen=True)
class WatchUpdated:
    """Something under the root changed."""

    path: str | None
    kind: Literal['updated'] = 'updated'


@attrs.define(frozen=True)
class WatchError:
    """The watch failed to start, or the watched root went away."""

    cause: BaseException
    kind: Literal['error'] = 'error'


type SessionWatcherEvent = WatchUpdated | WatchError
type WatchListener = Callable[[SessionWatcherEvent], None]


class SessionWatcher:
    """Handle owning one recursive watch."""

    def __init__(self, observer: BaseObserver, root_path: str, stopped: threading.Event) -> None:
        self._observer = observer
        self._stopped = stopped
        self._lock = threading.Lock()
        self.root_path = root_path

    @property
    def disposed(self) -> bool:
        return self._stopped.is_set()

    def dispose(self) -> None:
        """Release the OS watch. Later calls do nothing."""
        with self._lock:
            if self._stopped.is_set():
                return
            self._stopped.set()

        self._observer.stop()
        # Disposing from inside a listener runs on the observer thread
        if threading.current_thread() is not self._observer and self._observer.is_alive():
            self._observer.join(timeout=5)
        logger.info(f'Stopped watching {self.root_path}')

    def __enter__(self) -> SessionWatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class _ForwardingHandler(FileSystemEventHandler):
    """Translates watchdog events into watcher events."""

    def __init__(self, root_path: str, listener: WatchListener, stopped: threading.Event) -> None:
        super().__init__()
        self._root_path = root_path
        self._listener = listener
        self._stopped = stopped

    def on_any_event(self, event: FileSystemEvent) -> None:
        if self._stopped.is_set() or event.event_type in IGNORED_EVENT_TYPES:
            return

        src_path = os.fsdecode(event.src_path) if event.src_path else None
        if event.event_type in ('deleted', 'moved') and src_path == self._root_path:
            logger.warning(f'Watched root {self._root_path} was removed')
            self._deliver(WatchError(cause=FileNotFoundError(f'Watched root {self._root_path} was removed')))
            return

        self._deliver(WatchUpdated(path=src_path))

    def _deliver(self, event: SessionWatcherEvent) -> None:
        try:
            self._listener(event)
        except Exception:
            # Keep the observer thread alive for later events
            logger.exception(f'Session watcher listener failed on {event.kind} event')


def create_session_watcher(root_path: Path | str, listener: WatchListener) -> SessionWatcher | None:
    """
    Watch root_path recursively.

    Args:
        root_path: Directory to watch
        listener: Called with each event, on the observer thread

    Returns:
        Handle to dispose, or None if the watch could not be established
        (the listener has then already received an error event)
    """
    root = os.path.abspath(root_path)
    stopped = threading.Event()
    observer = Observer()

    try:
        if not os.path.isdir(root):
            raise FileNotFoundError(f'Session root {root} is not a directory')
        observer.schedule(_ForwardingHandler(root, listener, stopped), root, recursive=True)
        observer.start()
    except OSError as e:
        logger.warning(f'Unable to watch {root}: {e}')
        observer.unschedule_all()
        listener(WatchError(cause=e))
        return None

    logger.info(f'Watching {root} for session changes')
    return SessionWatcher(observer, root, stopped)
