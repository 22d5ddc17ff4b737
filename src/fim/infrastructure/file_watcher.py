"""
File watcher infrastructure component.

Watches a project tree with a watchdog Observer and reports every change
that can affect the file indexes as a FileEvent. Paths matching the
gitignore-style ignore patterns, taken relative to the watched root, are
never reported.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from fim.core.file_events import FileEvent, FileEventType
from fim.core.ignore import IgnoreMatcher

logger = logging.getLogger(__name__)

EventCallback = Callable[[FileEvent], None]

# watchdog event kinds that are forwarded; open/close notifications are not
_FORWARDED_EVENTS = {
    EVENT_TYPE_CREATED: FileEventType.CREATED,
    EVENT_TYPE_MODIFIED: FileEventType.MODIFIED,
    EVENT_TYPE_DELETED: FileEventType.DELETED,
    EVENT_TYPE_MOVED: FileEventType.MOVED,
}

# Directory events that say nothing about which files exist
_DIRECTORY_NOISE = {FileEventType.CREATED, FileEventType.MODIFIED}


class FileWatcherInterface(Protocol):
    """Protocol for file watcher implementations."""

    def start(self, path: Path, callback: EventCallback) -> None:
        """Begin reporting changes below `path` to `callback`."""
        ...

    def stop(self) -> None:
        """Stop reporting changes. Safe to call when not running."""
        ...

    def is_running(self) -> bool:
        ...


class FileWatcher(FileWatcherInterface):
    """
    Recursive watchdog-based watcher for one project root at a time.

    Callbacks run on the observer thread; exceptions they raise are logged
    and do not stop the watcher. A stopped watcher can be started again on
    another root.
    """

    def __init__(self, ignore_patterns: list[str] | None = None):
        """
        Args:
            ignore_patterns: Gitignore-style patterns for paths that are never reported
        """
        self._ignore = IgnoreMatcher(ignore_patterns)
        self._observer: Observer | None = None
        self._callback: EventCallback | None = None
        self._root: Path | None = None
        self._lock = threading.Lock()

    @property
    def watch_path(self) -> Path | None:
        """Root currently being watched."""
        return self._root

    def start(self, path: Path, callback: EventCallback) -> None:
        """
        Start watching a project root.

        Raises:
            ValueError: If the root is missing or not a directory
            RuntimeError: If the watcher is already running
        """
        root = Path(path).resolve()
        if not root.exists():
            raise ValueError(f"Path does not exist: {root}")
        if not root.is_dir():
            raise ValueError(f"Path is not a directory: {root}")

        with self._lock:
            if self._observer is not None:
                raise RuntimeError(f"Already watching {self._root}")

            observer = Observer()
            observer.schedule(
                _IndexEventHandler(root, self._ignore, self._forward),
                str(root),
                recursive=True,
            )
            self._callback = callback
            self._root = root
            observer.start()
            self._observer = observer

        logger.info(f"Watching for file changes: {root}", extra={"watch_path": str(root)})

    def stop(self) -> None:
        """Stop the observer thread and forget the callback."""
        with self._lock:
            observer, root = self._observer, self._root
            self._observer = None
            self._callback = None
            self._root = None

        if observer is None:
            return
        observer.stop()
        observer.join(timeout=5.0)
        logger.info(f"Stopped watching: {root}", extra={"watch_path": str(root)})

    def is_running(self) -> bool:
        observer = self._observer
        return observer is not None and observer.is_alive()

    def _forward(self, event: FileEvent) -> None:
        callback = self._callback
        if callback is None:
            return
        try:
            callback(event)
        except Exception as e:
            logger.error(
                f"File event callback failed for {event.file_path}: {e}",
                extra={"event_type": event.event_type.value, "file_path": str(event.file_path)},
                exc_info=True,
            )


class _IndexEventHandler(FileSystemEventHandler):
    """
    Translates watchdog events into FileEvents.

    Creating or touching a directory is dropped; the files inside report
    their own creation. Deleting or moving a directory is reported because
    every file below it disappears or moves with it.
    """

    def __init__(self, root: Path, ignore: IgnoreMatcher, emit: EventCallback):
        super().__init__()
        self._root = root
        self._ignore = ignore
        self._emit = emit

    def dispatch(self, event: FileSystemEvent) -> None:
        event_type = _FORWARDED_EVENTS.get(event.event_type)
        if event_type is None:
            return
        if event.is_directory and event_type in _DIRECTORY_NOISE:
            return

        src = Path(event.src_path)
        if event_type is not FileEventType.MOVED:
            if self._is_visible(src):
                self._send(FileEvent(event_type, src))
            return

        dest = Path(event.dest_path)
        src_visible = self._is_visible(src)
        # A move into or out of an ignored area still changes the indexes
        if src_visible or self._is_visible(dest):
            self._send(FileEvent(event_type, dest, old_path=src if src_visible else None))

    def _is_visible(self, path: Path) -> bool:
        try:
            relative = path.relative_to(self._root)
        except ValueError:
            return False
        return not self._ignore.matches(relative.as_posix())

    def _send(self, event: FileEvent) -> None:
        logger.debug(f"File change: {event.event_type.value} - {event.file_path}")
        self._emit(event)
