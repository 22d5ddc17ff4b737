"""
Fake implementations for testing.

Provides in-memory implementations of infrastructure interfaces
for use in unit and integration tests without touching the filesystem.
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable, Iterable
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from fim.core.errors import DirectoryListingError
from fim.core.ignore import IgnoreMatcher
from fim.core.models import DirectoryEntry
from fim.infrastructure.directory import DirectoryListerInterface

if TYPE_CHECKING:
    from fim.core.file_events import FileEvent


def _key(directory: Path | str) -> str:
    return PurePosixPath(Path(directory).as_posix()).as_posix()


class InMemoryDirectoryLister(DirectoryListerInterface):
    """
    In-memory directory tree for testing.

    The tree is a nested dict: a dict value is a directory, anything else
    is a file. Children are listed in dict insertion order, which lets
    tests control discovery order exactly.

    Example:
        lister = InMemoryDirectoryLister("/project", {
            "a": {"style.css": None},
            "b": {"style.css": None},
        })
    """

    def __init__(
        self,
        root: str = "/project",
        tree: dict[str, Any] | None = None,
        unreadable: Iterable[str] | None = None,
    ):
        """
        Initialize the fake tree.

        Args:
            root: Absolute POSIX path of the tree root
            tree: Nested dict describing the tree below the root
            unreadable: Full paths of directories whose listing fails
        """
        self.root = _key(root)
        self._tree: dict[str, Any] = tree if tree is not None else {}
        self._unreadable: set[str] = {_key(p) for p in (unreadable or [])}
        self.list_calls: list[str] = []

    @classmethod
    def from_paths(
        cls, root: str, relative_paths: Iterable[str], **kwargs: Any
    ) -> InMemoryDirectoryLister:
        """Build a tree from '/'-separated file paths relative to the root."""
        lister = cls(root, **kwargs)
        for rel_path in relative_paths:
            lister.add_file(rel_path)
        return lister

    def add_file(self, relative_path: str) -> None:
        """Add a file (and any missing parent directories) to the tree."""
        *dirs, name = PurePosixPath(relative_path).parts
        node = self._tree
        for part in dirs:
            node = node.setdefault(part, {})
        node[name] = None

    def remove(self, relative_path: str) -> None:
        """Remove a file or directory from the tree."""
        *dirs, name = PurePosixPath(relative_path).parts
        node = self._tree
        for part in dirs:
            node = node[part]
        del node[name]

    def set_unreadable(self, directory: str) -> None:
        """Make listing of the given directory fail."""
        self._unreadable.add(_key(directory))

    def list_children(self, directory: Path) -> list[DirectoryEntry]:
        """List children of a directory in the fake tree."""
        key = _key(directory)
        self.list_calls.append(key)

        if key in self._unreadable:
            raise DirectoryListingError(key, "permission denied")

        node = self._find(key)
        if not isinstance(node, dict):
            raise DirectoryListingError(key, "no such directory")

        return [
            DirectoryEntry(
                name=name,
                full_path=posixpath.join(key, name),
                is_file=not isinstance(child, dict),
                is_directory=isinstance(child, dict),
            )
            for name, child in node.items()
        ]

    def _find(self, key: str) -> Any:
        if key == self.root:
            return self._tree
        if not key.startswith(self.root.rstrip("/") + "/"):
            return None
        node: Any = self._tree
        for part in PurePosixPath(key).relative_to(self.root).parts:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node


class FakeFileWatcher:
    """
    Fake file watcher for testing.

    Allows manual triggering of file events without actual file system monitoring.
    Implements the same interface as FileWatcher for use in tests, including
    dropping events whose paths match the ignore patterns.
    """

    def __init__(self, ignore_patterns: list[str] | None = None):
        """
        Initialize the fake file watcher.

        Args:
            ignore_patterns: Gitignore-style patterns for paths that are never reported
        """
        self._ignore = IgnoreMatcher(ignore_patterns)
        self._callback: Callable[[FileEvent], None] | None = None
        self._watch_path: Path | None = None
        self._running = False
        self._events: list[FileEvent] = []
        self.started_paths: list[Path] = []

    @property
    def watch_path(self) -> Path | None:
        return self._watch_path

    def start(self, path: Path, callback: Callable[[FileEvent], None]) -> None:
        """
        Start the fake watcher.

        Args:
            path: Directory path to watch
            callback: Function to call when events are triggered
        """
        if self._running:
            raise RuntimeError("File watcher is already running")

        self._watch_path = Path(path)
        self._callback = callback
        self._running = True
        self.started_paths.append(self._watch_path)

    def stop(self) -> None:
        """Stop the fake watcher."""
        self._running = False
        self._callback = None
        self._watch_path = None

    def is_running(self) -> bool:
        """Check if the fake watcher is running."""
        return self._running

    def trigger_event(self, event: FileEvent) -> None:
        """
        Manually trigger a file event.

        This is the main testing interface - allows tests to simulate
        file system events without actual file operations.

        Args:
            event: The FileEvent to trigger
        """
        if not self._running:
            raise RuntimeError("File watcher is not running")
        if self._is_ignored(event.file_path) and (
            event.old_path is None or self._is_ignored(event.old_path)
        ):
            return

        self._events.append(event)
        if self._callback is not None:
            self._callback(event)

    def _is_ignored(self, path: Path) -> bool:
        try:
            relative = Path(path).relative_to(self._watch_path)
        except ValueError:
            return False
        return self._ignore.matches(relative.as_posix())

    def get_triggered_events(self) -> list[FileEvent]:
        """Get all events that have been triggered."""
        return list(self._events)

    def clear_events(self) -> None:
        """Clear the list of triggered events."""
        self._events.clear()
