"""
Project root provider.

Supplies the current project root directory and notifies subscribers
when it changes.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

RootListener = Callable[[Path | None], None]


class ProjectRootProvider(Protocol):
    """Protocol for project root providers."""

    def get_project_root(self) -> Path | None:
        """Return the current project root, or None if no project is open."""
        ...

    def subscribe(self, listener: RootListener) -> None:
        """Register a listener called with the new root after every change."""
        ...

    def unsubscribe(self, listener: RootListener) -> None:
        """Remove a previously registered listener."""
        ...


class ProjectRoot(ProjectRootProvider):
    """
    Holds the current project root and fans out root-changed notifications.

    Listeners are called synchronously, in subscription order, on the
    thread that calls set_root(). Setting the same root again does not
    notify.
    """

    def __init__(self, root: Path | str | None = None):
        self._root = Path(root).resolve() if root is not None else None
        self._listeners: list[RootListener] = []
        self._lock = threading.Lock()

    def get_project_root(self) -> Path | None:
        return self._root

    def set_root(self, root: Path | str | None) -> bool:
        """
        Change the project root.

        Args:
            root: New root directory, or None to close the project

        Returns:
            True if the root changed and listeners were notified
        """
        new_root = Path(root).resolve() if root is not None else None
        with self._lock:
            if new_root == self._root:
                return False
            old_root = self._root
            self._root = new_root
            listeners = list(self._listeners)

        logger.info(
            f"Project root changed: {old_root} -> {new_root}",
            extra={"old_root": str(old_root), "new_root": str(new_root)},
        )
        for listener in listeners:
            listener(new_root)
        return True

    def subscribe(self, listener: RootListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: RootListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass
