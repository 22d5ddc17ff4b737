"""
Keeps a FileIndexManager honest while files change on disk.

Creations, deletions and moves reported by the file watcher mark the
manager dirty; the rebuild itself waits for the next query. When the
project root changes the watcher is moved to the new root.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from fim.core.errors import FileIndexError
from fim.core.file_events import FileEvent
from fim.core.path_utils import validate_project_root
from fim.infrastructure.file_watcher import FileWatcherInterface
from fim.infrastructure.root_provider import ProjectRootProvider
from fim.services.file_index_manager import FileIndexManager

logger = logging.getLogger(__name__)


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment else None


@dataclass
class WatchStats:
    """Counters for one run of the watch service."""

    started_at: datetime = field(default_factory=datetime.now)
    events_received: int = 0
    invalidations: int = 0
    restarts: int = 0
    last_event_at: datetime | None = None

    def to_dict(self) -> dict:
        counters = {
            "events_received": self.events_received,
            "invalidations": self.invalidations,
            "restarts": self.restarts,
        }
        return {
            "started_at": _iso(self.started_at),
            **counters,
            "last_event_at": _iso(self.last_event_at),
        }


class WatchServiceError(FileIndexError):
    """The watch service cannot be started or stopped as asked."""


class PathValidationError(WatchServiceError):
    """The project root is missing or may not be watched."""


class WatchService:
    """
    Bridges a file watcher and a FileIndexManager.

    Watcher callbacks run on the watcher's thread and only flip the dirty
    flag.
    """

    def __init__(
        self,
        manager: FileIndexManager,
        file_watcher: FileWatcherInterface,
        root_provider: ProjectRootProvider,
    ):
        self._manager = manager
        self._watcher = file_watcher
        self._roots = root_provider
        self._stats = WatchStats()
        self._running = False
        self._lock = threading.Lock()

    def start(self) -> None:
        """
        Watch the current project root until stop() is called.

        Raises:
            WatchServiceError: If the service is already running
            PathValidationError: If there is no root or it fails validation
        """
        if self._running:
            raise WatchServiceError("Watch service is already running")

        root = self._roots.get_project_root()
        if root is None:
            raise PathValidationError("No project root to watch")
        check = validate_project_root(root)
        if not check.valid:
            raise PathValidationError(check.error_message)

        self._stats = WatchStats()
        self._watcher.start(root, self._on_file_event)
        self._roots.subscribe(self._on_root_changed)
        self._running = True
        logger.info(f"Watch service started for: {root}", extra={"watch_path": str(root)})

    def stop(self) -> None:
        """Stop the watcher. Calling it on a stopped service does nothing."""
        if not self._running:
            return

        self._roots.unsubscribe(self._on_root_changed)
        with self._lock:
            self._watcher.stop()
            self._running = False
        logger.info("Watch service stopped", extra={"stats": self._stats.to_dict()})

    def is_running(self) -> bool:
        return self._running

    def get_stats(self) -> WatchStats:
        return self._stats

    def _on_file_event(self, event: FileEvent) -> None:
        if not self._running:
            return

        stats = self._stats
        stats.events_received += 1
        stats.last_event_at = datetime.now()
        logger.debug(
            f"File change detected: {event.event_type.value} - {event.file_path}",
            extra={"event_type": event.event_type.value, "file_path": str(event.file_path)},
        )

        if not event.changes_membership():
            return
        stats.invalidations += 1
        self._manager.mark_dirty()

    def _on_root_changed(self, root: Path | None) -> None:
        with self._lock:
            if not self._running:
                return
            self._watcher.stop()

            if root is None:
                logger.info("Project closed, file watching paused")
                return
            check = validate_project_root(root)
            if not check.valid:
                logger.warning(
                    f"Not watching new project root: {check.error_message}",
                    extra={"watch_path": str(root)},
                )
                return

            self._watcher.start(root, self._on_file_event)
            self._stats.restarts += 1

        logger.info(f"Watcher moved to new root: {root}", extra={"watch_path": str(root)})
