"""
Sync engine for the file index manager.

Rebuilds every registered index from a single depth-first walk of the
project root whenever the registry is dirty. Rebuilds are serialised:
at most one runs at a time, and readers only ever see complete record
lists because new lists are published together at the end of a cycle.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path, PurePath

from fim.core.config import DEFAULT_MAX_FILES
from fim.core.errors import InvalidArgumentError, TraversalLimitExceeded
from fim.core.ignore import IgnoreMatcher
from fim.core.models import DirectoryEntry, FileRecord, SyncResult, SyncStats
from fim.core.registry import IndexRegistry
from fim.infrastructure.directory import DirectoryListerInterface
from fim.infrastructure.root_provider import ProjectRootProvider

logger = logging.getLogger(__name__)

LimitNotifier = Callable[[TraversalLimitExceeded], None]


class SyncEngine:
    """
    Clear-and-rebuild engine over an IndexRegistry.

    A sync is a no-op while the registry is clean. When dirty, the engine
    walks the project root, classifies each file against every index's
    filter and appends one shared FileRecord to each matching index.

    The walk stops early once more than `max_files` files are found; the
    records gathered so far are kept, the limit notifier is called once and
    the registry is still marked clean.
    """

    def __init__(
        self,
        registry: IndexRegistry,
        lister: DirectoryListerInterface,
        root_provider: ProjectRootProvider,
        max_files: int = DEFAULT_MAX_FILES,
        ignore_patterns: list[str] | None = None,
        on_limit_exceeded: LimitNotifier | None = None,
    ):
        """
        Initialize the sync engine.

        Args:
            registry: Registry whose indexes are rebuilt
            lister: Directory abstraction used to enumerate children
            root_provider: Supplies the project root to walk
            max_files: File-count ceiling for a single walk
            ignore_patterns: Gitignore-style patterns excluded from the walk
            on_limit_exceeded: Called when a walk hits the file-count ceiling
        """
        if max_files <= 0:
            raise InvalidArgumentError(f"max_files must be positive, got {max_files}")

        self._registry = registry
        self._lister = lister
        self._root_provider = root_provider
        self._max_files = max_files
        self._ignore = IgnoreMatcher(ignore_patterns)
        self._on_limit_exceeded = on_limit_exceeded

        # RLock so a re-entrant call from inside a rebuild sees _in_progress
        # instead of deadlocking
        self._sync_lock = threading.RLock()
        self._in_progress = False
        self._stats = SyncStats()
        self._last_result: SyncResult | None = None

    @property
    def max_files(self) -> int:
        """File-count ceiling for a single walk."""
        return self._max_files

    @property
    def in_progress(self) -> bool:
        """Whether a rebuild is currently running."""
        return self._in_progress

    @property
    def last_result(self) -> SyncResult | None:
        """Result of the most recent rebuild, None before the first one."""
        return self._last_result

    def get_stats(self) -> SyncStats:
        """Get cumulative sync statistics."""
        return self._stats

    def sync(self) -> SyncResult:
        """
        Rebuild all indexes if the registry is dirty.

        Returns:
            SyncResult describing the rebuild, with skipped=True if nothing
            was rebuilt

        Raises:
            Any exception raised by a filter predicate. The registry stays
            dirty and no partial lists are published.
        """
        if not self._registry.is_dirty:
            return SyncResult(skipped=True)

        with self._sync_lock:
            if self._in_progress:
                logger.debug("Sync requested during a rebuild, serving previous snapshot")
                return SyncResult(skipped=True)
            if not self._registry.is_dirty:
                # Another thread rebuilt while we waited for the lock
                return SyncResult(skipped=True)

            self._in_progress = True
            try:
                result, limit_error = self._rebuild()
            finally:
                self._in_progress = False

        if limit_error is not None:
            self._notify_limit_exceeded(limit_error)

        return result

    async def sync_async(self) -> SyncResult:
        """Run sync() in a worker thread and await its result."""
        return await asyncio.to_thread(self.sync)

    def _rebuild(self) -> tuple[SyncResult, TraversalLimitExceeded | None]:
        """Walk the project root and publish fresh record lists."""
        generation = self._registry.generation
        indexes = self._registry.snapshot()
        pending: dict[str, list[FileRecord]] = {index.name: [] for index in indexes}

        root = self._root_provider.get_project_root()
        result = SyncResult(root=str(root) if root is not None else None)
        limit_error: TraversalLimitExceeded | None = None
        start_time = time.monotonic()

        logger.info(
            f"Starting index sync for: {root}",
            extra={"root": result.root, "indexes": list(pending)},
        )

        if root is None:
            logger.info("No project root available, indexes cleared")
        else:
            for entry in self._walk(Path(root), Path(root), result):
                if result.files_visited >= self._max_files:
                    limit_error = TraversalLimitExceeded(self._max_files, result.files_visited)
                    break
                result.files_visited += 1

                record = FileRecord.from_entry(entry)
                for index in indexes:
                    if index.filter_predicate(entry):
                        pending[index.name].append(record)

        for index in indexes:
            index.replace_records(pending[index.name])

        result.index_sizes = {name: len(records) for name, records in pending.items()}
        result.limit_exceeded = limit_error is not None
        result.duration_ms = round((time.monotonic() - start_time) * 1000, 1)

        if not self._registry.clear_dirty(generation):
            logger.info("Indexes invalidated during sync, next read will rebuild")

        self._stats.record(result)
        self._last_result = result

        if limit_error is not None:
            logger.warning(
                f"File limit of {self._max_files} reached, rest of the tree was not indexed",
                extra={"root": result.root, "max_files": self._max_files},
            )

        logger.info(
            "Index sync completed in %.1fms",
            result.duration_ms,
            extra={
                "root": result.root,
                "files_visited": result.files_visited,
                "index_sizes": result.index_sizes,
                "skipped_directories": len(result.skipped_directories),
                "limit_exceeded": result.limit_exceeded,
            },
        )

        return result, limit_error

    def _walk(
        self, directory: Path, root: Path, result: SyncResult
    ) -> Iterator[DirectoryEntry]:
        """
        Yield file entries below a directory, depth-first.

        Children are visited in the order the lister returns them.
        Directories that cannot be listed are recorded and skipped.
        """
        try:
            entries = self._lister.list_children(directory)
        except OSError as e:
            logger.warning(
                f"Skipping unreadable directory: {directory} - {e}",
                extra={"directory": str(directory), "error": str(e)},
            )
            result.skipped_directories.append(str(directory))
            return

        for entry in entries:
            if self._ignore and self._ignore.matches(
                _relative_path(entry, root), is_dir=entry.is_directory
            ):
                continue

            if entry.is_directory:
                yield from self._walk(Path(entry.full_path), root, result)
            elif entry.is_file:
                yield entry

    def _notify_limit_exceeded(self, error: TraversalLimitExceeded) -> None:
        if self._on_limit_exceeded is None:
            return
        try:
            self._on_limit_exceeded(error)
        except Exception as e:
            logger.error(f"Error in limit-exceeded callback: {e}", exc_info=True)


def _relative_path(entry: DirectoryEntry, root: Path) -> str:
    try:
        return PurePath(entry.full_path).relative_to(root).as_posix()
    except ValueError:
        return entry.name
