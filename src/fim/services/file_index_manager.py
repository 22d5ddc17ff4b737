"""
File Index Manager service.

Owns a set of named file indexes over the current project root and keeps
them lazily in sync: queries rebuild every index in one walk when the
indexes are stale, and serve the cached lists otherwise.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from fim.core.config import DEFAULT_MAX_FILES
from fim.core.errors import InvalidArgumentError
from fim.core.filters import BUILTIN_INDEXES, EntryFilter
from fim.core.models import FileRecord, SyncResult, SyncStats
from fim.core.registry import FileIndex, IndexRegistry
from fim.infrastructure.directory import DirectoryListerInterface
from fim.infrastructure.root_provider import ProjectRootProvider
from fim.services.sync_engine import LimitNotifier, SyncEngine

logger = logging.getLogger(__name__)


class FileIndexManager:
    """
    Named, lazily rebuilt file indexes for one project.

    Every manager registers the built-in "all" and "css" indexes unless
    told otherwise, and subscribes to root changes from its root provider:
    a new root marks the indexes dirty and rebuilds them immediately.

    Instances are independent; nothing is shared at module level.
    """

    def __init__(
        self,
        lister: DirectoryListerInterface,
        root_provider: ProjectRootProvider,
        max_files: int = DEFAULT_MAX_FILES,
        ignore_patterns: list[str] | None = None,
        on_limit_exceeded: LimitNotifier | None = None,
        register_builtin_indexes: bool = True,
    ):
        """
        Initialize the manager.

        Args:
            lister: Directory abstraction used to walk the project
            root_provider: Supplies the project root and root-change notifications
            max_files: File-count ceiling for a single walk
            ignore_patterns: Gitignore-style patterns excluded from the walk
            on_limit_exceeded: Called when a walk hits the file-count ceiling
            register_builtin_indexes: Register the "all" and "css" indexes
        """
        self._registry = IndexRegistry()
        self._root_provider = root_provider
        self._engine = SyncEngine(
            registry=self._registry,
            lister=lister,
            root_provider=root_provider,
            max_files=max_files,
            ignore_patterns=ignore_patterns,
            on_limit_exceeded=on_limit_exceeded,
        )

        if register_builtin_indexes:
            for name, predicate in BUILTIN_INDEXES.items():
                self._registry.register_index(name, predicate)

        self._root_provider.subscribe(self._on_root_changed)
        self._closed = False

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register_index(self, name: str, filter_predicate: EntryFilter) -> FileIndex:
        """
        Register a new index and mark all indexes dirty.

        Raises:
            DuplicateIndexError: If the name is already registered
            InvalidArgumentError: If the predicate is not callable
        """
        return self._registry.register_index(name, filter_predicate)

    def mark_dirty(self) -> None:
        """Mark all indexes stale so the next query rebuilds them."""
        self._registry.mark_dirty()

    @property
    def is_dirty(self) -> bool:
        return self._registry.is_dirty

    @property
    def registry(self) -> IndexRegistry:
        return self._registry

    def index_names(self) -> list[str]:
        """Registered index names in registration order."""
        return self._registry.names()

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync(self) -> SyncResult:
        """Rebuild all indexes if they are dirty."""
        return self._engine.sync()

    async def sync_async(self) -> SyncResult:
        """Awaitable sync() that walks in a worker thread."""
        return await self._engine.sync_async()

    @property
    def last_result(self) -> SyncResult | None:
        return self._engine.last_result

    def get_stats(self) -> SyncStats:
        return self._engine.get_stats()

    @property
    def max_files(self) -> int:
        return self._engine.max_files

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_index_records(self, name: str) -> tuple[FileRecord, ...]:
        """
        Return the records of an index, syncing first if needed.

        Args:
            name: Registered index name

        Returns:
            Read-only tuple of records in discovery order

        Raises:
            UnknownIndexError: If no index with this name is registered
        """
        self.sync()
        return self._registry.get(name).records

    def get_filtered_records(
        self, name: str, predicate: Callable[[str], bool]
    ) -> list[FileRecord]:
        """
        Return the records of an index whose filename satisfies `predicate`.

        The predicate receives the record's base filename. The index itself
        is not modified.
        """
        if not callable(predicate):
            raise InvalidArgumentError(f"Filename predicate is not callable: {predicate!r}")
        return [record for record in self.get_index_records(name) if predicate(record.name)]

    def get_records_by_name(self, name: str, filename: str) -> list[FileRecord]:
        """Return every record in an index whose filename equals `filename`."""
        return self.get_filtered_records(name, lambda item: item == filename)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop following root changes."""
        if not self._closed:
            self._root_provider.unsubscribe(self._on_root_changed)
            self._closed = True

    def _on_root_changed(self, root: Path | None) -> None:
        logger.info(f"Root changed, rebuilding indexes for: {root}")
        self.mark_dirty()
        self.sync()
