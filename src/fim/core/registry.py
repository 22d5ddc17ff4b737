"""
Index registry for the file index manager.

Holds the named indexes, their filter predicates and record lists, and the
dirty flag that tells the sync engine the cached lists are stale.
"""

import logging
import threading
from collections.abc import Iterator, Sequence

from .errors import DuplicateIndexError, InvalidArgumentError, UnknownIndexError
from .filters import EntryFilter
from .models import FileRecord

logger = logging.getLogger(__name__)


class FileIndex:
    """
    A named, filtered view over the project's files.

    Records are kept in traversal discovery order and replaced wholesale
    by the sync engine; they are never mutated in place.

    Attributes:
        name: Unique index name
        filter_predicate: Callable deciding whether a directory entry belongs here
    """

    def __init__(self, name: str, filter_predicate: EntryFilter):
        self.name = name
        self.filter_predicate = filter_predicate
        self._records: tuple[FileRecord, ...] = ()

    @property
    def records(self) -> tuple[FileRecord, ...]:
        """Read-only view of the records from the last completed sync."""
        return self._records

    def replace_records(self, records: Sequence[FileRecord]) -> None:
        """Swap in the record list produced by a rebuild."""
        self._records = tuple(records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return (
            f"FileIndex(name={self.name!r}, filter={self.filter_predicate!r}, "
            f"records={len(self._records)})"
        )


class IndexRegistry:
    """
    Registry of named file indexes plus the shared dirty flag.

    Every mark_dirty() bumps a generation counter so the sync engine can
    tell whether an invalidation arrived while it was rebuilding; the flag
    is only cleared for the generation the rebuild started from.
    """

    def __init__(self) -> None:
        self._indexes: dict[str, FileIndex] = {}
        self._dirty = True
        self._generation = 0
        self._lock = threading.Lock()

    def register_index(self, name: str, filter_predicate: EntryFilter) -> FileIndex:
        """
        Register a new, empty index and mark the registry dirty.

        Args:
            name: Unique index name
            filter_predicate: Callable taking a DirectoryEntry and returning bool

        Returns:
            The registered FileIndex

        Raises:
            InvalidArgumentError: If name is empty or the predicate is not callable
            DuplicateIndexError: If an index with this name already exists
        """
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError(f"Index name must be a non-empty string: {name!r}")
        if not callable(filter_predicate):
            raise InvalidArgumentError(
                f"Filter predicate for index {name!r} is not callable: {filter_predicate!r}"
            )

        with self._lock:
            if name in self._indexes:
                raise DuplicateIndexError(name)
            index = FileIndex(name, filter_predicate)
            self._indexes[name] = index
            # A new index forces a full rebuild so it gets populated too
            self._mark_dirty_locked()

        logger.debug(f"Registered index: {name}", extra={"index_name": name})
        return index

    def mark_dirty(self) -> None:
        """Mark every index stale. Idempotent."""
        with self._lock:
            self._mark_dirty_locked()

    def _mark_dirty_locked(self) -> None:
        self._dirty = True
        self._generation += 1

    @property
    def is_dirty(self) -> bool:
        """Whether the next read must rebuild the indexes."""
        return self._dirty

    @property
    def generation(self) -> int:
        """Counter bumped on every invalidation."""
        return self._generation

    def clear_dirty(self, generation: int) -> bool:
        """
        Clear the dirty flag if no invalidation happened since `generation`.

        Args:
            generation: Generation observed when the rebuild started

        Returns:
            True if the flag was cleared, False if it stays dirty
        """
        with self._lock:
            if self._generation != generation:
                return False
            self._dirty = False
            return True

    def get(self, name: str) -> FileIndex:
        """
        Look up an index by name.

        Raises:
            UnknownIndexError: If no index with this name is registered
        """
        try:
            return self._indexes[name]
        except KeyError:
            raise UnknownIndexError(name) from None

    def names(self) -> list[str]:
        """Index names in registration order."""
        with self._lock:
            return list(self._indexes)

    def snapshot(self) -> list[FileIndex]:
        """Registered indexes in registration order, copied under the lock."""
        with self._lock:
            return list(self._indexes.values())

    def __contains__(self, name: object) -> bool:
        return name in self._indexes

    def __iter__(self) -> Iterator[FileIndex]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._indexes)
