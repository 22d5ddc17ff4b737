"""
Data models for the file index manager.

Contains the immutable records produced by a directory walk and the
result/statistics containers reported after each sync.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DirectoryEntry:
    """
    A raw child entry as reported by a directory lister.

    Filter predicates are evaluated against this object, not against
    the FileRecord built from it.

    Attributes:
        name: Base name of the entry
        full_path: Full path of the entry
        is_file: True if the entry is a regular file
        is_directory: True if the entry is a directory
    """

    name: str
    full_path: str
    is_file: bool = False
    is_directory: bool = False


@dataclass(frozen=True)
class FileRecord:
    """
    Immutable metadata for one discovered file.

    A single instance is shared by every index whose filter accepted the
    file during the same walk.

    Attributes:
        name: Base filename
        full_path: Full path of the file
    """

    name: str
    full_path: str

    @classmethod
    def from_entry(cls, entry: DirectoryEntry) -> "FileRecord":
        """Build a record from a directory entry."""
        return cls(name=entry.name, full_path=entry.full_path)


@dataclass
class SyncResult:
    """
    Outcome of one sync cycle.

    Attributes:
        root: Project root that was walked, None if no root was available
        files_visited: Number of files visited during the walk
        index_sizes: Record count per index after the sync
        skipped_directories: Paths of directories that could not be listed
        limit_exceeded: True if the walk was aborted at the file-count ceiling
        duration_ms: Wall time of the rebuild in milliseconds
        skipped: True if the sync was a no-op because nothing was dirty
    """

    root: str | None = None
    files_visited: int = 0
    index_sizes: dict[str, int] = field(default_factory=dict)
    skipped_directories: list[str] = field(default_factory=list)
    limit_exceeded: bool = False
    duration_ms: float = 0.0
    skipped: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result to a dictionary."""
        return {
            "root": self.root,
            "files_visited": self.files_visited,
            "index_sizes": dict(self.index_sizes),
            "skipped_directories": list(self.skipped_directories),
            "limit_exceeded": self.limit_exceeded,
            "duration_ms": self.duration_ms,
            "skipped": self.skipped,
        }


@dataclass
class SyncStats:
    """
    Cumulative sync statistics for one manager.

    Only rebuilds are counted; no-op syncs leave the statistics untouched.
    """

    syncs_performed: int = 0
    last_sync_at: datetime | None = None
    last_sync_duration_ms: float = 0.0
    last_files_visited: int = 0
    limit_hits: int = 0
    skipped_directories: int = 0

    def record(self, result: SyncResult) -> None:
        """Fold a completed rebuild into the statistics."""
        self.syncs_performed += 1
        self.last_sync_at = datetime.now()
        self.last_sync_duration_ms = result.duration_ms
        self.last_files_visited = result.files_visited
        self.skipped_directories += len(result.skipped_directories)
        if result.limit_exceeded:
            self.limit_hits += 1

    def to_dict(self) -> dict[str, Any]:
        """Serialize stats to dictionary for JSON reporting."""
        return {
            "syncs_performed": self.syncs_performed,
            "last_sync_at": (
                self.last_sync_at.isoformat() if self.last_sync_at else None
            ),
            "last_sync_duration_ms": self.last_sync_duration_ms,
            "last_files_visited": self.last_files_visited,
            "limit_hits": self.limit_hits,
            "skipped_directories": self.skipped_directories,
        }
