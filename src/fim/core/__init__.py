"""
Core Layer - Models, filters, the index registry, configuration and errors.
"""

from fim.core.config import (
    FIMConfig,
    IndexingConfig,
    LoggingConfig,
    WatchConfig,
    configure_logging,
    load_config,
)
from fim.core.errors import (
    DirectoryListingError,
    DuplicateIndexError,
    FileIndexError,
    InvalidArgumentError,
    TraversalLimitExceeded,
    UnknownIndexError,
)
from fim.core.file_events import FileEvent, FileEventType
from fim.core.filters import (
    BUILTIN_INDEXES,
    AcceptAll,
    EntryFilter,
    ExtensionEquals,
    NameMatches,
    accept_all,
    extension_equals,
    name_matches,
)
from fim.core.ignore import IgnoreMatcher
from fim.core.models import DirectoryEntry, FileRecord, SyncResult, SyncStats
from fim.core.registry import FileIndex, IndexRegistry

__all__ = [
    # Config
    "FIMConfig",
    "IndexingConfig",
    "WatchConfig",
    "LoggingConfig",
    "load_config",
    "configure_logging",
    # Errors
    "FileIndexError",
    "DuplicateIndexError",
    "InvalidArgumentError",
    "UnknownIndexError",
    "TraversalLimitExceeded",
    "DirectoryListingError",
    # Models
    "DirectoryEntry",
    "FileRecord",
    "SyncResult",
    "SyncStats",
    # Filters
    "EntryFilter",
    "AcceptAll",
    "ExtensionEquals",
    "NameMatches",
    "accept_all",
    "extension_equals",
    "name_matches",
    "BUILTIN_INDEXES",
    "IgnoreMatcher",
    # Registry
    "FileIndex",
    "IndexRegistry",
    # File events
    "FileEvent",
    "FileEventType",
]
