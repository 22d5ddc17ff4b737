"""
Services Layer - Index syncing, queries and file watching.
"""

from fim.services.container import (
    ServicesContainer,
    create_file_index_manager,
    create_services,
    create_watch_service,
)
from fim.services.file_index_manager import FileIndexManager
from fim.services.sync_engine import LimitNotifier, SyncEngine
from fim.services.watch_service import (
    PathValidationError,
    WatchService,
    WatchServiceError,
    WatchStats,
)

__all__ = [
    "FileIndexManager",
    "SyncEngine",
    "LimitNotifier",
    "WatchService",
    "WatchStats",
    "WatchServiceError",
    "PathValidationError",
    "ServicesContainer",
    "create_file_index_manager",
    "create_services",
    "create_watch_service",
]
