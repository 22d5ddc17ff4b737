"""
Centralized services container module for the file index manager.

Wires configuration, the project root, the directory lister and the
manager together so entry points do not have to.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fim.core.config import FIMConfig, load_config
from fim.infrastructure.directory import DirectoryListerInterface, LocalDirectoryLister
from fim.infrastructure.file_watcher import FileWatcher, FileWatcherInterface
from fim.infrastructure.root_provider import ProjectRoot
from fim.services.file_index_manager import FileIndexManager
from fim.services.sync_engine import LimitNotifier
from fim.services.watch_service import WatchService

logger = logging.getLogger(__name__)


@dataclass
class ServicesContainer:
    """
    Container holding the shared service instances.

    Attributes:
        config: Application configuration
        root_provider: Current project root and root-change notifications
        manager: File index manager over the project root
        watch_service: Running watch service when watch.enabled is set
    """

    config: FIMConfig
    root_provider: ProjectRoot
    manager: FileIndexManager
    watch_service: Optional[WatchService] = None

    def close(self) -> None:
        """Stop watching and detach the manager from the root provider."""
        if self.watch_service is not None:
            self.watch_service.stop()
        self.manager.close()


def create_file_index_manager(
    config: Optional[FIMConfig] = None,
    root: Optional[Path | str] = None,
    lister: Optional[DirectoryListerInterface] = None,
    root_provider: Optional[ProjectRoot] = None,
    on_limit_exceeded: Optional[LimitNotifier] = None,
) -> FileIndexManager:
    """
    Build a manager with the built-in indexes and configured ceiling.

    Args:
        config: Configuration; defaults and environment overrides if None
        root: Initial project root, ignored when root_provider is given
        lister: Directory lister; the local filesystem if None
        root_provider: Root provider to follow; a new ProjectRoot if None
        on_limit_exceeded: Called when a walk hits the file-count ceiling

    Returns:
        A FileIndexManager whose indexes are dirty until the first query
    """
    config = config or load_config()
    return FileIndexManager(
        lister=lister or LocalDirectoryLister(),
        root_provider=root_provider or ProjectRoot(root),
        max_files=config.indexing.max_files,
        ignore_patterns=config.indexing.ignore_patterns,
        on_limit_exceeded=on_limit_exceeded,
    )


def create_services(
    config_path: Optional[Path | str] = None,
    root: Optional[Path | str] = None,
    on_limit_exceeded: Optional[LimitNotifier] = None,
    file_watcher: Optional[FileWatcherInterface] = None,
) -> ServicesContainer:
    """
    Create and wire all services from configuration.

    Args:
        config_path: Optional path to a configuration file. If None, uses
                    environment variables and defaults.
        root: Initial project root
        on_limit_exceeded: Called when a walk hits the file-count ceiling
        file_watcher: Watcher used when watch.enabled is set; a FileWatcher if None

    Returns:
        ServicesContainer with all initialized services. With watch.enabled
        and a root given, its watch service is already running.

    Raises:
        PathValidationError: If watching is enabled and the root cannot be watched
    """
    config = load_config(config_path)
    root_provider = ProjectRoot(root)
    manager = create_file_index_manager(
        config=config,
        root_provider=root_provider,
        on_limit_exceeded=on_limit_exceeded,
    )
    services = ServicesContainer(config=config, root_provider=root_provider, manager=manager)

    if config.watch.enabled:
        services.watch_service = create_watch_service(services, file_watcher)
        if root_provider.get_project_root() is not None:
            services.watch_service.start()
        else:
            logger.info("File watching enabled without a project root, watcher not started")
    return services


def create_watch_service(
    services: ServicesContainer,
    file_watcher: Optional[FileWatcherInterface] = None,
) -> WatchService:
    """Build a watch service for the container's manager and root."""
    watcher = file_watcher or FileWatcher(ignore_patterns=services.config.watch.ignore_patterns)
    return WatchService(
        manager=services.manager,
        file_watcher=watcher,
        root_provider=services.root_provider,
    )
