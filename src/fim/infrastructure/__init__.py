"""
Infrastructure Layer - Directory listing, project root and file watching.
"""

from fim.infrastructure.directory import DirectoryListerInterface, LocalDirectoryLister
from fim.infrastructure.fakes import FakeFileWatcher, InMemoryDirectoryLister
from fim.infrastructure.file_watcher import FileWatcher, FileWatcherInterface
from fim.infrastructure.root_provider import ProjectRoot, ProjectRootProvider, RootListener

__all__ = [
    # Directory listing
    "DirectoryListerInterface",
    "LocalDirectoryLister",
    # Project root
    "ProjectRootProvider",
    "ProjectRoot",
    "RootListener",
    # File watching
    "FileWatcherInterface",
    "FileWatcher",
    # Fakes
    "InMemoryDirectoryLister",
    "FakeFileWatcher",
]
