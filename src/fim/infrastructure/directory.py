"""
Directory listing infrastructure component.

Provides the directory-entry abstraction the sync engine walks: one call
lists the immediate children of a directory, reporting each child as a
file or a directory.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from fim.core.errors import DirectoryListingError
from fim.core.models import DirectoryEntry

logger = logging.getLogger(__name__)


class DirectoryListerInterface(ABC):
    """
    Abstract interface for enumerating directory children.

    Implementations must return children in a stable order; the sync
    engine preserves that order when building index record lists.
    """

    @abstractmethod
    def list_children(self, directory: Path) -> list[DirectoryEntry]:
        """
        List the immediate children of a directory.

        Args:
            directory: Directory to enumerate

        Returns:
            DirectoryEntry objects for each child

        Raises:
            DirectoryListingError: If the directory cannot be enumerated
        """
        pass


class LocalDirectoryLister(DirectoryListerInterface):
    """
    Lists directories on the local filesystem using os.scandir.

    Children are sorted by name. Symbolic links are skipped so a walk can
    neither leave the project root nor loop through a link cycle.
    """

    def list_children(self, directory: Path) -> list[DirectoryEntry]:
        """List the children of a local directory, sorted by name."""
        try:
            with os.scandir(directory) as it:
                raw_entries = sorted(it, key=lambda e: e.name)
        except PermissionError as e:
            raise DirectoryListingError(str(directory), f"permission denied ({e})") from e
        except OSError as e:
            raise DirectoryListingError(str(directory), str(e)) from e

        entries: list[DirectoryEntry] = []
        for raw in raw_entries:
            try:
                if raw.is_symlink():
                    logger.debug(f"Skipping symlink: {raw.path}")
                    continue
                is_dir = raw.is_dir(follow_symlinks=False)
                is_file = raw.is_file(follow_symlinks=False)
            except OSError as e:
                logger.warning(f"Error reading directory entry: {raw.path} - {e}")
                continue

            if not (is_dir or is_file):
                # Sockets, FIFOs, device nodes
                continue

            entries.append(
                DirectoryEntry(
                    name=raw.name,
                    full_path=raw.path,
                    is_file=is_file,
                    is_directory=is_dir,
                )
            )

        return entries
