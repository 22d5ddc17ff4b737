"""
Change notifications delivered by the file watcher.

The manager never patches an index from an event; an event at most marks
the indexes dirty so the next query walks the tree again.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class FileEventType(Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


# A record only holds a name and a path, so content edits cannot change an index
_MEMBERSHIP_EVENTS = frozenset({FileEventType.CREATED, FileEventType.DELETED, FileEventType.MOVED})


@dataclass
class FileEvent:
    """
    One change below the watched root.

    For MOVED events file_path is the destination and old_path the source;
    old_path is None when the source was not visible to the watcher.
    """

    event_type: FileEventType
    file_path: Path
    old_path: Path | None = None
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        self.file_path = Path(self.file_path)
        if self.old_path is not None:
            self.old_path = Path(self.old_path)

    def changes_membership(self) -> bool:
        """Whether the event can add a file to an index or remove one."""
        return self.event_type in _MEMBERSHIP_EVENTS
