"""
Named filter predicates for file indexes.

Each predicate is a small immutable callable taking a DirectoryEntry and
returning a bool. Arbitrary callables are accepted by the registry as
well; these variants exist so common filters have a readable repr and can
be built from configuration.
"""

import fnmatch
from collections.abc import Callable
from dataclasses import dataclass

from .models import DirectoryEntry

EntryFilter = Callable[[DirectoryEntry], bool]


@dataclass(frozen=True)
class AcceptAll:
    """Accepts every file."""

    def __call__(self, entry: DirectoryEntry) -> bool:
        return True


@dataclass(frozen=True)
class ExtensionEquals:
    """
    Accepts files whose name ends with the given extension.

    The comparison is case-sensitive: ".css" does not match "reset.CSS".
    """

    extension: str

    def __call__(self, entry: DirectoryEntry) -> bool:
        return entry.name.endswith(self.extension)


@dataclass(frozen=True)
class NameMatches:
    """Accepts files whose name matches a glob pattern (case-sensitive)."""

    pattern: str

    def __call__(self, entry: DirectoryEntry) -> bool:
        return fnmatch.fnmatchcase(entry.name, self.pattern)


def accept_all() -> AcceptAll:
    """Return a predicate accepting every file."""
    return AcceptAll()


def extension_equals(extension: str) -> ExtensionEquals:
    """
    Return a predicate matching a literal filename suffix.

    Args:
        extension: Suffix including the dot (e.g., '.css')
    """
    return ExtensionEquals(extension)


def name_matches(pattern: str) -> NameMatches:
    """Return a predicate matching filenames against a glob pattern."""
    return NameMatches(pattern)


# Indexes every manager registers at startup, in registration order
BUILTIN_INDEXES: dict[str, EntryFilter] = {
    "all": accept_all(),
    "css": extension_equals(".css"),
}
