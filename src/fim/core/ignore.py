"""
Gitignore-style ignore matching for directory walks.

Wraps pathspec so patterns are matched against paths relative to the
project root, the same way a .gitignore at the root would apply.
"""

import logging
from pathlib import PurePosixPath

import pathspec

logger = logging.getLogger(__name__)


class IgnoreMatcher:
    """
    Matches root-relative paths against gitignore-style patterns.

    An empty pattern list matches nothing.
    """

    def __init__(self, patterns: list[str] | None = None):
        """
        Initialize the matcher.

        Args:
            patterns: Gitignore-style patterns (e.g., ['node_modules/', '*.log'])
        """
        self._patterns = [p.strip() for p in (patterns or []) if p.strip()]
        self._spec = pathspec.PathSpec.from_lines(
            pathspec.patterns.GitWildMatchPattern, self._patterns
        )

    @property
    def patterns(self) -> list[str]:
        """Get the active patterns."""
        return list(self._patterns)

    def __bool__(self) -> bool:
        return bool(self._patterns)

    def matches(self, relative_path: str, is_dir: bool = False) -> bool:
        """
        Check whether a root-relative path is ignored.

        Args:
            relative_path: Path relative to the project root, '/' or os separators
            is_dir: Whether the path is a directory (enables 'dir/' patterns)

        Returns:
            True if the path should be skipped
        """
        if not self._patterns:
            return False

        path_str = PurePosixPath(relative_path.replace("\\", "/")).as_posix()
        if is_dir:
            path_str += "/"

        matched = self._spec.match_file(path_str)
        if matched:
            logger.debug(f"Ignoring: {relative_path}")
        return matched
