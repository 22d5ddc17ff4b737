"""
Project root checks shared by the CLI and the watch service.

A root must be an existing directory outside the operating system's own
trees before it is walked or watched.
"""

import sys
from dataclasses import dataclass
from pathlib import Path, PurePath, PurePosixPath

POSIX_SYSTEM_DIRS = frozenset(
    {"/bin", "/boot", "/dev", "/etc", "/lib", "/lib64", "/proc", "/root", "/sbin", "/sys", "/usr", "/var"}
)

# Compared case-insensitively against every component below the drive
WINDOWS_SYSTEM_DIRS = frozenset(
    {"windows", "system32", "syswow64", "programdata", "program files", "program files (x86)"}
)


@dataclass
class PathValidationResult:
    valid: bool
    error_message: str | None = None

    @classmethod
    def rejected(cls, message: str) -> "PathValidationResult":
        return cls(valid=False, error_message=message)


def _is_posix_system_directory(path_str: str) -> bool:
    candidate = PurePosixPath(path_str)
    return any(candidate.is_relative_to(system_dir) for system_dir in POSIX_SYSTEM_DIRS)


def _is_windows_system_directory(resolved: PurePath) -> bool:
    return not WINDOWS_SYSTEM_DIRS.isdisjoint(part.lower() for part in resolved.parts[1:])


def is_system_directory(path: Path) -> bool:
    """True when `path`, once resolved, lies inside an operating system directory."""
    try:
        resolved = Path(path).resolve()
    except (OSError, ValueError):
        return False
    if sys.platform == "win32":
        return _is_windows_system_directory(resolved)
    return _is_posix_system_directory(resolved.as_posix())


def validate_project_root(path: str | Path) -> PathValidationResult:
    """
    Check that `path` can serve as a project root.

    Returns:
        A valid result, or an invalid one whose error_message says which
        check failed (missing path, not a directory, system directory).
    """
    candidate = Path(path)
    try:
        if not candidate.exists():
            return PathValidationResult.rejected(f"Path '{path}' does not exist")
        if not candidate.is_dir():
            return PathValidationResult.rejected(f"Path '{path}' is not a directory")
    except (OSError, ValueError) as e:
        return PathValidationResult.rejected(f"Invalid path '{path}': {e}")

    if is_system_directory(candidate):
        return PathValidationResult.rejected("Indexing system directories is forbidden")
    return PathValidationResult(valid=True)
