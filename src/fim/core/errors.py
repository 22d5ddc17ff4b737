"""Exception types for the file index manager."""


class FileIndexError(Exception):
    """Base exception for file index errors."""

    pass


class DuplicateIndexError(FileIndexError):
    """Raised when registering an index whose name is already taken."""

    def __init__(self, index_name: str):
        self.index_name = index_name
        super().__init__(f"Duplicate index name: {index_name!r}")


class InvalidArgumentError(FileIndexError, ValueError):
    """Raised for malformed registration arguments or configuration values."""

    pass


class UnknownIndexError(FileIndexError, KeyError):
    """Raised when querying an index that was never registered."""

    def __init__(self, index_name: str):
        self.index_name = index_name
        super().__init__(index_name)

    def __str__(self) -> str:
        return f"Index not found: {self.index_name!r}"


class TraversalLimitExceeded(FileIndexError):
    """
    Signals that a directory walk hit the file-count ceiling.

    This is a soft condition: the walk stops, the records gathered so far
    are kept, and the error is handed to the limit notifier rather than
    being raised out of a query.

    Attributes:
        limit: The configured file-count ceiling
        files_visited: Number of files visited before the walk was aborted
    """

    def __init__(self, limit: int, files_visited: int):
        self.limit = limit
        self.files_visited = files_visited
        super().__init__(
            f"Too many files: the project exceeds the limit of {limit} files"
        )


class DirectoryListingError(FileIndexError, OSError):
    """Raised by a directory lister when a directory cannot be enumerated."""

    def __init__(self, directory: str, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Cannot list directory {directory}: {reason}")
