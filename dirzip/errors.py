"""
Error types raised by dirzip.

Every failure of an archive call is reported as a subclass of
ZipDirError. They are terminal: a call that raises one produces no
buffer and writes nothing to disk.
"""

from __future__ import annotations

from typing import Optional


class ZipDirError(RuntimeError):
    """Base class for all dirzip failures."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class RootNotFoundError(ZipDirError):
    """The root path does not exist."""


class RootNotADirectoryError(ZipDirError):
    """The root path exists but is not a directory."""


class ReadError(ZipDirError):
    """An entry could not be stat'ed or read during traversal."""


class EmptyRootError(ZipDirError):
    """The traversal produced no files while empty directories are disallowed."""

    MESSAGE = "Cannot have an empty root directory"

    def __init__(self, path: Optional[str] = None) -> None:
        super().__init__(self.MESSAGE, path)


class WriteError(ZipDirError):
    """The finalized archive could not be written to its destination."""


class ArchiveError(ZipDirError):
    """The archive could not be assembled or finalized."""


__all__ = [
    "ZipDirError",
    "RootNotFoundError",
    "RootNotADirectoryError",
    "ReadError",
    "EmptyRootError",
    "WriteError",
    "ArchiveError",
]
