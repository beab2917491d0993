"""
dirzip

Recursively package a directory tree into a ZIP buffer, optionally
saving it to disk.

Modules:
    - walker:  deterministic, filterable directory traversal
    - archive: in-memory ZIP builder and atomic save
    - core:    orchestration (build_archive / archive_directory / zip_dir)
    - extract: safe extraction, used to verify round trips
    - config:  ZipDirConfig and environment loading
    - errors:  ZipDirError hierarchy
    - api, app: FastAPI surface (import dirzip.app explicitly)

Typical use:

    from dirzip import ZipDirOptions, build_archive

    data = build_archive("site/", ZipDirOptions(save_to="site.zip"))
"""

from .archive import ArchiveBuilder, write_to
from .config import ZipDirConfig, configure_logging, load_config
from .core import (
    ZipDirOptions,
    ZipResult,
    archive_directory,
    build_archive,
    zip_dir,
)
from .errors import (
    ArchiveError,
    EmptyRootError,
    ReadError,
    RootNotADirectoryError,
    RootNotFoundError,
    WriteError,
    ZipDirError,
)
from .extract import extract_archive
from .walker import Entry, EntryStat, iter_entries, walk

__all__ = [
    # Orchestration
    "ZipDirOptions",
    "ZipResult",
    "build_archive",
    "archive_directory",
    "zip_dir",

    # Building blocks
    "ArchiveBuilder",
    "write_to",
    "Entry",
    "EntryStat",
    "iter_entries",
    "walk",
    "extract_archive",

    # Configuration
    "ZipDirConfig",
    "load_config",
    "configure_logging",

    # Errors
    "ZipDirError",
    "RootNotFoundError",
    "RootNotADirectoryError",
    "ReadError",
    "EmptyRootError",
    "WriteError",
    "ArchiveError",
]
