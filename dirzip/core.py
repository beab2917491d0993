"""
Directory-to-ZIP orchestration.

This is the entrypoint used by library callers and by the HTTP layer.
It composes the walker and the builder:

    walker (iter_entries) -> ArchiveBuilder -> bytes [-> save_to]

and exposes three surfaces over the same engine:

    - build_archive()      : synchronous, raises ZipDirError
    - archive_directory()  : coroutine, work runs in a threadpool
    - zip_dir()            : coroutine, reports (error, buffer) once
                             through a callback and a ZipResult

With ``no_empty_directories`` set, directory members are held back
until a file below them is added. Branches that never receive a file
are dropped, and a traversal that adds no file at all fails with
EmptyRootError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from starlette.concurrency import run_in_threadpool

from .archive import ArchiveBuilder, write_to
from .config import ZipDirConfig
from .errors import EmptyRootError, ZipDirError
from .walker import Entry, PathLike, Predicate, iter_entries, resolve_root

logger = logging.getLogger(__name__)


EachFn = Callable[[str], None]
Callback = Callable[[Optional[ZipDirError], Optional[bytes]], None]


def _noop(path: str) -> None:
    return None


@dataclass
class ZipDirOptions:
    """
    Options for a single archive call.

    Parameters
    ----------
    filter :
        ``filter(path, stat) -> bool``; decides whether a node is added.
        Defaults to accepting everything.
    each :
        Called with the absolute source path of every added entry,
        right after it is recorded.
    save_to :
        Optional destination file for the finalized archive.
    no_empty_directories :
        Drop directory-only branches and reject traversals with no files.
    descend :
        ``descend(path, stat) -> bool``; decides whether a directory is
        traversed. Defaults to always. Pass the same function as
        ``filter`` to prune excluded directories entirely.
    config :
        Compression settings.
    """

    filter: Optional[Predicate] = None
    each: Optional[EachFn] = None
    save_to: Optional[str] = None
    no_empty_directories: bool = False
    descend: Optional[Predicate] = None
    config: ZipDirConfig = field(default_factory=ZipDirConfig)


@dataclass
class ZipResult:
    """Outcome of zip_dir(): exactly one of ``error`` / ``buffer`` is set."""

    error: Optional[ZipDirError] = None
    buffer: Optional[bytes] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class _ArchiveSession:
    """Feeds walker entries into a private builder and fires ``each``."""

    def __init__(self, options: ZipDirOptions) -> None:
        self.options = options
        self.builder = ArchiveBuilder(options.config)
        self.notify = options.each or _noop
        self.pending: List[Entry] = []

    def _record(self, entry: Entry) -> None:
        st = entry.stat
        if entry.is_dir:
            self.builder.add_directory(entry.rel_path, mtime=st.mtime, mode=st.raw.st_mode)
        else:
            self.builder.add_file(entry.rel_path, entry.data or b"", mtime=st.mtime, mode=st.raw.st_mode)
        self.notify(entry.path)

    def add(self, entry: Entry) -> None:
        if not self.options.no_empty_directories:
            self._record(entry)
            return

        # Depth-first order: anything pending that is not an ancestor of
        # the current entry has been fully walked without a file.
        self.pending = [d for d in self.pending if d.is_ancestor_of(entry)]

        if entry.is_dir:
            self.pending.append(entry)
            return

        for directory in self.pending:
            self._record(directory)
        self.pending = []
        self._record(entry)


def build_archive(root_path: PathLike, options: Optional[ZipDirOptions] = None) -> bytes:
    """
    Archive ``root_path`` and return the ZIP bytes.

    Raises
    ------
    RootNotFoundError, RootNotADirectoryError
        If the root is missing or not a directory.
    ReadError
        If any entry cannot be read.
    EmptyRootError
        If ``no_empty_directories`` is set and no file was added.
    ArchiveError, WriteError
        If the archive cannot be finalized or saved.
    """
    opts = options or ZipDirOptions()
    root = resolve_root(root_path)
    session = _ArchiveSession(opts)

    for entry in iter_entries(root, include=opts.filter, descend=opts.descend):
        session.add(entry)

    builder = session.builder
    if opts.no_empty_directories and builder.file_count == 0:
        raise EmptyRootError(root)

    buffer = builder.finalize()
    if opts.save_to:
        write_to(opts.save_to, buffer)

    logger.info(
        "Archived %s: %d files, %d directories, %d bytes",
        root,
        builder.file_count,
        builder.directory_count,
        len(buffer),
    )
    return buffer


async def archive_directory(
    root_path: PathLike,
    options: Optional[ZipDirOptions] = None,
) -> bytes:
    """
    Coroutine form of build_archive().

    Filesystem and compression work runs in Starlette's threadpool, so
    the event loop stays responsive. ``each`` and ``filter`` are called
    from that worker thread.
    """
    return await run_in_threadpool(build_archive, root_path, options)


async def zip_dir(
    root_path: PathLike,
    options: Optional[ZipDirOptions] = None,
    callback: Optional[Callback] = None,
) -> ZipResult:
    """
    Archive ``root_path`` and report the outcome exactly once.

    ``callback(error, buffer)`` receives ``(None, bytes)`` on success
    and ``(error, None)`` on failure. The same pair is returned as a
    ZipResult. Only ZipDirError is converted; any other exception
    (including one raised by a user hook) propagates.
    """
    try:
        buffer = await archive_directory(root_path, options)
    except ZipDirError as exc:
        logger.info("Archiving %s failed: %s", root_path, exc)
        result = ZipResult(error=exc)
    else:
        result = ZipResult(buffer=buffer)

    if callback is not None:
        callback(result.error, result.buffer)
    return result


__all__ = [
    "ZipDirOptions",
    "ZipResult",
    "build_archive",
    "archive_directory",
    "zip_dir",
]
