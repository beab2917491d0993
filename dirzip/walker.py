"""
Deterministic directory walker.

The walker enumerates every node below a root directory in a stable,
name-sorted, depth-first order and yields the ones accepted by an
inclusion predicate as Entry objects. File entries carry their bytes,
read at the moment the entry is produced.

Two independent predicates are evaluated per node:

    include(path, stat) -> bool
        Whether the node is emitted. Evaluated once for every file and
        directory.

    descend(path, stat) -> bool
        Whether traversal enters a directory. Evaluated once for every
        directory, whatever ``include`` said about it.

By default both accept everything, so a directory excluded from the
output is still traversed and its children are judged on their own.
"""

from __future__ import annotations

import logging
import os
import stat as stat_mod
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterator, Optional, Union

from .errors import ReadError, RootNotADirectoryError, RootNotFoundError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class EntryStat:
    """
    Metadata for one filesystem node.

    Symlinks are resolved: a link to a directory reports ``is_dir`` and
    ``is_symlink`` together. ``raw`` is the resolved os.stat_result.
    """

    is_dir: bool
    is_symlink: bool
    size: int
    mtime: float
    raw: os.stat_result

    @property
    def is_file(self) -> bool:
        return stat_mod.S_ISREG(self.raw.st_mode)

    @classmethod
    def from_path(cls, path: str) -> "EntryStat":
        try:
            link = os.lstat(path)
            st = os.stat(path)
        except OSError as exc:
            raise ReadError(f"Cannot stat {path}: {exc}", path) from exc

        return cls(
            is_dir=stat_mod.S_ISDIR(st.st_mode),
            is_symlink=stat_mod.S_ISLNK(link.st_mode),
            size=st.st_size,
            mtime=st.st_mtime,
            raw=st,
        )


Predicate = Callable[[str, EntryStat], bool]


def accept_all(path: str, stat: EntryStat) -> bool:
    return True


@dataclass
class Entry:
    """
    A node selected for the archive.

    Parameters
    ----------
    path :
        Absolute filesystem path of the node.
    rel_path :
        Path relative to the walk root, joined with "/" and without a
        trailing slash.
    stat :
        Resolved metadata.
    data :
        File contents, or None for directories.
    """

    path: str
    rel_path: str
    stat: EntryStat
    data: Optional[bytes] = None

    @property
    def is_dir(self) -> bool:
        return self.stat.is_dir

    @property
    def archive_name(self) -> str:
        """Member name inside the ZIP (directories end with "/")."""
        return self.rel_path + "/" if self.is_dir else self.rel_path

    def is_ancestor_of(self, other: "Entry") -> bool:
        return self.is_dir and other.rel_path.startswith(self.rel_path + "/")


# ----------------------------------------------------------------------
# Root validation
# ----------------------------------------------------------------------

def resolve_root(root_path: PathLike) -> str:
    """
    Return the absolute, separator-normalized root directory.

    Raises
    ------
    RootNotFoundError
        If nothing exists at ``root_path``.
    RootNotADirectoryError
        If ``root_path`` is not a directory.
    """
    root = os.path.abspath(os.fspath(root_path))

    if not os.path.exists(root):
        raise RootNotFoundError(f"Directory not found: {root}", root)
    if not os.path.isdir(root):
        raise RootNotADirectoryError(f"Not a directory: {root}", root)

    return root


# ----------------------------------------------------------------------
# Traversal
# ----------------------------------------------------------------------

def _read_file(path: str, stat: EntryStat) -> bytes:
    if not stat.is_file:
        raise ReadError(f"Unsupported file type: {path}", path)
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as exc:
        raise ReadError(f"Cannot read {path}: {exc}", path) from exc


def _list_dir(path: str) -> list:
    try:
        return sorted(os.listdir(path))
    except OSError as exc:
        raise ReadError(f"Cannot list directory {path}: {exc}", path) from exc


def _walk_dir(
    dir_path: str,
    rel_dir: str,
    include: Predicate,
    descend: Predicate,
    ancestors: FrozenSet[str],
) -> Iterator[Entry]:
    for name in _list_dir(dir_path):
        full = os.path.join(dir_path, name)
        rel = f"{rel_dir}/{name}" if rel_dir else name
        st = EntryStat.from_path(full)
        included = bool(include(full, st))

        if not st.is_dir:
            if included:
                yield Entry(full, rel, st, _read_file(full, st))
            continue

        if included:
            yield Entry(full, rel, st)

        if not descend(full, st):
            continue

        real = os.path.realpath(full)
        if real in ancestors:
            logger.warning("Not following symlink cycle: %s -> %s", full, real)
            continue

        yield from _walk_dir(full, rel, include, descend, ancestors | {real})


def iter_entries(
    root_path: PathLike,
    include: Optional[Predicate] = None,
    descend: Optional[Predicate] = None,
) -> Iterator[Entry]:
    """
    Yield the entries below ``root_path`` accepted by ``include``.

    Order is depth-first with children sorted by name, so a directory
    is always yielded before anything it contains. Errors are raised
    as soon as they are encountered; there is no partial recovery.
    """
    root = resolve_root(root_path)
    logger.debug("Walking %s", root)
    yield from _walk_dir(
        root,
        "",
        include or accept_all,
        descend or accept_all,
        frozenset({os.path.realpath(root)}),
    )


def walk(
    root_path: PathLike,
    on_entry: Callable[[Entry], None],
    include: Optional[Predicate] = None,
    descend: Optional[Predicate] = None,
) -> int:
    """
    Call ``on_entry`` once per included entry and return how many there were.
    """
    count = 0
    for entry in iter_entries(root_path, include=include, descend=descend):
        on_entry(entry)
        count += 1
    return count


__all__ = [
    "Entry",
    "EntryStat",
    "Predicate",
    "accept_all",
    "resolve_root",
    "iter_entries",
    "walk",
]
