"""
In-memory ZIP builder.

ArchiveBuilder records file and directory members into a ZIP held in a
BytesIO buffer and finalizes it into immutable bytes. Member names are
POSIX-style ("a/b/c"); directory members end with "/" and carry no
data, so empty directories survive extraction.

Output is deterministic for a fixed sequence of adds: timestamps come
from the caller (or a fixed epoch) and members are written in call
order.
"""

from __future__ import annotations

import io
import logging
import os
import stat as stat_mod
import struct
import tempfile
import time
import zipfile
from typing import Optional, Set, Tuple, Union

from .config import ZipDirConfig
from .errors import ArchiveError, WriteError

logger = logging.getLogger(__name__)

# Earliest timestamp representable in a ZIP header.
ZIP_EPOCH: Tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)
# Latest one; the header year field is 7 bits wide.
ZIP_LATEST: Tuple[int, int, int, int, int, int] = (2107, 12, 31, 23, 59, 58)

_DEFAULT_FILE_MODE = 0o644
_DEFAULT_DIR_MODE = 0o755
_MSDOS_DIR_FLAG = 0x10


def _date_time(mtime: Optional[float]) -> Tuple[int, int, int, int, int, int]:
    if mtime is None:
        return ZIP_EPOCH
    try:
        dt = time.localtime(mtime)[:6]
    except (OverflowError, OSError, ValueError):
        return ZIP_LATEST if mtime > 0 else ZIP_EPOCH
    if dt < ZIP_EPOCH:
        return ZIP_EPOCH
    if dt > ZIP_LATEST:
        return ZIP_LATEST
    return dt


def _member_name(rel_path: str) -> str:
    name = rel_path.replace("\\", "/").strip("/")
    if not name:
        raise ArchiveError(f"Invalid archive member name: {rel_path!r}", rel_path)
    return name


class ArchiveBuilder:
    """
    Incremental ZIP assembly.

    Parameters
    ----------
    config :
        Supplies the compression method and level. Defaults to
        ZipDirConfig().

    Notes
    -----
    One builder backs exactly one archive. After finalize() the
    builder only hands back the same bytes; further adds raise
    ArchiveError.
    """

    def __init__(self, config: Optional[ZipDirConfig] = None) -> None:
        self.config = config or ZipDirConfig()
        try:
            self._compression = self.config.compression_method
        except ValueError as exc:
            raise ArchiveError(str(exc)) from exc
        self._buffer = io.BytesIO()
        self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(
            self._buffer,
            "w",
            compression=self._compression,
            compresslevel=self.config.compress_level,
        )
        self._names: Set[str] = set()
        self._result: Optional[bytes] = None

        self.file_count = 0
        self.directory_count = 0

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    @property
    def entry_count(self) -> int:
        return self.file_count + self.directory_count

    @property
    def finalized(self) -> bool:
        return self._result is not None

    def _claim(self, name: str) -> zipfile.ZipFile:
        if self._zip is None:
            raise ArchiveError(f"Archive already finalized, cannot add {name}", name)
        if name in self._names:
            raise ArchiveError(f"Duplicate archive member: {name}", name)
        self._names.add(name)
        return self._zip

    def add_file(
        self,
        rel_path: str,
        data: bytes,
        *,
        mtime: Optional[float] = None,
        mode: Optional[int] = None,
    ) -> str:
        """
        Store ``data`` under ``rel_path``.

        Returns the member name used.
        """
        name = _member_name(rel_path)
        zf = self._claim(name)

        info = zipfile.ZipInfo(name, date_time=_date_time(mtime))
        info.compress_type = self._compression
        perms = stat_mod.S_IMODE(mode) if mode is not None else _DEFAULT_FILE_MODE
        info.external_attr = (stat_mod.S_IFREG | perms) << 16

        try:
            zf.writestr(info, data, compresslevel=self.config.compress_level)
        except (OSError, ValueError, struct.error, zipfile.LargeZipFile) as exc:
            raise ArchiveError(f"Failed to add {name}: {exc}", name) from exc

        self.file_count += 1
        logger.debug("Added file %s (%d bytes)", name, len(data))
        return name

    def add_directory(
        self,
        rel_path: str,
        *,
        mtime: Optional[float] = None,
        mode: Optional[int] = None,
    ) -> str:
        """
        Store a zero-byte directory placeholder for ``rel_path``.

        Returns the member name used (with trailing "/").
        """
        name = _member_name(rel_path) + "/"
        zf = self._claim(name)

        info = zipfile.ZipInfo(name, date_time=_date_time(mtime))
        info.compress_type = zipfile.ZIP_STORED
        perms = stat_mod.S_IMODE(mode) if mode is not None else _DEFAULT_DIR_MODE
        info.external_attr = ((stat_mod.S_IFDIR | perms) << 16) | _MSDOS_DIR_FLAG

        try:
            zf.writestr(info, b"")
        except (OSError, ValueError, struct.error) as exc:
            raise ArchiveError(f"Failed to add {name}: {exc}", name) from exc

        self.directory_count += 1
        logger.debug("Added directory %s", name)
        return name

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def finalize(self) -> bytes:
        """
        Close the container and return the archive bytes.

        Calling finalize() again returns the same bytes.
        """
        if self._result is not None:
            return self._result

        zf, self._zip = self._zip, None
        try:
            zf.close()
        except (OSError, ValueError, struct.error, zipfile.LargeZipFile) as exc:
            raise ArchiveError(f"Failed to finalize archive: {exc}") from exc

        self._result = self._buffer.getvalue()
        self._buffer.close()
        return self._result


def write_to(path: Union[str, "os.PathLike[str]"], data: bytes) -> str:
    """
    Persist a finalized archive to ``path``.

    The bytes are written to a temporary file in the destination
    directory and moved into place, so readers never observe a partial
    archive. Parent directories are created as needed.

    Returns the absolute destination path.

    Raises
    ------
    WriteError
        If the destination cannot be written.
    """
    dest = os.path.abspath(os.fspath(path))
    dir_name = os.path.dirname(dest)
    tmp_path = None

    try:
        os.makedirs(dir_name, exist_ok=True)
        with tempfile.NamedTemporaryFile("wb", dir=dir_name, delete=False) as tmp:
            tmp_path = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, dest)
    except OSError as exc:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise WriteError(f"Cannot write archive to {dest}: {exc}", dest) from exc

    logger.info("Wrote archive %s (%d bytes)", dest, len(data))
    return dest


__all__ = [
    "ArchiveBuilder",
    "ZIP_EPOCH",
    "ZIP_LATEST",
    "write_to",
]
