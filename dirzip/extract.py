"""
Safe extraction of dirzip archives.

Not part of the archiving path; used to verify round trips. Unlike a
plain ``extractall`` it:

    - accepts either archive bytes or a path to a ZIP file
    - rejects absolute member names and members escaping dest_dir
    - recreates directory members, so empty directories survive
"""

from __future__ import annotations

import io
import os
import zipfile
from pathlib import Path
from typing import List, Union

Source = Union[bytes, str, "os.PathLike[str]"]


def _open(source: Source) -> zipfile.ZipFile:
    if isinstance(source, (bytes, bytearray)):
        return zipfile.ZipFile(io.BytesIO(source), "r")
    return zipfile.ZipFile(os.fspath(source), "r")


def extract_archive(source: Source, dest_dir: Union[str, Path]) -> List[str]:
    """
    Extract ``source`` into ``dest_dir``.

    Returns
    -------
    List[str]
        Relative member names that were materialized (directories keep
        their trailing "/").

    Raises
    ------
    zipfile.BadZipFile
    OSError
    """
    dest = Path(dest_dir)
    dest.mkdir(parents=True, exist_ok=True)
    base = dest.resolve()

    extracted: List[str] = []

    with _open(source) as zf:
        for member in zf.infolist():
            name = member.filename
            if not name:
                continue

            norm = Path(name)
            if norm.is_absolute():
                continue

            target = (dest / norm).resolve()
            if target != base and base not in target.parents:
                # zip-slip
                continue

            if member.is_dir():
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(member, "r") as src, open(target, "wb") as dst:
                    dst.write(src.read())

            extracted.append(name)

    return extracted


__all__ = ["extract_archive"]
