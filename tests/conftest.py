import io
import json
import os
import zipfile
from pathlib import Path
from typing import Dict

import pytest

# 1x1 transparent GIF
TINY_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01"
    b"\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)

SAMPLE_FILES = [
    "file1.json",
    "tiny.gif",
    "dir/file2.json",
    "dir/file3.json",
    "dir/deepDir/deeperDir/file4.json",
]

SAMPLE_DIRS = [
    "dir",
    "dir/deepDir",
    "dir/deepDir/deeperDir",
    "emptyDir",
]


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """
    sampleZip/
        file1.json
        tiny.gif
        dir/file2.json
        dir/file3.json
        dir/deepDir/deeperDir/file4.json
        emptyDir/
    """
    root = tmp_path / "sampleZip"
    for i, rel in enumerate(SAMPLE_FILES):
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        if rel.endswith(".gif"):
            target.write_bytes(TINY_GIF)
        else:
            target.write_text(json.dumps({"file": rel, "n": i}), encoding="utf-8")
    (root / "emptyDir").mkdir()
    return root


@pytest.fixture
def empty_sub_dir(tmp_path: Path) -> Path:
    """A root holding one file and one empty subdirectory."""
    root = tmp_path / "emptySubFolderSampleZip"
    (root / "emptySub").mkdir(parents=True)
    (root / "file.txt").write_text("hello\n", encoding="utf-8")
    return root


def read_tree(root: Path) -> Dict[str, bytes]:
    """Map relative file paths under root to their bytes."""
    out: Dict[str, bytes] = {}
    for path in sorted(root.rglob("*")):
        if path.is_file():
            out[path.relative_to(root).as_posix()] = path.read_bytes()
    return out


def member_names(buffer: bytes):
    with zipfile.ZipFile(io.BytesIO(buffer)) as zf:
        return zf.namelist()


def abs_paths(root: Path, rels):
    return {os.path.join(str(root), *rel.split("/")) for rel in rels}
