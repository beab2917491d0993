import io
import os
import zipfile

import pytest
from fastapi.testclient import TestClient

from dirzip.app import create_app
from dirzip.config import ZipDirConfig

from conftest import SAMPLE_DIRS, SAMPLE_FILES


@pytest.fixture
def client(sample_dir, empty_sub_dir):
    app = create_app(ZipDirConfig(serve_root=str(sample_dir.parent)))
    with TestClient(app) as c:
        yield c


def _names(resp):
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        return zf.namelist()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_archive_download(client):
    resp = client.post("/api/v1/archive", json={"path": "sampleZip"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert 'filename="sampleZip.zip"' in resp.headers["content-disposition"]
    assert int(resp.headers["x-entry-count"]) == len(SAMPLE_FILES) + len(SAMPLE_DIRS)
    assert sorted(_names(resp)) == sorted(SAMPLE_FILES + [d + "/" for d in SAMPLE_DIRS])


def test_archive_suffix_filter(client):
    resp = client.post(
        "/api/v1/archive",
        json={"path": "sampleZip", "include_suffixes": [".JSON"], "filename": "data.zip"},
    )
    assert resp.status_code == 200
    assert 'filename="data.zip"' in resp.headers["content-disposition"]
    names = _names(resp)
    assert "tiny.gif" not in names
    assert "dir/deepDir/deeperDir/file4.json" in names


def test_archive_no_empty_directories(client):
    resp = client.post(
        "/api/v1/archive",
        json={"path": "emptySubFolderSampleZip", "no_empty_directories": True},
    )
    assert resp.status_code == 200
    assert _names(resp) == ["file.txt"]


def test_empty_root_is_unprocessable(client):
    resp = client.post(
        "/api/v1/archive",
        json={"path": "sampleZip/emptyDir", "no_empty_directories": True},
    )
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail["kind"] == "EmptyRootError"
    assert detail["error"] == "Cannot have an empty root directory"


def test_missing_directory(client):
    resp = client.post("/api/v1/archive", json={"path": "nope"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["kind"] == "RootNotFoundError"


def test_file_is_not_a_directory(client):
    resp = client.post("/api/v1/archive", json={"path": "sampleZip/file1.json"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "RootNotADirectoryError"


def test_path_escape_rejected(client):
    resp = client.post("/api/v1/archive", json={"path": "../.."})
    assert resp.status_code == 400


def test_symlink_escape_rejected(client, sample_dir, tmp_path_factory):
    outside = tmp_path_factory.mktemp("outside")
    (outside / "secret.txt").write_text("secret")
    os.symlink(outside, sample_dir.parent / "escape")

    resp = client.post("/api/v1/archive", json={"path": "escape"})
    assert resp.status_code == 400


def test_symlink_inside_serve_root_allowed(client, sample_dir):
    os.symlink(sample_dir / "dir", sample_dir.parent / "alias")

    resp = client.post("/api/v1/archive", json={"path": "alias"})
    assert resp.status_code == 200
    assert "file2.json" in _names(resp)
