"""
Tests for the file CRUD endpoints and the health routes.
"""

import shutil

import pytest

from tests.fixtures import CUBE_OBJ


class TestListAndDownload:
    def test_list(self, client, files_dir):
        (files_dir / "a.obj").write_bytes(b"v 0 0 0\n")
        resp = client.get("/files")
        assert resp.status_code == 200
        body = resp.json()
        assert [f["name"] for f in body] == ["a.obj", "cube.obj"]
        assert body[1]["size"] == len(CUBE_OBJ)
        assert "lastModified" in body[1]

    def test_list_empty(self, client, files_dir):
        (files_dir / "cube.obj").unlink()
        assert client.get("/files").json() == []

    def test_download_original(self, client):
        resp = client.get("/files/cube.obj")
        assert resp.status_code == 200
        assert resp.content == CUBE_OBJ
        assert "cube.obj" in resp.headers["content-disposition"]

    def test_download_missing(self, client):
        resp = client.get("/files/none.obj")
        assert resp.status_code == 404

    def test_download_invalid_name(self, client):
        resp = client.get("/files/..%5Csecret")
        assert resp.status_code == 400


class TestUpload:
    def test_upload(self, client, files_dir):
        resp = client.post(
            "/files/upload",
            files={"file": ("sphere.obj", b"v 0 0 1\n", "application/octet-stream")},
        )
        assert resp.status_code == 201
        assert resp.json()["name"] == "sphere.obj"
        assert resp.json()["size"] == 8
        assert (files_dir / "sphere.obj").read_bytes() == b"v 0 0 1\n"

    def test_uploaded_file_can_be_transformed(self, client):
        client.post(
            "/files/upload",
            files={"file": ("tri.obj", b"v 1 1 1\n", "application/octet-stream")},
        )
        resp = client.get("/files/transform/tri.obj", params={"scale": "[3,3,3]"})
        assert resp.text == "v 3.000000 3.000000 3.000000\n"

    def test_upload_invalid_name(self, client, files_dir):
        resp = client.post(
            "/files/upload",
            files={"file": ("bad name.obj", b"v 0 0 0\n", "application/octet-stream")},
        )
        assert resp.status_code == 400
        assert not (files_dir / "bad name.obj").exists()

    def test_upload_dot_file_rejected(self, client, files_dir):
        resp = client.post(
            "/files/upload",
            files={"file": (".cube.obj", b"v 0 0 0\n", "application/octet-stream")},
        )
        assert resp.status_code == 400
        assert not (files_dir / ".cube.obj").exists()
        assert [f["name"] for f in client.get("/files").json()] == ["cube.obj"]

    def test_in_flight_upload_not_addressable(self, client, files_dir):
        (files_dir / ".upload-abc.part").write_bytes(b"v 1 1 1\n")
        assert client.get("/files/.upload-abc.part").status_code == 400
        assert client.get("/files/transform/.upload-abc.part").status_code == 400

    def test_upload_too_large(self, client, files_dir):
        resp = client.post(
            "/files/upload",
            files={"file": ("huge.obj", b"x" * 2048, "application/octet-stream")},
        )
        assert resp.status_code == 413
        assert sorted(p.name for p in files_dir.iterdir()) == ["cube.obj"]


class TestRenameDelete:
    def test_rename(self, client, files_dir):
        resp = client.patch("/files/cube.obj", json={"newName": "box.obj"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "box.obj"
        assert (files_dir / "box.obj").exists()
        assert not (files_dir / "cube.obj").exists()

    def test_rename_conflict(self, client, files_dir):
        (files_dir / "box.obj").write_bytes(b"")
        resp = client.patch("/files/cube.obj", json={"newName": "box.obj"})
        assert resp.status_code == 409

    def test_rename_missing(self, client):
        resp = client.patch("/files/none.obj", json={"newName": "box.obj"})
        assert resp.status_code == 404

    @pytest.mark.parametrize("new_name", ["../box.obj", "", "a b"])
    def test_rename_invalid_target(self, client, files_dir, new_name):
        resp = client.patch("/files/cube.obj", json={"newName": new_name})
        assert resp.status_code == 400
        assert (files_dir / "cube.obj").exists()

    def test_rename_requires_body(self, client):
        resp = client.patch("/files/cube.obj", json={})
        assert resp.status_code == 422

    def test_delete(self, client, files_dir):
        resp = client.delete("/files/cube.obj")
        assert resp.status_code == 204
        assert not (files_dir / "cube.obj").exists()
        assert client.get("/files/cube.obj").status_code == 404

    def test_delete_missing(self, client):
        assert client.delete("/files/none.obj").status_code == 404


class TestHealth:
    @pytest.mark.smoke
    def test_root(self, client):
        assert client.get("/").json() == {"message": "Model Vault API is running"}

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert resp.json()["services"] == {"storage": True}

    def test_health_storage_missing(self, client, files_dir):
        shutil.rmtree(files_dir)
        resp = client.get("/health")
        assert resp.status_code == 503
        assert resp.json()["detail"]["status"] == "unhealthy"

    def test_ready(self, client):
        assert client.get("/ready").json() == {"status": "ready"}
