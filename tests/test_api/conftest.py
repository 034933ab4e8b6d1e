import pytest
from fastapi.testclient import TestClient

from model_vault.config import ConfigState, StorageConfig, StreamingConfig
from model_vault_api.main import create_app
from tests.fixtures import CUBE_OBJ


@pytest.fixture
def files_dir(tmp_path):
    root = tmp_path / "files"
    root.mkdir()
    (root / "cube.obj").write_bytes(CUBE_OBJ)
    return root


@pytest.fixture
def make_client(files_dir):
    def _make(**streaming) -> TestClient:
        config = ConfigState(
            storage=StorageConfig(files_dir=str(files_dir), max_upload_bytes=1024),
            streaming=StreamingConfig(**streaming),
        )
        return TestClient(create_app(config))

    return _make


@pytest.fixture
def client(make_client):
    return make_client()
