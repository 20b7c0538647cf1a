import os

import pytest
from fastapi.testclient import TestClient

# Keep the module-level app in todo_api.main off the filesystem
os.environ.setdefault("CONNECTION_STRING", "Data Source=:memory:")

from todo_api.main import create_app  # noqa: E402
from todo_api.settings import Settings  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        connection_string=f"Data Source={tmp_path / 'data' / 'app.db'}",
        jwt_key="test_signing_key_with_at_least_32_characters",
    )


@pytest.fixture
def client(settings):
    # Context manager runs the lifespan, which creates the schema
    with TestClient(create_app(settings)) as c:
        yield c