import os
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "escola-test-logs"))

from escola.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from escola.storage import MemoryStorage  # noqa: E402
from escola.store import DirectoryStore  # noqa: E402
from services.dashboard.app import create_app  # noqa: E402

PROFESSOR_EMAIL = "joao@escola.com"
OTHER_PROFESSOR_EMAIL = "maria@escola.com"
ADMIN_EMAIL = "admin@escola.com"


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def store(storage: MemoryStorage) -> Generator[DirectoryStore, None, None]:
    directory = DirectoryStore(storage).open()
    try:
        yield directory
    finally:
        directory.close()


@pytest.fixture()
def client(storage: MemoryStorage) -> Generator[TestClient, None, None]:
    with TestClient(create_app(storage)) as test_client:
        yield test_client


@pytest.fixture()
def auth_header(client: TestClient) -> Callable[[str], dict[str, str]]:
    def _login(email: str) -> dict[str, str]:
        response = client.post("/auth/login", json={"email": email})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['accessToken']}"}

    return _login
