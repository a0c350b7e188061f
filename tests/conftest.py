import logging
import os

import pytest

os.environ.setdefault("ADMIN_API_TOKEN", "test_admin_token")
os.environ.setdefault("LOG_LEVEL", "INFO")

from fastapi.testclient import TestClient  # noqa: E402

from app.config import Settings  # noqa: E402
from app.log_store import LogBuffer  # noqa: E402
from app.main import create_app  # noqa: E402

ADMIN_TOKEN = "test_admin_token"

# The test client logs every request at INFO; keep those out of the buffer
logging.getLogger("httpx").setLevel(logging.WARNING)


@pytest.fixture
def buffer():
    """A fresh buffer per test instead of the process singleton."""
    return LogBuffer(capacity=1000)


@pytest.fixture
def settings():
    return Settings(admin_api_token=ADMIN_TOKEN, log_level="INFO")


@pytest.fixture
def client(settings, buffer):
    return TestClient(create_app(settings=settings, buffer=buffer))


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
