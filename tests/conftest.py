"""Shared pytest fixtures for wasession tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from .helpers import FakeSessionClient, make_app  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep developer environment variables out of Settings.from_env()."""
    for key in (
        "PORT",
        "HOST",
        "PERSISTENCE_BACKEND",
        "DATABASE_URL",
        "SESSION_DATA_PATH",
        "BRIDGE_WEBHOOK_SECRET",
        "BRIDGE_WEBHOOK_ALLOW_UNSIGNED",
        "ADAPTER_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_client():
    return FakeSessionClient()


@pytest.fixture
def app(fake_client):
    return make_app(fake_client)


@pytest.fixture
def client(app):
    """TestClient without lifespan: state is driven through the reactor directly."""
    return TestClient(app)
