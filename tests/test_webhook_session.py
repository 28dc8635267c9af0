"""Tests for bridge event ingress at POST /webhooks/session."""

from __future__ import annotations

import base64
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from wasession.api.factory import create_app
from wasession.persistence.local_store import LocalSessionStore
from wasession.session.bridge_client import BridgeSessionClient
from wasession.settings import BridgeConfig, Settings

from .helpers import FAKE_QR_PREFIX, READY_IDENTITY, fake_qr_encoder, json_response

SECRET = "bridge-secret"


@pytest.fixture
def store(tmp_path):
    return LocalSessionStore(tmp_path)


@pytest.fixture
def http():
    mock = MagicMock()
    mock.request.return_value = json_response(200)
    return mock


def _app(http, store, secret: str = SECRET, allow_unsigned: bool = False):
    bridge_config = BridgeConfig(
        base_url="http://bridge:8080",
        webhook_secret=secret,
        allow_unsigned_webhooks=allow_unsigned,
    )
    settings = Settings(bridge=bridge_config)
    bridge = BridgeSessionClient(settings.bridge, client_id="main", store=store, http=http)
    return create_app(settings, session_client=bridge, qr_encoder=fake_qr_encoder)


def _post(client, event: str, data: dict | None = None, secret: str | None = SECRET):
    headers = {"X-Webhook-Secret": secret} if secret is not None else {}
    return client.post("/webhooks/session", json={"event": event, "data": data or {}}, headers=headers)


class TestLifecycleThroughWebhook:
    def test_startup_initializes_bridge_session(self, http, store):
        with TestClient(_app(http, store)):
            pass
        assert http.request.call_args_list[0].args == ("POST", "http://bridge:8080/session/start")

    def test_pairing_flow(self, http, store):
        with TestClient(_app(http, store)) as client:
            assert _post(client, "loading_screen", {"percent": 10, "message": "x"}).status_code == 200

            assert _post(client, "qr", {"qr": "2@abc"}).json() == {"ok": True}
            assert client.get("/api/qr").json() == {
                "status": "qr_pending",
                "qr": FAKE_QR_PREFIX + "2@abc",
            }

            _post(client, "authenticated")
            assert client.get("/api/qr").json() == {"status": "qr_pending", "qr": None}

            _post(client, "ready", {"info": READY_IDENTITY})
            assert client.get("/api/status").json() == {
                "status": "connected",
                "client": {"name": "Front Desk", "phone": "51912345678", "platform": "android"},
            }

            _post(client, "disconnected", {"reason": "LOGOUT"})
            assert client.get("/api/status").json() == {"status": "disconnected", "client": None}

    def test_auth_failure(self, http, store):
        with TestClient(_app(http, store)) as client:
            _post(client, "qr", {"qr": "2@abc"})
            _post(client, "auth_failure", {"message": "restore failed"})
            assert client.get("/api/qr").json() == {"status": "disconnected", "qr": None}

    def test_session_saved_is_persisted(self, http, store):
        encoded = base64.b64encode(b"creds").decode()
        with TestClient(_app(http, store)) as client:
            assert _post(client, "remote_session_saved", {"session": encoded}).status_code == 200
        assert store.load("main") == b"creds"


class TestWebhookRejections:
    def test_secret_mismatch_is_401(self, http, store):
        with TestClient(_app(http, store)) as client:
            assert _post(client, "qr", {"qr": "x"}, secret="wrong").status_code == 401
            assert _post(client, "qr", {"qr": "x"}, secret=None).status_code == 401
            assert client.get("/api/status").json()["status"] == "disconnected"

    def test_no_secret_configured_rejects_everything(self, http, store):
        store.save("main", b"real-creds")
        forged = base64.b64encode(b"attacker").decode()
        with TestClient(_app(http, store, secret="")) as client:
            assert _post(client, "remote_session_saved", {"session": forged}, secret=None).status_code == 401
            assert _post(client, "ready", {"pushname": "spoof"}, secret="anything").status_code == 401
            assert client.get("/api/status").json() == {"status": "disconnected", "client": None}
        assert store.load("main") == b"real-creds"

    def test_unsigned_events_allowed_only_with_dev_flag(self, http, store):
        with TestClient(_app(http, store, secret="", allow_unsigned=True)) as client:
            assert _post(client, "qr", {"qr": "x"}, secret=None).status_code == 200
            assert client.get("/api/status").json()["status"] == "qr_pending"

    def test_unknown_event_is_400(self, http, store):
        with TestClient(_app(http, store)) as client:
            assert _post(client, "message_create").status_code == 400

    def test_invalid_json_is_400(self, http, store):
        with TestClient(_app(http, store)) as client:
            response = client.post(
                "/webhooks/session",
                content=b"not json",
                headers={"X-Webhook-Secret": SECRET, "Content-Type": "application/json"},
            )
            assert response.status_code == 400

    def test_non_object_data_is_400(self, http, store):
        with TestClient(_app(http, store)) as client:
            response = client.post(
                "/webhooks/session",
                json={"event": "qr", "data": ["x"]},
                headers={"X-Webhook-Secret": SECRET},
            )
            assert response.status_code == 400
