"""Tests for /api/status, /api/qr and /api/disconnect."""

from __future__ import annotations

from fastapi.testclient import TestClient

from wasession.session.events import EventKind

from .helpers import FAKE_QR_PREFIX, FakeSessionClient, apply_events, connect, make_app

EXPECTED_CLIENT = {"name": "Front Desk", "phone": "51912345678", "platform": "android"}


class TestStatus:
    def test_initially_disconnected(self, client):
        response = client.get("/api/status")
        assert response.status_code == 200
        assert response.json() == {"status": "disconnected", "client": None}

    def test_connected_reports_client(self, app, client):
        connect(app)
        assert client.get("/api/status").json() == {
            "status": "connected",
            "client": EXPECTED_CLIENT,
        }

    def test_qr_pending(self, app, client):
        apply_events(app, (EventKind.QR, {"qr": "2@abc"}))
        assert client.get("/api/status").json() == {"status": "qr_pending", "client": None}


class TestQr:
    def test_no_qr_while_disconnected(self, client):
        assert client.get("/api/qr").json() == {"status": "disconnected", "qr": None}

    def test_qr_pending_returns_image(self, app, client):
        apply_events(app, (EventKind.QR, {"qr": "2@abc"}))
        body = client.get("/api/qr").json()
        assert body == {"status": "qr_pending", "qr": FAKE_QR_PREFIX + "2@abc"}

    def test_connected_always_returns_null_qr(self, app, client):
        connect(app)
        # Stale payload left behind must never be served once connected
        app.state.tracker._qr = "data:stale"
        body = client.get("/api/qr").json()
        assert body["status"] == "connected"
        assert body["qr"] is None
        assert body["client"] == EXPECTED_CLIENT


class TestDisconnect:
    def test_disconnect_then_status_is_disconnected(self, app, client, fake_client):
        connect(app)
        response = client.post("/api/disconnect")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Disconnected successfully"}
        assert ("logout",) in fake_client.calls

        assert client.get("/api/status").json() == {"status": "disconnected", "client": None}

    def test_logout_failure_returns_500_and_keeps_state(self, app, client, fake_client):
        connect(app)
        fake_client.error = RuntimeError("Session closed")
        response = client.post("/api/disconnect")
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Session closed",
            "kind": "upstream_error",
        }
        assert client.get("/api/status").json()["status"] == "connected"

    def test_logout_timeout_returns_504(self):
        fake = FakeSessionClient()
        fake.delay = 1.0
        app = make_app(fake, adapter_timeout=0.05)
        connect(app)
        response = TestClient(app).post("/api/disconnect")
        assert response.status_code == 504
        assert response.json()["kind"] == "timeout"
