from __future__ import annotations

from fastapi.testclient import TestClient

from coach_api.main import app


default_client = TestClient(app)


def test_preserves_incoming_request_id_header():
    incoming_id = "test-request-id-123"
    resp = default_client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing():
    resp = default_client.get("/health")

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_throttled_response_echoes_request_id(client: TestClient):
    for i in range(3):
        client.post("/api/waitlist", json={"email": f"p{i}@example.com"})

    resp = client.post(
        "/api/waitlist",
        json={"email": "p3@example.com"},
        headers={"X-Request-ID": "req-throttled"},
    )

    assert resp.status_code == 429
    assert resp.headers["X-Request-ID"] == "req-throttled"
    assert resp.json()["error"]["request_id"] == "req-throttled"
