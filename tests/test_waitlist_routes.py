from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from coach_api.core.errors import ValidationAppError
from coach_api.services.waitlist_service import WaitlistStore, normalize_email


def test_signup_adds_email(client: TestClient) -> None:
    resp = client.post("/api/waitlist", json={"email": "Player@Example.com "})

    assert resp.status_code == 200
    assert resp.json() == {"message": "Added to waitlist"}
    assert "player@example.com" in client.app.state.waitlist_store


def test_duplicate_signup_is_acknowledged(client: TestClient) -> None:
    client.post("/api/waitlist", json={"email": "player@example.com"})
    resp = client.post("/api/waitlist", json={"email": "  PLAYER@example.com"})

    assert resp.status_code == 200
    assert resp.json() == {"message": "Already on waitlist"}
    assert len(client.app.state.waitlist_store) == 1


@pytest.mark.parametrize(
    "payload,code",
    [
        ({}, "email_required"),
        ({"email": ""}, "email_required"),
        ({"email": "no-at-sign.com"}, "invalid_email"),
        ({"email": "two words@example.com"}, "invalid_email"),
        ({"email": "player@localhost"}, "invalid_email"),
        ({"email": "a" * 250 + "@x.io"}, "invalid_email"),
    ],
)
def test_invalid_email_returns_400(client: TestClient, payload: dict, code: str) -> None:
    resp = client.post("/api/waitlist", json=payload)

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == code


def test_normalize_email_trims_and_lowercases() -> None:
    assert normalize_email("  Foo@Bar.COM\n") == "foo@bar.com"


def test_normalize_email_rejects_none() -> None:
    with pytest.raises(ValidationAppError):
        normalize_email(None)


def test_store_reports_new_and_existing() -> None:
    store = WaitlistStore()

    assert store.add("x@example.com") is True
    assert store.add("X@example.com") is False
    assert len(store) == 1


@pytest.mark.parametrize(
    "payload,field",
    [
        ({"email": 123}, "email"),
        ({"email": ["player@example.com"]}, "email"),
        (["player@example.com"], "body"),
    ],
)
def test_wrongly_typed_body_returns_400(client: TestClient, payload, field: str) -> None:
    resp = client.post("/api/waitlist", json=payload)

    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "invalid_request"
    assert error["details"] == {"field": field}
    assert "request_id" in error


@pytest.mark.parametrize("content", ["{not json", "", "\xff"])
def test_unparseable_body_returns_400(client: TestClient, content: str) -> None:
    resp = client.post(
        "/api/waitlist",
        content=content.encode("latin-1"),
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "invalid_json"
