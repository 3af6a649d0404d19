"""Display self-registration."""

import threading

import pytest
from sqlmodel import Session, select

from signage.database import engine
from signage.errors import ConflictError
from signage.models.connection_request import ConnectionRequest
from signage.models.display import Display
from signage.services import registration_service
from tests.helpers import API, register_display


def _pending_count(session, display_id):
    return len(session.exec(
        select(ConnectionRequest).where(
            ConnectionRequest.display_id == display_id,
            ConnectionRequest.status == "pending",
        )
    ).all())


def test_register_generates_id_and_pending_request(client, session):
    data = register_display(client)
    assert data["display_id"].startswith("DISP-")
    assert len(data["display_id"]) == len("DISP-") + 8
    assert data["connection_token"]
    assert data["request_id"].startswith("REQ-")
    assert data["is_pending_approval"] is True

    display = session.get(Display, data["display_id"])
    assert display.assigned_admin is None
    assert display.is_pending
    assert _pending_count(session, display.id) == 1


def test_poll_reports_pending(client):
    data = register_display(client)
    r = client.get(f"{API}/displays/by-token/{data['connection_token']}")
    assert r.status_code == 200
    body = r.json()
    assert body["connection_request_status"] == "pending"
    assert body["assigned_admin"] is None
    assert body["rejection_reason"] is None


def test_poll_unknown_token(client):
    r = client.get(f"{API}/displays/by-token/not-a-token")
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


def test_register_with_chosen_id(client):
    data = register_display(client, display_id="LOBBY-01", password="hunter22")
    assert data["display_id"] == "LOBBY-01"

    r = client.post(f"{API}/displays/register-self", json={
        "display_name": "Other", "location": "HQ", "display_id": "LOBBY-01",
    })
    assert r.status_code == 409
    assert r.json()["error"] == "conflict"


@pytest.mark.parametrize("overrides", [
    {"display_name": "A"},
    {"location": "x"},
    {"display_id": "ab"},
    {"display_id": "x" * 31},
    {"display_id": "has space"},
    {"password": "123"},
    {"resolution": {"width": 50, "height": 1080}},
])
def test_register_rejects_invalid_input(client, session, overrides):
    payload = {"display_name": "Lobby Screen", "location": "HQ floor 1"}
    payload.update(overrides)
    r = client.post(f"{API}/displays/register-self", json=payload)
    assert r.status_code == 400, r.text
    assert r.json()["error"] == "validation_error"
    assert session.exec(select(Display)).first() is None


def test_password_login(client):
    register_display(client, display_id="LOBBY-02", password="hunter22")

    r = client.post(f"{API}/displays/login", json={"display_id": "LOBBY-02", "password": "hunter22"})
    assert r.status_code == 200
    assert r.json()["display_id"] == "LOBBY-02"

    r = client.post(f"{API}/displays/login", json={"display_id": "LOBBY-02", "password": "wrong-one"})
    assert r.status_code == 401


def test_token_login(client):
    data = register_display(client)
    r = client.post(f"{API}/displays/login-display", json={
        "display_id": data["display_id"], "connection_token": data["connection_token"],
    })
    assert r.status_code == 200
    assert r.json()["connection_token"] == data["connection_token"]

    r = client.post(f"{API}/displays/login-display", json={
        "display_id": data["display_id"], "connection_token": "nope",
    })
    assert r.status_code == 404


def test_ensure_pending_request_reuses_existing(client, session):
    data = register_display(client)
    display = session.get(Display, data["display_id"])

    request = registration_service.ensure_pending_request(session, display)
    session.commit()

    assert request.id == data["request_id"]
    assert _pending_count(session, display.id) == 1


def test_display_id_collision_is_retried(client, session, monkeypatch):
    taken = register_display(client)["display_id"]
    ids = iter([taken, "DISP-FRESH001"])
    monkeypatch.setattr("signage.utils.security.generate_display_id", lambda: next(ids))

    display, request = registration_service.register_display("Second", "HQ", session)

    assert display.id == "DISP-FRESH001"
    assert request.display_id == display.id
    assert _pending_count(session, taken) == 1


def test_request_id_collision_is_retried(client, session, monkeypatch):
    taken = register_display(client)["request_id"]
    ids = iter([taken, "REQ-FRESH0000001"])
    monkeypatch.setattr("signage.utils.security.generate_request_id", lambda: next(ids))

    display, request = registration_service.register_display("Second", "HQ", session)

    assert request.id == "REQ-FRESH0000001"
    assert _pending_count(session, display.id) == 1


def test_gives_up_after_repeated_collisions(client, session, monkeypatch):
    taken = register_display(client)["display_id"]
    monkeypatch.setattr("signage.utils.security.generate_display_id", lambda: taken)

    with pytest.raises(ConflictError):
        registration_service.register_display("Second", "HQ", session)
    assert len(session.exec(select(Display)).all()) == 1


def test_racing_registrations_for_one_chosen_id(client, session):
    barrier = threading.Barrier(4)
    outcomes = []

    def attempt(n):
        barrier.wait(timeout=5)
        with Session(engine) as s:
            try:
                registration_service.register_display(f"Screen {n}", "HQ", s, display_id="LOBBY-RACE")
                outcomes.append("registered")
            except ConflictError:
                outcomes.append("conflict")

    threads = [threading.Thread(target=attempt, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["conflict"] * 3 + ["registered"]
    assert _pending_count(session, "LOBBY-RACE") == 1
