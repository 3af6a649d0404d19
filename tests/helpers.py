"""HTTP helpers shared by the test modules."""

from fastapi.testclient import TestClient

API = "/api/v1"


def create_admin(client: TestClient, email: str = "admin@example.com") -> dict:
    r = client.post(f"{API}/auth/register", json={
        "email": email,
        "name": "Admin",
        "password": "s3cret-pass",
    })
    assert r.status_code == 201, r.text
    user_id = r.json()["id"]
    r = client.post(f"{API}/auth/login", json={"email": email, "password": "s3cret-pass"})
    assert r.status_code == 200, r.text
    return {"id": user_id, "headers": {"Authorization": f"Bearer {r.json()['access_token']}"}}



def register_display(client: TestClient, **overrides) -> dict:
    payload = {"display_name": "Lobby Screen", "location": "HQ floor 1"}
    payload.update(overrides)
    r = client.post(f"{API}/displays/register-self", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def approve(client: TestClient, admin: dict, request_id: str):
    return client.post(f"{API}/connection-requests/{request_id}/approve", headers=admin["headers"])


def approved_display(client: TestClient, admin: dict, **overrides) -> dict:
    data = register_display(client, **overrides)
    r = approve(client, admin, data["request_id"])
    assert r.status_code == 200, r.text
    return data


def create_ad(client: TestClient, admin: dict, duration: int, name: str = "Ad", status: str = "active") -> dict:
    r = client.post(f"{API}/ads", json={
        "name": name,
        "media_url": f"https://cdn.example.com/{name}.png",
        "media_type": "image",
        "duration": duration,
        "status": status,
    }, headers=admin["headers"])
    assert r.status_code == 201, r.text
    return r.json()
