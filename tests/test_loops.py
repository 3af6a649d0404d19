"""Advertisements, loops, and what a display is told to play."""

from tests.helpers import API, approved_display, create_ad, create_admin


def _create_loop(client, admin, display_id, items, **extra):
    payload = {"display_id": display_id, "loop_name": "Morning loop", "advertisements": items}
    payload.update(extra)
    return client.post(f"{API}/loops", json=payload, headers=admin["headers"])


def _assign(client, admin, display_id, loop_id):
    return client.put(
        f"{API}/displays/{display_id}/assign-loop", json={"loop_id": loop_id}, headers=admin["headers"]
    )


def test_ad_duration_bounds(client, admin):
    for duration in (0, 301):
        r = client.post(f"{API}/ads", json={
            "name": "Bad", "media_url": "https://cdn.example.com/bad.png",
            "media_type": "image", "duration": duration,
        }, headers=admin["headers"])
        assert r.status_code == 400


def test_total_duration_counts_duplicates(client, admin):
    display = approved_display(client, admin)
    a = create_ad(client, admin, 5, "a")
    b = create_ad(client, admin, 3, "b")

    r = _create_loop(client, admin, display["display_id"], [
        {"ad_id": b["id"], "loop_order": 2},
        {"ad_id": a["id"], "loop_order": 1},
        {"ad_id": a["id"], "loop_order": 3},
    ])
    assert r.status_code == 201, r.text
    loop = r.json()
    assert loop["total_duration"] == 13
    assert loop["rotation_type"] == "sequential"
    assert [i["ad_id"] for i in loop["advertisements"]] == [a["id"], b["id"], a["id"]]


def test_loop_validation(client, admin):
    display = approved_display(client, admin)
    ad = create_ad(client, admin, 5)

    r = _create_loop(client, admin, display["display_id"], [], loop_name="Empty loop")
    assert r.status_code == 400
    r = _create_loop(client, admin, display["display_id"], [{"ad_id": ad["id"], "loop_order": 1}], loop_name="ab")
    assert r.status_code == 400
    r = _create_loop(client, admin, display["display_id"], [{"ad_id": "ad_missing", "loop_order": 1}])
    assert r.status_code == 404
    r = _create_loop(
        client, admin, display["display_id"], [{"ad_id": ad["id"], "loop_order": 1}], rotation_type="shuffle"
    )
    assert r.status_code == 400


def test_loop_for_foreign_display_forbidden(client, admin):
    display = approved_display(client, admin)
    other = create_admin(client, "other@example.com")
    ad = create_ad(client, other, 5)
    r = _create_loop(client, other, display["display_id"], [{"ad_id": ad["id"], "loop_order": 1}])
    assert r.status_code == 403


def test_reorder_recomputes_total(client, admin):
    display = approved_display(client, admin)
    a = create_ad(client, admin, 5, "a")
    b = create_ad(client, admin, 3, "b")
    loop = _create_loop(client, admin, display["display_id"], [{"ad_id": a["id"], "loop_order": 1}]).json()

    r = client.put(f"{API}/loops/{loop['id']}/reorder", json={"advertisements": [
        {"ad_id": b["id"], "loop_order": 1},
        {"ad_id": a["id"], "loop_order": 2},
    ]}, headers=admin["headers"])
    assert r.status_code == 200
    assert r.json()["total_duration"] == 8
    assert [i["ad_id"] for i in r.json()["advertisements"]] == [b["id"], a["id"]]


def test_ad_duration_change_does_not_touch_loop_total(client, admin):
    display = approved_display(client, admin)
    ad = create_ad(client, admin, 5)
    loop = _create_loop(client, admin, display["display_id"], [{"ad_id": ad["id"], "loop_order": 1}]).json()

    r = client.put(f"{API}/ads/{ad['id']}", json={"duration": 20}, headers=admin["headers"])
    assert r.status_code == 200

    r = client.get(f"{API}/loops/{loop['id']}", headers=admin["headers"])
    assert r.json()["total_duration"] == 5


def test_display_plays_assigned_loop(client, admin):
    display = approved_display(client, admin)
    token = display["connection_token"]
    a = create_ad(client, admin, 5, "a")
    b = create_ad(client, admin, 3, "b", status="paused")
    loop = _create_loop(client, admin, display["display_id"], [
        {"ad_id": a["id"], "loop_order": 1},
        {"ad_id": b["id"], "loop_order": 2},
    ], rotation_type="random").json()

    r = client.get(f"{API}/displays/loop/{token}")
    assert r.json() == {"loop": None, "advertisements": []}

    assert _assign(client, admin, display["display_id"], loop["id"]).status_code == 200

    r = client.get(f"{API}/displays/loop/{token}")
    body = r.json()
    assert body["loop"]["loop_id"] == loop["id"]
    assert body["loop"]["rotation_type"] == "random"
    assert [(ad["ad_id"], ad["status"]) for ad in body["advertisements"]] == [
        (a["id"], "active"), (b["id"], "paused"),
    ]

    assert client.get(f"{API}/displays/check-refresh/{token}").json() == {"should_refresh": True}
    assert client.get(f"{API}/displays/check-refresh/{token}").json() == {"should_refresh": False}


def test_assign_loop_of_other_display(client, admin):
    first = approved_display(client, admin)
    second = approved_display(client, admin, display_name="Second Screen")
    ad = create_ad(client, admin, 5)
    loop = _create_loop(client, admin, first["display_id"], [{"ad_id": ad["id"], "loop_order": 1}]).json()

    assert _assign(client, admin, second["display_id"], loop["id"]).status_code == 400
    assert _assign(client, admin, second["display_id"], "LOOP-missing").status_code == 404


def test_trigger_refresh(client, admin):
    display = approved_display(client, admin)
    token = display["connection_token"]
    assert client.get(f"{API}/displays/check-refresh/{token}").json()["should_refresh"] is False

    r = client.post(f"{API}/displays/{display['display_id']}/trigger-refresh", headers=admin["headers"])
    assert r.status_code == 200
    assert client.get(f"{API}/displays/check-refresh/{token}").json()["should_refresh"] is True


def test_deleted_loop_leaves_display_without_content(client, admin):
    display = approved_display(client, admin)
    ad = create_ad(client, admin, 5)
    loop = _create_loop(client, admin, display["display_id"], [{"ad_id": ad["id"], "loop_order": 1}]).json()
    _assign(client, admin, display["display_id"], loop["id"])

    r = client.delete(f"{API}/loops/{loop['id']}", headers=admin["headers"])
    assert r.status_code == 204

    r = client.get(f"{API}/displays/loop/{display['connection_token']}")
    assert r.json() == {"loop": None, "advertisements": []}


def test_only_assigned_loop_is_active(client, admin):
    display = approved_display(client, admin)
    ad = create_ad(client, admin, 5)
    items = [{"ad_id": ad["id"], "loop_order": 1}]
    first = _create_loop(client, admin, display["display_id"], items, loop_name="First loop").json()
    second = _create_loop(client, admin, display["display_id"], items, loop_name="Second loop").json()
    assert first["is_active"] is False

    def active():
        r = client.get(f"{API}/loops", params={"display_id": display["display_id"]}, headers=admin["headers"])
        return {loop["id"] for loop in r.json() if loop["is_active"]}

    _assign(client, admin, display["display_id"], first["id"])
    assert active() == {first["id"]}

    _assign(client, admin, display["display_id"], second["id"])
    assert active() == {second["id"]}

    _assign(client, admin, display["display_id"], None)
    assert active() == set()
