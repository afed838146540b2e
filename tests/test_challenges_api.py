"""Challenges API tests."""


def _join(client, headers, type_id, mode=None):
    body = {"challenge_type_id": type_id}
    if mode:
        body["mode"] = mode
    return client.post("/api/challenges/join", headers=headers, json=body)


def test_join_and_list(client, auth_headers, smoking_type):
    headers = auth_headers("user-1")
    types = client.get("/api/challenges/types", headers=headers)
    assert [t["id"] for t in types.json()] == [smoking_type.id]

    r = _join(client, headers, smoking_type.id)
    assert r.status_code == 200
    data = r.json()
    assert data["challenge"]["current_mode"] == "tracking"
    assert data["challenge"]["status"] == "active"

    mine = client.get("/api/challenges/me", headers=headers).json()
    assert [c["id"] for c in mine] == [data["user_challenge_id"]]
    assert client.get("/api/challenges/types", headers=headers).json() == []


def test_join_twice_conflicts(client, auth_headers, smoking_type):
    headers = auth_headers("user-1")
    assert _join(client, headers, smoking_type.id).status_code == 200
    r = _join(client, headers, smoking_type.id)
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_state"


def test_join_unknown_type_not_found(client, auth_headers):
    r = _join(client, auth_headers("user-1"), 4242)
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_join_with_unknown_mode_rejected(client, auth_headers, smoking_type):
    r = _join(client, auth_headers("user-1"), smoking_type.id, mode="sprinting")
    assert r.status_code == 422


def test_lifecycle_endpoints(client, auth_headers, smoking_type):
    headers = auth_headers("user-1")
    challenge_id = _join(client, headers, smoking_type.id).json()["user_challenge_id"]

    r = client.post(f"/api/challenges/{challenge_id}/pause", headers=headers)
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["challenge"]["status"] == "paused"

    assert client.post(f"/api/challenges/{challenge_id}/pause", headers=headers).status_code == 409
    assert client.post(f"/api/challenges/{challenge_id}/resume", headers=headers).json()["challenge"]["status"] == "active"
    assert client.post(f"/api/challenges/{challenge_id}/cancel", headers=headers).json()["challenge"]["status"] == "cancelled"
    assert client.post(f"/api/challenges/{challenge_id}/resume", headers=headers).status_code == 409


def test_other_user_cannot_touch_challenge(client, auth_headers, smoking_type):
    challenge_id = _join(client, auth_headers("owner"), smoking_type.id).json()["user_challenge_id"]
    intruder = auth_headers("intruder")
    assert client.post(f"/api/challenges/{challenge_id}/cancel", headers=intruder).status_code == 404
    assert client.get(f"/api/challenges/{challenge_id}", headers=intruder).status_code == 404


def test_restart_replaces_open_challenge(client, auth_headers, smoking_type):
    headers = auth_headers("user-1")
    first = _join(client, headers, smoking_type.id).json()["user_challenge_id"]
    r = client.post(
        "/api/challenges/restart",
        headers=headers,
        json={"challenge_type_id": smoking_type.id, "mode": "quitting"},
    )
    assert r.status_code == 200
    restarted = r.json()
    assert restarted["user_challenge_id"] != first
    assert restarted["challenge"]["current_mode"] == "quitting"
    assert restarted["challenge"]["current_streak_days"] == 1
    assert [c["id"] for c in client.get("/api/challenges/me", headers=headers).json()] == [restarted["user_challenge_id"]]


def test_detail_and_milestone_check(client, auth_headers, smoking_type, make_milestone, make_health_risk):
    make_milestone(smoking_type, name="First day", days_required=1, points_awarded=15)
    make_milestone(smoking_type, name="One week", days_required=7, points_awarded=50)
    make_health_risk(smoking_type, fade_start_days=0, fade_end_days=10)
    headers = auth_headers("user-1")
    challenge_id = _join(client, headers, smoking_type.id, mode="quitting").json()["user_challenge_id"]

    r = client.post(f"/api/challenges/{challenge_id}/milestones/check", headers=headers)
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["days_in_challenge"] == 1
    assert [m["name"] for m in data["unlocked_milestones"]] == ["First day"]
    assert data["unlocked_milestones"][0]["points"] == 15

    repeat = client.post(f"/api/challenges/{challenge_id}/milestones/check", headers=headers, json={})
    assert repeat.json()["unlocked_milestones"] == []

    detail = client.get(f"/api/challenges/{challenge_id}", headers=headers).json()
    assert detail["days_since_quit"] == 1
    assert [(m["name"], m["unlocked"]) for m in detail["milestones"]] == [("First day", True), ("One week", False)]
    assert detail["health_risks"][0]["fade_percent"] == 10
    assert detail["challenge_type"]["name"] == "Smoke-free"

    assert client.get("/api/points/me", headers=headers).json()["total_points"] == 15


def test_milestone_check_on_paused_challenge_conflicts(client, auth_headers, smoking_type):
    headers = auth_headers("user-1")
    challenge_id = _join(client, headers, smoking_type.id).json()["user_challenge_id"]
    client.post(f"/api/challenges/{challenge_id}/pause", headers=headers)
    r = client.post(f"/api/challenges/{challenge_id}/milestones/check", headers=headers)
    assert r.status_code == 409
