"""Points and achievements API tests."""


def test_activity_award_and_retry(client, auth_headers, make_rule):
    make_rule("questionnaire_completion", points=20)
    headers = auth_headers("user-1")
    body = {"activity_type": "questionnaire_completion", "correlation_key": "q-1", "description": "Sleep survey"}

    r = client.post("/api/points/activity", headers=headers, json=body)
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["points_awarded"] == 20
    assert r.json()["total_points"] == 20

    retry = client.post("/api/points/activity", headers=headers, json=body).json()
    assert retry["success"] is False
    assert retry["already_rewarded"] is True
    assert retry["points_awarded"] == 0
    assert retry["total_points"] == 20

    history = client.get("/api/points/history", headers=headers).json()
    assert len(history) == 1
    assert history[0]["reason"] == "Sleep survey"
    assert history[0]["correlation_key"] == "q-1"


def test_daily_activity_second_call_already_rewarded(client, auth_headers, make_rule):
    make_rule("lab_upload", points=30, frequency="daily")
    headers = auth_headers("user-1")
    first = client.post("/api/points/activity", headers=headers, json={"activity_type": "lab_upload"}).json()
    second = client.post("/api/points/activity", headers=headers, json={"activity_type": "lab_upload"}).json()
    assert first["success"] is True
    assert second["already_rewarded"] is True
    assert client.get("/api/points/me", headers=headers).json()["total_points"] == 30


def test_unknown_activity_type_rejected(client, auth_headers):
    r = client.post("/api/points/activity", headers=auth_headers("user-1"), json={"activity_type": "jogging"})
    assert r.status_code == 422


def test_per_event_activity_without_correlation_key_rejected(client, auth_headers, make_rule):
    make_rule("questionnaire_completion", points=20)
    headers = auth_headers("user-1")
    body = {"activity_type": "questionnaire_completion"}

    for _ in range(2):
        r = client.post("/api/points/activity", headers=headers, json=body)
        assert r.status_code == 422
        assert r.json()["code"] == "validation_error"
    assert client.get("/api/points/me", headers=headers).json()["total_points"] == 0


def test_activity_without_rule_not_found(client, auth_headers):
    r = client.post("/api/points/activity", headers=auth_headers("user-1"), json={"activity_type": "lab_upload"})
    assert r.status_code == 404


def test_upload_points(client, auth_headers):
    headers = auth_headers("user-1")
    first = client.post("/api/points/upload", headers=headers, json={"upload_type": "lab"}).json()
    assert first["success"] is True
    assert first["points_awarded"] == 30

    again = client.post("/api/points/upload", headers=headers, json={"upload_type": "lab", "points": 50}).json()
    assert again["success"] is False
    assert again["already_rewarded"] is True

    too_many = client.post("/api/points/upload", headers=headers, json={"upload_type": "discharge", "points": 9999})
    assert too_many.status_code == 422
    negative = client.post("/api/points/upload", headers=headers, json={"upload_type": "discharge", "points": -5})
    assert negative.status_code == 422


def test_achievement_unlocked_by_activity(client, auth_headers, make_rule, make_achievement):
    make_rule("questionnaire_completion", points=50)
    make_achievement("Bronze", points_required=100, conditions={"questionnaire_completion": 2})
    make_achievement("Silver", points_required=500)
    headers = auth_headers("user-1")

    first = client.post(
        "/api/points/activity",
        headers=headers,
        json={"activity_type": "questionnaire_completion", "correlation_key": "a"},
    ).json()
    assert first["new_achievements"] == []
    second = client.post(
        "/api/points/activity",
        headers=headers,
        json={"activity_type": "questionnaire_completion", "correlation_key": "b"},
    ).json()
    assert [a["name"] for a in second["new_achievements"]] == ["Bronze"]

    listed = client.get("/api/achievements", headers=headers).json()
    assert [(a["name"], a["unlocked"]) for a in listed] == [("Bronze", True), ("Silver", False)]
    mine = client.get("/api/achievements/me", headers=headers).json()
    assert [a["name"] for a in mine] == ["Bronze"]

    summary = client.get("/api/points/me", headers=headers).json()
    assert summary["total_points"] == 100
    assert summary["next_achievement"]["name"] == "Silver"
    assert summary["progress_percent"] == 0.0


def test_evaluate_endpoint_is_idempotent(client, auth_headers, make_achievement):
    make_achievement("Welcome")
    headers = auth_headers("user-1")
    first = client.post("/api/achievements/evaluate", headers=headers).json()
    assert [a["name"] for a in first["new_achievements"]] == ["Welcome"]
    assert client.post("/api/achievements/evaluate", headers=headers).json()["new_achievements"] == []
