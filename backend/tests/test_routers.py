import pytest
from fastapi.testclient import TestClient

from trainlog.main import app
from trainlog.services.repository import get_repository
from trainlog.services.window_service import current_time


@pytest.fixture
def repository(fake_repository_factory, make_workout, make_test, make_measurement, make_cycle, make_goal):
    return fake_repository_factory(
        workouts=[
            make_workout(days=1, duration=50, intensity=8, workout_type="strength"),
            make_workout(days=5, duration=60, intensity=6),
            make_workout(days=20, duration=30, intensity=5),
        ],
        strength_tests=[
            make_test("grip_strength", 100, days=40),
            make_test("grip_strength", 120, days=2),
            make_test("wrist_curl", 60, days=3),
        ],
        measurements=[make_measurement(days=4, weight=180, arm=38.1)],
        cycles=[make_cycle(name="Peaking")],
        goals=[make_goal(target=5, current=5), make_goal(target=10, current=2)],
    )


@pytest.fixture
def client(repository, now):
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[current_time] = lambda: now
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_snapshot(client):
    response = client.get("/api/reports/1/snapshot")

    assert response.status_code == 200
    data = response.json()
    assert data["user_name"] == "Jane Doe"
    assert data["workouts"]["total_workouts"] == 3
    assert data["workouts"]["total_hours"] == 2.3
    assert [pr["label"] for pr in data["latest_prs"]] == ["GRIP STRENGTH", "WRIST CURL"]
    assert data["latest_prs"][0]["display_value"] == "120 lbs"
    assert data["goals"] == {"completed": 1, "total": 2, "success_rate": 50.0}
    assert data["active_cycles"][0]["name"] == "Peaking"


def test_snapshot_unit_override(client):
    data = client.get("/api/reports/1/snapshot", params={"unit": "kg"}).json()

    assert data["weight_unit"] == "kg"
    assert data["circumference_unit"] == "cm"
    assert data["latest_prs"][0]["display_value"] == "54 kg"


def test_unknown_user(client):
    response = client.get("/api/reports/42/snapshot")
    assert response.status_code == 404


def test_fetch_failure_maps_to_503(fake_repository_factory, now):
    app.dependency_overrides[get_repository] = lambda: fake_repository_factory(failing="workouts")
    app.dependency_overrides[current_time] = lambda: now
    try:
        response = TestClient(app).get("/api/reports/1/snapshot")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert "workouts" in response.json()["detail"]


def test_document_download(client):
    response = client.get("/api/reports/1/document")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.headers["content-disposition"] == (
        'attachment; filename="jane_doe_progress_20240615.html"'
    )
    assert "GRIP STRENGTH" in response.text


def test_card_inline_by_default(client):
    response = client.get("/api/reports/1/card")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert response.headers["content-disposition"].startswith("inline;")
    assert 'width="1080"' in response.text

    download = client.get("/api/reports/1/card", params={"download": True})
    assert download.headers["content-disposition"].startswith("attachment;")


def test_duration_chart_is_oldest_first(client):
    response = client.get("/api/progress/1/charts/duration")

    assert response.status_code == 200
    data = response.json()
    assert [p["value"] for p in data["points"]] == [30, 60, 50]
    assert [p["label"] for p in data["points"]] == ["W1", "W2", "W3"]


def test_chart_window(client):
    data = client.get("/api/progress/1/charts/intensity", params={"window": "week"}).json()
    assert [p["value"] for p in data["points"]] == [6, 8]


def test_pr_timeline(client):
    response = client.get("/api/progress/1/charts/pr_timeline", params={"test_type": "Grip Strength"})

    assert response.status_code == 200
    assert [p["value"] for p in response.json()["points"]] == [100, 120]


def test_pr_timeline_requires_test_type(client):
    assert client.get("/api/progress/1/charts/pr_timeline").status_code == 400


def test_measurement_chart(client):
    data = client.get("/api/progress/1/charts/measurement", params={"field": "arm"}).json()
    assert data["unit"] == "in"
    assert [p["value"] for p in data["points"]] == [15]


def test_unknown_chart(client):
    assert client.get("/api/progress/1/charts/heatmap").status_code == 422


def test_distribution_and_cycles(client):
    distribution = client.get("/api/progress/1/distribution").json()
    cycles = client.get("/api/progress/1/cycles").json()

    assert {s["workout_type"]: s["percentage"] for s in distribution} == {
        "strength": 33,
        "table_practice": 67,
    }
    assert cycles[0]["full_name"] == "Peaking"


def test_latest_prs(client):
    data = client.get("/api/progress/1/prs").json()

    assert [(pr["record"]["test_type"], pr["history_count"]) for pr in data] == [
        ("grip_strength", 2),
        ("wrist_curl", 1),
    ]
