"""HTTP surface: loading gate, session and role checks, status mapping."""
import random

import pytest
from fastapi.testclient import TestClient

from classsync.main import create_app
from classsync.store import ClassStore

from conftest import ADMIN_PASSWORD, STAFF_PASSWORD, STUDENT_PASSWORD, make_roster


@pytest.fixture
def store(storage) -> ClassStore:
    return ClassStore(storage, remote_enabled=False, rng=random.Random(11), seed_users=make_roster)


@pytest.fixture
def client(store: ClassStore):
    with TestClient(create_app(store)) as test_client:
        yield test_client


def _login(client: TestClient, username: str, password: str) -> dict:
    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def test_routes_wait_for_loading(store: ClassStore) -> None:
    client = TestClient(create_app(store))  # no startup: the store stays in its loading state
    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["loading"] is True
    assert client.get("/api/tasks").status_code == 503
    assert client.post("/api/login", json={"username": "admin", "password": ADMIN_PASSWORD}).status_code == 503


def test_session_required(client: TestClient) -> None:
    assert client.get("/api/health").json()["loading"] is False
    assert client.get("/api/tasks").status_code == 401
    assert client.get("/api/session").status_code == 401


def test_login_failure_is_generic(client: TestClient) -> None:
    wrong = client.post("/api/login", json={"username": "admin", "password": "nope"})
    unknown = client.post("/api/login", json={"username": "ghost", "password": "nope"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["detail"] == unknown.json()["detail"] == "Invalid username or password"


def test_login_response_hides_password(client: TestClient) -> None:
    body = _login(client, "admin", ADMIN_PASSWORD)
    assert body["id"] == "admin"
    assert "password" not in body
    assert client.get("/api/session").json()["role"] == "ADMIN"


def test_role_checks(client: TestClient) -> None:
    _login(client, "student1", STUDENT_PASSWORD)
    assert client.get("/api/users").status_code == 403
    assert client.get("/api/activity-log").status_code == 403
    assert client.post("/api/announcements", json={"title": "Hi"}).status_code == 403
    assert client.get("/api/announcements").status_code == 200


def test_admin_user_management(client: TestClient) -> None:
    _login(client, "admin", ADMIN_PASSWORD)
    assert client.patch("/api/users/admin/role", json={"role": "STUDENT"}).status_code == 403
    assert client.patch("/api/users/ghost/status", json={"is_active": False}).status_code == 404
    response = client.patch("/api/users/s3/status", json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    log = client.get("/api/activity-log").json()
    assert log[0]["action"] == "admin (ADMIN): Updated user s3 active status to false"


def test_content_crud_and_not_found(client: TestClient) -> None:
    _login(client, "kurikulum", STAFF_PASSWORD)
    created = client.post(
        "/api/tasks",
        json={"title": "Essay", "subject": "English", "deadline": "2026-10-30T23:59:00Z"},
    )
    assert created.status_code == 201
    task = created.json()
    assert task["created_by"] == "KURIKULUM"
    assert client.get("/api/tasks").json()[0]["id"] == task["id"]

    toggled = client.post(f"/api/tasks/{task['id']}/toggle")
    assert toggled.json()["is_completed"] is True
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 200
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404
    assert client.post("/api/tasks/missing/toggle").status_code == 404


def test_video_urls_are_normalised(client: TestClient) -> None:
    _login(client, "kurikulum", STAFF_PASSWORD)
    response = client.post(
        "/api/videos",
        json={"title": "Intro", "url": " https://youtu.be/SqcY0GlETPk ", "subject": "Web Development"},
    )
    assert response.status_code == 201
    assert response.json()["url"] == "https://www.youtube.com/embed/SqcY0GlETPk"
    assert response.json()["uploaded_by"] == "KURIKULUM"
    listed = client.get("/api/videos", params={"subject": "Web Development"}).json()
    assert any(v["id"] == response.json()["id"] for v in listed)


def test_seating_endpoints(client: TestClient) -> None:
    _login(client, "kurikulum", STAFF_PASSWORD)
    assert client.put("/api/seating/99", json={"user_id": "s3"}).status_code == 400
    assert client.put("/api/seating/0", json={"user_id": "kuri"}).status_code == 400
    assert client.put("/api/seating/0", json={"user_id": "ghost"}).status_code == 404

    grid = client.put("/api/seating/0", json={"user_id": "s3"}).json()
    assert grid["rows"] * grid["columns"] == len(grid["seats"]) == 35
    assert grid["seats"][0]["user"]["id"] == "s3"
    assert "s1" in [u["id"] for u in grid["unseated"]]

    reset = client.post("/api/seating/reset").json()
    assert all(seat["user"] is None for seat in reset["seats"])


def test_tutor_event_flow(client: TestClient) -> None:
    _login(client, "student3", STUDENT_PASSWORD)
    joined = client.post("/api/tutor-events/1/join").json()
    assert joined["transition"] == "joined"
    assert joined["membership"] == "PARTICIPANT"
    assert client.post("/api/tutor-events/1/kick", json={"user_id": "s1"}).status_code == 403
    assert client.post("/api/tutor-events/404/join").status_code == 404
    client.post("/api/logout")

    _login(client, "bibilung", STAFF_PASSWORD)
    kicked = client.post("/api/tutor-events/1/kick", json={"user_id": "s3"})
    assert kicked.status_code == 200
    assert "s3" not in kicked.json()["participants"]

    created = client.post("/api/tutor-events", json={"title": "SQL joins", "date": "2026-10-25T15:00:00Z"})
    assert created.status_code == 201
    assert created.json()["tutor_id"] == "bibilung1"
    assert created.json()["max_participants"] == 5


def test_identity_login(client: TestClient) -> None:
    missing = client.post("/api/login/identity", json={"email": " ", "name": "x", "external_id": "1"})
    assert missing.status_code == 400
    response = client.post(
        "/api/login/identity",
        json={"email": "new@school.test", "name": "New Person", "external_id": "77"},
    )
    assert response.status_code == 200
    assert response.json()["id"] == "g_77"
    assert response.json()["role"] == "STUDENT"


def test_dashboard_counts(client: TestClient, store: ClassStore) -> None:
    _login(client, "student1", STUDENT_PASSWORD)
    body = client.get("/api/dashboard").json()
    assert body["active_tasks"] == sum(1 for t in store.tasks if not t.is_completed)
    assert body["announcements"] == len(store.announcements)
    assert all(item["day"] == body["today"] for item in body["todays_classes"])


def test_sessions_are_scoped_to_each_client(client: TestClient) -> None:
    other = TestClient(client.app)
    _login(client, "admin", ADMIN_PASSWORD)
    assert client.get("/api/session").json()["id"] == "admin"
    assert other.get("/api/session").status_code == 401
    assert other.get("/api/users").status_code == 401


def test_bearer_token_resolves_the_caller(client: TestClient) -> None:
    body = _login(client, "student1", STUDENT_PASSWORD)
    assert body["token"]
    other = TestClient(client.app)
    response = other.get("/api/session", headers={"Authorization": f"Bearer {body['token']}"})
    assert response.status_code == 200
    assert response.json()["id"] == "s1"
    assert other.get("/api/session", headers={"Authorization": "Bearer not-a-token"}).status_code == 401


def test_logout_revokes_only_the_callers_session(client: TestClient) -> None:
    other = TestClient(client.app)
    _login(client, "admin", ADMIN_PASSWORD)
    _login(other, "student2", STUDENT_PASSWORD)

    assert other.post("/api/logout").json() == {"ok": True}
    assert other.get("/api/session").status_code == 401
    assert client.get("/api/session").json()["id"] == "admin"
    assert client.post("/api/logout").status_code == 200
    assert client.get("/api/session").status_code == 401


def test_mutations_are_attributed_to_the_calling_client(client: TestClient) -> None:
    other = TestClient(client.app)
    _login(client, "komti", STAFF_PASSWORD)
    _login(other, "admin", ADMIN_PASSWORD)

    created = client.post("/api/announcements", json={"title": "Exam moved"})
    assert created.status_code == 201
    log = other.get("/api/activity-log").json()
    assert log[0]["action"] == "komti (KOMTI): Added announcement: Exam moved"
    assert log[0]["user_id"] == "komti"


def test_tasks_filter_by_status(client: TestClient) -> None:
    _login(client, "kurikulum", STAFF_PASSWORD)
    task = client.post(
        "/api/tasks",
        json={"title": "Lab report", "deadline": "2026-11-02T23:59:00Z"},
    ).json()
    client.post(f"/api/tasks/{task['id']}/toggle")

    everything = client.get("/api/tasks").json()
    active = client.get("/api/tasks", params={"status": "ACTIVE"}).json()
    completed = client.get("/api/tasks", params={"status": "COMPLETED"}).json()
    assert len(active) + len(completed) == len(everything)
    assert all(not t["is_completed"] for t in active)
    assert all(t["is_completed"] for t in completed)
    assert task["id"] in [t["id"] for t in completed]
    assert client.get("/api/tasks", params={"status": "LATE"}).status_code == 422


def test_schedule_is_ordered_by_day_then_time(client: TestClient) -> None:
    _login(client, "kurikulum", STAFF_PASSWORD)
    for day, time in [("Friday", "08:00"), ("Monday", "13:00"), ("Monday", "07:30")]:
        response = client.post("/api/schedule", json={"day": day, "time": time, "subject": "Math"})
        assert response.status_code == 201

    days = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    items = client.get("/api/schedule").json()
    keys = [(days.index(item["day"]) if item["day"] in days else len(days), item["time"]) for item in items]
    assert keys == sorted(keys)
    mondays = [item["time"] for item in items if item["day"] == "Monday"]
    assert mondays.index("07:30") < mondays.index("13:00")
