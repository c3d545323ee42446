from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from mea_dashboard.application.repository import AssessmentRepository
from mea_dashboard.infrastructure.config import reset_settings
from mea_dashboard.infrastructure.identity import Identity
from mea_dashboard.web.dependencies import AUTH_HEADER, get_repository, get_session_factory
from mea_dashboard.web.main import create_application
from tests.conftest import full_answers, memory_engine


def build_client(SessionLocal: sessionmaker[Session]) -> TestClient:
    app = create_application()
    app.dependency_overrides[get_session_factory] = lambda: SessionLocal
    return TestClient(app)


def build_broken_client() -> TestClient:
    return build_client(sessionmaker(bind=memory_engine(create_tables=False)))


def post_assessment(client: TestClient, name: str = "ACME", level: int = 3, **kwargs):
    return client.post(
        "/api/assessments", json={"name": name, "answers": full_answers(level)}, **kwargs
    )


def test_healthcheck(SessionLocal):
    client = build_client(SessionLocal)
    assert client.get("/api/health").json() == {"status": "ok"}


def test_catalog_endpoint(SessionLocal):
    payload = build_client(SessionLocal).get("/api/catalog").json()
    assert [d["id"] for d in payload["domains"]] == ["MEA01", "MEA02", "MEA03"]
    assert [d["question_count"] for d in payload["domains"]] == [5, 8, 4]
    assert len(payload["questions"]) == 17
    assert [lv["title"] for lv in payload["levels"]][-1] == "Optimizing"


def test_create_and_list(SessionLocal):
    client = build_client(SessionLocal)
    response = post_assessment(client)
    assert response.status_code == 201
    new_id = response.json()["id"]

    listing = client.get("/api/assessments").json()
    assert listing["error"] is None
    assert [item["id"] for item in listing["items"]] == [new_id]
    assert listing["items"][0]["overall_score"] == 3.0


def test_incomplete_submission_is_422_and_not_stored(SessionLocal):
    client = build_client(SessionLocal)
    answers = full_answers(3)
    answers.pop("MEA01.05")
    response = client.post("/api/assessments", json={"name": "ACME", "answers": answers})

    assert response.status_code == 422
    assert "Please answer all 17 questions" in response.json()["detail"]
    assert client.get("/api/assessments").json()["items"] == []


def test_blank_name_is_422(SessionLocal):
    response = post_assessment(build_client(SessionLocal), name="   ")
    assert response.status_code == 422


def test_foreign_assessment_is_404(SessionLocal):
    client = build_client(SessionLocal)
    new_id = post_assessment(client, headers={AUTH_HEADER: "alice-token"}).json()["id"]

    assert client.get(f"/api/assessments/{new_id}", headers={AUTH_HEADER: "alice-token"}).status_code == 200
    assert client.get(f"/api/assessments/{new_id}", headers={AUTH_HEADER: "bob-token"}).status_code == 404
    assert client.get(f"/api/assessments/{new_id}").status_code == 404
    assert client.get("/api/assessments", headers={AUTH_HEADER: "bob-token"}).json()["items"] == []


def test_report_endpoint(SessionLocal):
    client = build_client(SessionLocal)
    new_id = post_assessment(client, level=3).json()["id"]

    report = client.get(f"/api/assessments/{new_id}/report").json()
    assert report["maturity"] == "Level 3: Established"
    assert report["overall_display"] == "3.0"
    assert [p["label"] for p in report["chart_series"]] == ["MEA01", "MEA02", "MEA03"]
    assert report["recommendations"][0]["text"].startswith("[MEA01] Improvement")
    assert report["radar"]["data"]


def test_unknown_report_is_404(SessionLocal):
    response = build_client(SessionLocal).get("/api/assessments/missing/report")
    assert response.status_code == 404
    assert response.json()["detail"] == "No data is available for the selected assessment."


def test_dashboard_endpoint(SessionLocal):
    client = build_client(SessionLocal)
    empty = client.get("/api/dashboard").json()
    assert empty["latest"] is None
    assert empty["total"] == 0

    new_id = post_assessment(client, level=5).json()["id"]
    summary = client.get("/api/dashboard").json()
    assert summary["latest"]["id"] == new_id
    assert summary["maturity"] == "Level 5: Optimizing"
    assert summary["total"] == 1


def test_list_failure_is_200_with_error():
    response = build_broken_client().get("/api/assessments")
    assert response.status_code == 200
    assert response.json()["items"] == []
    assert response.json()["error"]


def test_create_failure_is_503():
    response = post_assessment(build_broken_client())
    assert response.status_code == 503


def test_live_stream_pushes_snapshots(SessionLocal):
    client = build_client(SessionLocal)
    feed = client.app.state.change_feed

    with client.websocket_connect("/api/assessments/live") as ws:
        assert ws.receive_json() == {"items": [], "error": None}
        assert feed.listener_count() == 1

        new_id = post_assessment(client).json()["id"]
        update = ws.receive_json()
        assert [item["id"] for item in update["items"]] == [new_id]

    assert feed.listener_count() == 0


def _in_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def test_live_stream_loads_initial_snapshot_off_the_event_loop(SessionLocal):
    watched_in_loop: list[bool] = []

    class RecordingRepository(AssessmentRepository):
        def watch(self, listener, on_error=None):
            watched_in_loop.append(_in_event_loop())
            return super().watch(listener, on_error)

    client = build_client(SessionLocal)
    feed = client.app.state.change_feed
    client.app.dependency_overrides[get_repository] = lambda: RecordingRepository(
        SessionLocal, Identity("ws-user"), feed=feed
    )

    with client.websocket_connect("/api/assessments/live") as ws:
        assert ws.receive_json() == {"items": [], "error": None}

    assert watched_in_loop == [False]
    assert feed.listener_count() == 0


def test_invalid_database_settings_is_503(monkeypatch):
    monkeypatch.setenv("DB_BACKEND", "oracle")
    reset_settings()
    try:
        response = TestClient(create_application()).get("/api/assessments")
    finally:
        reset_settings()
    assert response.status_code == 503
    assert response.json()["detail"] == "Configuration error. Please check your settings."
