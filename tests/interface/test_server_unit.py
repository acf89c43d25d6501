import pytest
from fastapi.testclient import TestClient

from flashdrill.consts import VERSION
from flashdrill.domain.exceptions import CatalogError
from flashdrill.server import create_app


def _client(study, miss_delay=0.0):
    return TestClient(create_app(lambda: (study, miss_delay)))


def test_health_check(study):
    with _client(study) as client:
        response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version(study):
    with _client(study) as client:
        response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_session_starts_on_startup(study):
    with _client(study) as client:
        data = client.get("/session").json()

    assert data["state"] == "active"
    assert data["card"] == {"id": 1, "front": "X-Burger", "back": "101"}
    assert data["remaining"] == 3
    assert data["progress_total"] == 3


def test_answer_correct(study):
    with _client(study) as client:
        response = client.post("/session/answer", json={"correct": True})

    assert response.status_code == 200
    data = response.json()
    assert data["card_id"] == 1
    assert data["feedback"] is None
    assert data["session"]["card"]["id"] == 2
    assert data["session"]["progress_current"] == 1
    assert data["session"]["progress_percentage"] == pytest.approx(100 / 3)


def test_answer_incorrect_without_delay_requeues(study):
    with _client(study) as client:
        response = client.post("/session/answer", json={"correct": False})

    assert response.status_code == 200
    data = response.json()
    assert data["correct"] is False
    assert data["feedback"]["back"] == "101"
    assert "X-Burger" in data["feedback"]["message"]
    assert data["session"]["card"]["id"] == 2
    assert study.queue.snapshot() == (2, 3, 1)


def test_answer_incorrect_with_delay_suspends_until_shutdown(study):
    with _client(study, miss_delay=60.0) as client:
        response = client.post("/session/answer", json={"correct": False})
        assert response.status_code == 200
        assert response.json()["commit_in_seconds"] == 60.0
        assert client.get("/session").json()["state"] == "suspended"

        second = client.post("/session/answer", json={"correct": True})
        assert second.status_code == 409

    # Shutdown cancelled the pending miss: nothing was recorded
    assert study.queue.pending is None
    assert study.scheduler.get_stats(1).total_attempts == 0


def test_answer_when_complete_conflicts(study):
    with _client(study) as client:
        for _ in range(3):
            client.post("/session/answer", json={"correct": True})
        response = client.post("/session/answer", json={"correct": True})
        session = client.get("/session").json()

    assert response.status_code == 409
    assert session["state"] == "complete"
    assert session["card"] is None


def test_restart_after_complete_offers_whole_catalog(study):
    with _client(study) as client:
        for _ in range(3):
            client.post("/session/answer", json={"correct": True})
        data = client.post("/session/restart").json()

    assert data["state"] == "active"
    assert data["remaining"] == 3


def test_stats_endpoints(study):
    with _client(study) as client:
        client.post("/session/answer", json={"correct": True})
        totals = client.get("/stats").json()
        card = client.get("/cards/1/stats").json()
        missing = client.get("/cards/99/stats")

    assert totals == {"total_cards": 3, "mastered_cards": 0, "review_due_count": 0}
    assert card["interval_days"] == 1
    assert card["correct_attempts"] == 1
    assert missing.status_code == 404


def test_reset_endpoint(study):
    with _client(study) as client:
        client.post("/session/answer", json={"correct": True})
        data = client.post("/reset").json()

    assert data["remaining"] == 3
    assert data["progress_current"] == 0
    assert study.scheduler.get_stats(1).total_attempts == 0


def test_startup_fails_without_catalog():
    def broken():
        raise CatalogError("No catalog configured.")

    # Depending on the anyio version the error may arrive wrapped in a group
    with pytest.raises(Exception):
        with TestClient(create_app(broken)):
            pass
