"""
HTTP surface: routes, status codes and error bodies
"""
import threading
import time

import pytest
from fastapi.testclient import TestClient

from studyquiz.api.deps import get_generator
from studyquiz.main import create_app

from conftest import PHOTOSYNTHESIS, FakeGenerator, generation_error

USER = {"X-User-Id": "user-1"}
OTHER_USER = {"X-User-Id": "user-2"}


@pytest.fixture
def client(database, generator):
    app = create_app(database)
    app.dependency_overrides[get_generator] = lambda: generator
    with TestClient(app) as test_client:
        yield test_client


def _create_content(client):
    response = client.post("/api/contents", json={"raw_text": PHOTOSYNTHESIS}, headers=USER)
    assert response.status_code == 201
    return response.json()


def _answers(quiz, wrong=()):
    answers = []
    for question in quiz["questions"]:
        options = question["options"]
        if question["order_index"] in wrong:
            chosen = next(o for o in options if not o["correct"])
        else:
            chosen = next(o for o in options if o["correct"])
        answers.append({"question_id": question["id"], "option_id": chosen["id"]})
    return answers


def test_health_and_root(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["docs"] == "/docs"


def test_full_study_flow(client, generator):
    created = _create_content(client)
    content_id = created["content"]["id"]
    quiz_id = created["quiz"]["id"]
    assert created["questions_created"] == 7
    assert created["quiz"]["order_index"] == 1
    assert created["quiz"]["mode"] is None

    quiz = client.get(f"/api/quizzes/{quiz_id}", headers=USER).json()
    assert quiz["finalized"] is False
    assert len(quiz["questions"]) == 7
    assert client.get(f"/api/quizzes/{quiz_id}/summary", headers=USER).json() == {"text": None}

    response = client.post(
        f"/api/quizzes/{quiz_id}/finalize",
        json={"answers": _answers(quiz, wrong={2, 4, 6})},
        headers=USER,
    )
    assert response.status_code == 200
    result = response.json()
    assert (result["correct_count"], result["incorrect_count"], result["percentage"]) == (4, 3, 57)
    assert result["attempt_number"] == 1
    assert result["summary_text"] == generator.summary_text

    summary = client.get(f"/api/quizzes/{quiz_id}/summary", headers=USER).json()
    assert summary == {"text": generator.summary_text}

    response = client.post(
        f"/api/contents/{content_id}/follow-up", json={"progression": True}, headers=USER
    )
    assert response.status_code == 201
    follow_up = response.json()
    assert follow_up["quiz"]["mode"] == "progression"
    assert follow_up["quiz"]["order_index"] == 2

    listed = client.get("/api/quizzes", headers=USER).json()
    assert [item["quiz_id"] for item in listed] == [follow_up["quiz"]["id"], quiz_id]

    by_content = client.get(f"/api/quizzes/by-content/{content_id}", headers=USER).json()
    assert by_content["quiz_id"] == quiz_id
    assert by_content["finalized"] is True
    assert len(by_content["answer_history"]) == 7

    contents = client.get("/api/contents", headers=USER).json()
    assert contents[0]["total_quizzes"] == 2

    assert client.delete(f"/api/contents/{content_id}", headers=USER).status_code == 204
    assert client.get(f"/api/contents/{content_id}", headers=USER).status_code == 404


def test_missing_user_header_is_unauthorized(client):
    response = client.get("/api/contents")

    assert response.status_code == 401
    assert response.json() == {
        "error": "http_error",
        "message": "User not authenticated",
        "status_code": 401,
    }


def test_foreign_and_unknown_resources(client):
    created = _create_content(client)

    forbidden = client.get(f"/api/quizzes/{created['quiz']['id']}", headers=OTHER_USER)
    missing = client.get("/api/quizzes/does-not-exist", headers=USER)

    assert forbidden.status_code == 403
    assert forbidden.json()["error"] == "forbidden"
    assert missing.status_code == 404
    assert missing.json()["error"] == "not_found"


def test_incomplete_submission_is_validation_error(client):
    created = _create_content(client)
    quiz = client.get(f"/api/quizzes/{created['quiz']['id']}", headers=USER).json()

    response = client.post(
        f"/api/quizzes/{quiz['quiz_id']}/finalize",
        json={"answers": _answers(quiz)[:3]},
        headers=USER,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert "7" in body["message"]


def test_empty_submission_names_the_expected_count(client):
    created = _create_content(client)

    response = client.post(
        f"/api/quizzes/{created['quiz']['id']}/finalize",
        json={"answers": []},
        headers=USER,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert "You must answer all 7 questions (received 0 answers)" in body["message"]


def test_progression_without_attempt_is_policy_error(client):
    created = _create_content(client)

    response = client.post(
        f"/api/contents/{created['content']['id']}/follow-up",
        json={"progression": True},
        headers=USER,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "policy_error"


def test_malformed_bodies_are_rejected(client):
    empty = client.post("/api/contents", json={"raw_text": ""}, headers=USER)
    no_answers = client.post("/api/quizzes/any/finalize", json={}, headers=USER)

    assert empty.status_code == 400
    assert empty.json()["error"] == "validation_error"
    assert no_answers.status_code == 400


def test_generation_failure_is_server_error(client, generator):
    generator.fail_with = generation_error("Gemini call failed: deadline exceeded")

    response = client.post("/api/contents", json={"raw_text": PHOTOSYNTHESIS}, headers=USER)

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "generation_failure"
    assert body["message"].startswith("failed to create content:")
    assert client.get("/api/contents", headers=USER).json() == []


class BlockingGenerator(FakeGenerator):
    """Holds title generation until the test releases it"""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def generate_title_description(self, raw_text):
        self.started.set()
        self.release.wait(timeout=5)
        return super().generate_title_description(raw_text)


def test_slow_generation_does_not_block_other_requests(database):
    generator = BlockingGenerator()
    app = create_app(database)
    app.dependency_overrides[get_generator] = lambda: generator
    responses = {}

    def create():
        responses["create"] = client.post(
            "/api/contents", json={"raw_text": PHOTOSYNTHESIS}, headers=USER
        )

    with TestClient(app) as client:
        worker = threading.Thread(target=create)
        worker.start()
        try:
            assert generator.started.wait(timeout=5)
            start = time.monotonic()
            health = client.get("/health")
            elapsed = time.monotonic() - start
        finally:
            generator.release.set()
            worker.join(timeout=10)

    assert health.status_code == 200
    assert elapsed < 2
    assert responses["create"].status_code == 201
