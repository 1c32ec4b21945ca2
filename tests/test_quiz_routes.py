"""Tests for the /quiz JSON endpoints."""

import pytest

from app import create_app
from models import Problem
from services.session_helper import SESSION_KEY
from services.timers import WallClockScheduler


class FakeClock:
    def __init__(self, ms=1_000_000):
        self.ms = ms

    def __call__(self):
        return self.ms

    def tick(self, ms):
        self.ms += ms


@pytest.fixture
def clock(monkeypatch):
    c = FakeClock()
    monkeypatch.setattr(
        "services.session_helper.WallClockScheduler", lambda: WallClockScheduler(clock=c)
    )
    return c


@pytest.fixture
def app(tmp_path, clock):
    return create_app({"TESTING": True, "SESSION_FILE_DIR": str(tmp_path / "sessions")})


@pytest.fixture
def client(app):
    return app.test_client()


def _current(client):
    with client.session_transaction() as sess:
        data = sess[SESSION_KEY]
    return Problem.from_dict(data["problem"]), data["choices"]


def _start(client):
    r = client.get("/quiz/state")
    assert r.status_code == 200
    return _current(client)


def test_state_creates_session(client):
    r = client.get("/quiz/state")
    body = r.get_json()
    assert r.status_code == 200
    assert body["question_index"] == 1
    assert body["max_questions"] == 10
    assert body["locked"] is False
    assert body["resolve_in_ms"] is None
    assert len(body["view"]["choices"]) == 4
    assert body["view"]["progress"]["current"] == 1


def test_state_is_stable_between_requests(client):
    first = client.get("/quiz/state").get_json()
    second = client.get("/quiz/state").get_json()
    assert first["view"]["problem"] == second["view"]["problem"]
    assert first["view"]["choices"] == second["view"]["choices"]


def test_correct_answer_advances_after_delay(client, clock):
    problem, _ = _start(client)
    r = client.post("/quiz/select", json={"choice": problem.correct_answer})
    body = r.get_json()
    assert r.status_code == 200
    assert body["outcome"] == "correct"
    assert body["locked"] is True
    assert body["resolve_in_ms"] == 800
    assert body["view"]["status"]["text"] == "Excellent!"

    clock.tick(500)
    early = client.post("/quiz/resolve").get_json()
    assert early["locked"] is True
    assert early["resolve_in_ms"] == 300

    clock.tick(300)
    done = client.post("/quiz/resolve").get_json()
    assert done["locked"] is False
    assert done["question_index"] == 2
    assert done["view"]["status"]["visible"] is False


def test_wrong_answer_keeps_problem(client, clock):
    problem, choices = _start(client)
    wrong = next(c for c in choices if c != problem.correct_answer)

    body = client.post("/quiz/select", json={"choice": wrong}).get_json()
    assert body["outcome"] == "wrong"
    assert body["resolve_in_ms"] == 1000
    marks = {c["value"]: c["marks"] for c in body["view"]["choices"]}
    assert marks[wrong] == ["wrong", "shake"]
    assert marks[problem.correct_answer] == ["hint"]

    clock.tick(1000)
    after = client.post("/quiz/resolve").get_json()
    assert after["locked"] is False
    assert after["question_index"] == 1
    assert _current(client) == (problem, choices)
    assert all(c["marks"] == [] for c in after["view"]["choices"])


def test_select_while_locked_is_conflict(client):
    problem, choices = _start(client)
    wrong = next(c for c in choices if c != problem.correct_answer)
    client.post("/quiz/select", json={"choice": wrong})

    r = client.post("/quiz/select", json={"choice": problem.correct_answer})
    assert r.status_code == 409
    assert r.get_json()["outcome"] == "wrong"


def test_form_answer_is_accepted(client):
    problem, _ = _start(client)
    r = client.post("/quiz/select", data={"answer": str(problem.correct_answer)})
    assert r.status_code == 200
    assert r.get_json()["outcome"] == "correct"


@pytest.mark.parametrize("payload", [{}, {"choice": None}, {"choice": "abc"}, {"choice": [1]}])
def test_select_rejects_non_integer(client, payload):
    _start(client)
    r = client.post("/quiz/select", json=payload)
    assert r.status_code == 400
    assert "error" in r.get_json()


def test_select_rejects_value_not_displayed(client):
    _, choices = _start(client)
    r = client.post("/quiz/select", json={"choice": max(choices) + 1000})
    body = r.get_json()
    assert r.status_code == 400
    assert body["locked"] is False


def test_full_cycle_wraps_to_one(client, clock):
    _start(client)
    indexes = []
    for _ in range(11):
        problem, _ = _current(client)
        body = client.post("/quiz/select", json={"choice": problem.correct_answer}).get_json()
        indexes.append(body["question_index"])
        clock.tick(800)
        client.post("/quiz/resolve")
    assert indexes == [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 1]
    assert client.get("/quiz/state").get_json()["question_index"] == 2


def test_restart_cancels_feedback(client, clock):
    problem, _ = _start(client)
    client.post("/quiz/select", json={"choice": problem.correct_answer})

    body = client.post("/quiz/restart").get_json()
    assert body["locked"] is False
    assert body["question_index"] == 1

    clock.tick(5000)
    assert client.get("/quiz/state").get_json()["question_index"] == 1


def test_corrupt_snapshot_starts_new_session(client):
    with client.session_transaction() as sess:
        sess[SESSION_KEY] = {"problem": {"a": 1}, "choices": "nope", "state": {}}
    r = client.get("/quiz/state")
    assert r.status_code == 200
    assert len(r.get_json()["view"]["choices"]) == 4


def test_select_requires_post(client):
    assert client.get("/quiz/select").status_code == 405


def test_stale_choice_after_due_feedback_keeps_resolved_problem(client, clock):
    problem, choices = _start(client)
    client.post("/quiz/select", json={"choice": problem.correct_answer})
    clock.tick(800)

    # a click on a button the page no longer shows
    r = client.post("/quiz/select", json={"choice": max(choices) + 10_000})
    assert r.status_code == 400
    next_problem_view = r.get_json()

    assert next_problem_view["locked"] is False
    assert next_problem_view["question_index"] == 2
    stored, stored_choices = _current(client)
    assert stored.text == next_problem_view["view"]["problem"]
    assert stored_choices == [c["value"] for c in next_problem_view["view"]["choices"]]

    r = client.post("/quiz/select", json={"choice": stored.correct_answer})
    assert r.status_code == 200
    assert r.get_json()["outcome"] == "correct"
