"""Tests for the application factory: pages, headers, error handlers and CSRF."""

import pytest

from app import create_app


@pytest.fixture
def app(tmp_path):
    return create_app({"TESTING": True, "SESSION_FILE_DIR": str(tmp_path / "sessions")})


@pytest.fixture
def client(app):
    return app.test_client()


def test_index_renders_quiz(client):
    r = client.get("/")
    html = r.get_data(as_text=True)
    assert r.status_code == 200
    assert 'id="options-grid"' in html
    assert html.count('class="option-btn') == 4
    assert "1/10" in html
    assert 'name="csrf-token"' in html


def test_index_and_state_show_same_problem(client):
    html = client.get("/").get_data(as_text=True)
    problem = client.get("/quiz/state").get_json()["view"]["problem"]
    assert problem in html


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok"}


def test_security_headers(client):
    r = client.get("/healthz")
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert "default-src 'self'" in r.headers["Content-Security-Policy"]


def test_404_page(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert b"Page not found" in r.data


def test_404_json_under_quiz(client):
    r = client.get("/quiz/nope")
    assert r.status_code == 404
    assert r.get_json() == {"error": "not found"}


def test_max_questions_override(tmp_path):
    app = create_app(
        {"TESTING": True, "QUIZ_MAX_QUESTIONS": 3, "SESSION_FILE_DIR": str(tmp_path / "s")}
    )
    body = app.test_client().get("/quiz/state").get_json()
    assert body["max_questions"] == 3
    assert body["view"]["progress"]["total"] == 3


def test_csrf_enforced_when_enabled(tmp_path):
    app = create_app(
        {"TESTING": True, "WTF_CSRF_ENABLED": True, "SESSION_FILE_DIR": str(tmp_path / "s")}
    )
    client = app.test_client()
    client.get("/")
    r = client.post("/quiz/select", json={"choice": 1})
    assert r.status_code == 400
    assert "error" in r.get_json()


def test_proxy_scheme_respected(app):
    seen = {}

    @app.route("/_scheme")
    def _scheme():
        from flask import request

        seen["scheme"] = request.scheme
        return "ok"

    app.test_client().get("/_scheme", headers={"X-Forwarded-Proto": "https"})
    assert seen["scheme"] == "https"


def test_405_json_under_quiz(client):
    r = client.get("/quiz/resolve")
    assert r.status_code == 405
    assert r.get_json() == {"error": "method not allowed"}


def test_405_page_outside_quiz(client):
    r = client.post("/healthz")
    assert r.status_code == 405
    assert r.get_json(silent=True) is None


def test_quiz_script_recovers_from_error_payloads(client):
    r = client.get("/static/js/quiz.js")
    js = r.get_data(as_text=True)
    r.close()
    assert r.status_code == 200
    assert "!payload.view" in js
    assert "showError(payload && payload.error)" in js
    assert "busy = false" in js
