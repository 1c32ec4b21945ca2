# routes/quiz_routes.py - JSON endpoints the quiz page talks to
from flask import Blueprint, current_app, jsonify, request, session

from services.session_helper import SessionHelper

quiz_bp = Blueprint("quiz", __name__, url_prefix="/quiz")


def _load_quiz():
    """Restore the player's session and let any elapsed feedback delay resolve."""
    quiz = SessionHelper.load_quiz(session, current_app.config["QUIZ_MAX_QUESTIONS"])
    fired = quiz.scheduler.run_due()
    if fired:
        current_app.logger.info("feedback_resolved count=%s question=%s", fired, quiz.state.question_index)
        # the resolved state must be stored before any early return
        SessionHelper.save(session, quiz)
    return quiz


def _payload(quiz, **extra):
    state = quiz.state
    resolve_in_ms = None
    if state.is_locked and state.resolve_at is not None:
        resolve_in_ms = max(0, int(round(state.resolve_at - quiz.scheduler.now())))
    payload = {
        "view": quiz.surface.to_view(),
        "question_index": state.question_index,
        "max_questions": state.max_questions,
        "phase": state.phase.value,
        "locked": state.is_locked,
        "outcome": state.outcome.value if state.outcome else None,
        "resolve_in_ms": resolve_in_ms,
    }
    payload.update(extra)
    return payload


@quiz_bp.route("/state", methods=["GET"])
def state():
    quiz = _load_quiz()
    SessionHelper.save(session, quiz)
    return jsonify(_payload(quiz))


@quiz_bp.route("/select", methods=["POST"])
def select():
    """Judge the player's choice. Body: {"choice": <int>} (or form field ``answer``)."""
    data = request.get_json(silent=True) or {}
    raw = data.get("choice", request.form.get("answer"))
    try:
        choice = int(raw)
    except (TypeError, ValueError):
        return jsonify({"error": "choice must be an integer"}), 400

    quiz = _load_quiz()
    if quiz.is_locked:
        SessionHelper.save(session, quiz)
        return jsonify(_payload(quiz, error="feedback still showing")), 409
    if choice not in quiz.choices:
        current_app.logger.warning("select_rejected choice=%s choices=%s", choice, quiz.choices)
        return jsonify(_payload(quiz, error="choice is not one of the displayed answers")), 400

    quiz.handle_selection(choice)
    SessionHelper.save(session, quiz)
    return jsonify(_payload(quiz))


@quiz_bp.route("/resolve", methods=["POST"])
def resolve():
    """Called by the page once a feedback delay has run out."""
    quiz = _load_quiz()
    SessionHelper.save(session, quiz)
    return jsonify(_payload(quiz))


@quiz_bp.route("/restart", methods=["POST"])
def restart():
    quiz = _load_quiz()
    quiz.cancel_pending()
    quiz = SessionHelper.new_quiz(session, current_app.config["QUIZ_MAX_QUESTIONS"])
    current_app.logger.info("quiz_restarted")
    return jsonify(_payload(quiz))
