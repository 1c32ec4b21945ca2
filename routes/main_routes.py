# routes/main_routes.py - the quiz page
from flask import Blueprint, current_app, render_template, session

from services.session_helper import SessionHelper

main_bp = Blueprint("main", __name__)


@main_bp.route("/", methods=["GET"])
def index():
    """Quiz page, server-rendered with the current problem so it works before any script runs."""
    quiz = SessionHelper.load_quiz(session, current_app.config["QUIZ_MAX_QUESTIONS"])
    quiz.scheduler.run_due()
    SessionHelper.save(session, quiz)
    return render_template("index.html", view=quiz.surface.to_view(), locked=quiz.is_locked)
