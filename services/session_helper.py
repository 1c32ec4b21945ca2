# services/session_helper.py - keep the QuizSession snapshot in the Flask session
import logging

from services.presentation import RecordingSurface
from services.quiz_session import QuizSession
from services.timers import WallClockScheduler

SESSION_KEY = "quiz"

logger = logging.getLogger(__name__)


class SessionHelper:
    @staticmethod
    def new_quiz(session, max_questions=10, rng=None, scheduler=None):
        """Start a fresh QuizSession and store its snapshot."""
        quiz = QuizSession(
            RecordingSurface(), scheduler or WallClockScheduler(), rng=rng, max_questions=max_questions
        )
        quiz.start()
        SessionHelper.save(session, quiz)
        return quiz

    @staticmethod
    def load_quiz(session, max_questions=10, rng=None, scheduler=None):
        """Restore the stored QuizSession, or start one when none (or a broken one) is stored."""
        data = session.get(SESSION_KEY)
        if not data:
            return SessionHelper.new_quiz(session, max_questions, rng, scheduler)
        try:
            return QuizSession.from_dict(
                data, RecordingSurface(), scheduler or WallClockScheduler(), rng=rng
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("quiz_snapshot_discarded error=%s", e)
            return SessionHelper.new_quiz(session, max_questions, rng, scheduler)

    @staticmethod
    def save(session, quiz):
        session[SESSION_KEY] = quiz.to_dict()

    @staticmethod
    def clear(session):
        session.pop(SESSION_KEY, None)
