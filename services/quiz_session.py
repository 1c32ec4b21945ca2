# services/quiz_session.py - problem generation, answer judging and session progress
import logging
import random
from typing import Dict, Iterable, List, Optional, Set

from models import OPERATIONS, Mark, Outcome, Problem, SessionState

from services.presentation import PresentationSurface
from services.timers import Timer

logger = logging.getLogger(__name__)

SUCCESS_TEXT = "Excellent!"
FAILURE_TEXT = "Try Again"
SUCCESS_COLOR = "var(--color-emerald)"
ERROR_COLOR = "var(--color-crimson)"

CHOICE_COUNT = 4


class QuizSession:
    """One continuous play-through of the quiz.

    Owns the current Problem, its ChoiceSet and the SessionState. Everything
    visible goes out through ``surface``; the feedback delays run on
    ``scheduler`` (anything with ``now()`` and ``call_later(ms, cb)``).

    State machine: AWAITING_SELECTION -> RESOLVING(outcome) -> AWAITING_SELECTION.
    """

    SUCCESS_DELAY_MS = 800
    FAILURE_DELAY_MS = 1000

    def __init__(
        self,
        surface: PresentationSurface,
        scheduler,
        rng: Optional[random.Random] = None,
        max_questions: int = 10,
        operations=OPERATIONS,
    ):
        if max_questions < 1:
            raise ValueError("max_questions must be at least 1")
        if not operations:
            raise ValueError("operation catalog is empty")
        self.surface = surface
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.operations = tuple(operations)
        self.state = SessionState(max_questions=max_questions)
        self.problem: Optional[Problem] = None
        self.choices: List[int] = []
        self._timer: Optional[Timer] = None

    @property
    def is_locked(self) -> bool:
        return self.state.is_locked

    def start(self) -> Problem:
        return self.generate_problem()

    # -- generation -------------------------------------------------------

    def generate_problem(self) -> Problem:
        op = self.rng.choice(self.operations)
        a = self.rng.randint(op.min_operand, op.max_operand)
        b = self.rng.randint(op.min_operand, op.max_operand)
        self.problem = Problem.create(op, a, b)
        self.choices = self.shuffle(self.generate_distractors(self.problem.correct_answer))
        logger.debug("problem_generated text=%s answer=%s", self.problem.text, self.problem.correct_answer)
        self._render_problem()
        return self.problem

    def generate_distractors(self, correct: int) -> Set[int]:
        """Return ``correct`` plus three plausible mistakes, all positive and distinct."""
        values = {correct}
        while len(values) < CHOICE_COUNT:
            strategy = self.rng.randrange(3)
            if strategy == 0:
                candidate = correct + self.rng.choice((1, -1))
            elif strategy == 1:
                candidate = correct + self.rng.choice((10, -10))
            else:
                candidate = correct + self.rng.randint(-3, 3)
            if candidate > 0 and candidate not in values:
                values.add(candidate)
        return values

    def shuffle(self, values: Iterable[int]) -> List[int]:
        # Fisher-Yates; sorted first so a seeded rng gives a reproducible order
        items = sorted(values)
        for i in range(len(items) - 1, 0, -1):
            j = self.rng.randint(0, i)
            items[i], items[j] = items[j], items[i]
        return items

    # -- selection --------------------------------------------------------

    def handle_selection(self, selected: int) -> bool:
        """Judge a selection. Returns False when it was ignored."""
        if self.state.is_locked:
            logger.debug("selection_ignored reason=locked value=%s", selected)
            return False
        if self.problem is None or selected not in self.choices:
            logger.warning("selection_ignored reason=unknown_choice value=%s choices=%s", selected, self.choices)
            return False

        if selected == self.problem.correct_answer:
            self._lock(Outcome.CORRECT, selected, self.SUCCESS_DELAY_MS, self._finish_correct)
        else:
            self._lock(Outcome.WRONG, selected, self.FAILURE_DELAY_MS, self._finish_wrong)
        self._render_feedback()
        logger.info(
            "selection outcome=%s value=%s answer=%s question=%s/%s",
            self.state.outcome.value, selected, self.problem.correct_answer,
            self.state.question_index, self.state.max_questions,
        )
        return True

    def next_question(self):
        self.state.advance()
        self.generate_problem()
        self._unlock()
        self.surface.clear_status()

    def _lock(self, outcome: Outcome, selected: int, delay_ms: int, callback):
        self._timer = self.scheduler.call_later(delay_ms, callback)
        self.state.lock(outcome, selected, self._timer.due_at)

    def _unlock(self):
        self._timer = None
        self.state.unlock()

    def _finish_correct(self):
        self.next_question()

    def _finish_wrong(self):
        self.surface.clear_marks()
        self.surface.clear_status()
        self._unlock()

    def cancel_pending(self):
        """Drop an outstanding resolution; the session stays on its current problem."""
        if self._timer is not None:
            self._timer.cancel()
        self._unlock()

    # -- presentation -----------------------------------------------------

    def _render_problem(self):
        self.surface.set_category(self.problem.operation.name)
        self.surface.set_problem_text(self.problem.text)
        self.surface.render_choices(list(self.choices), self.handle_selection)
        self.surface.set_progress(self.state.question_index, self.state.max_questions)

    def _render_feedback(self):
        selected = self.state.selected
        if self.state.outcome is Outcome.CORRECT:
            self.surface.mark_choice(selected, Mark.CORRECT)
            self.surface.set_status(SUCCESS_TEXT, SUCCESS_COLOR)
        else:
            self.surface.mark_choice(selected, Mark.WRONG)
            self.surface.mark_choice(selected, Mark.SHAKE)
            self.surface.set_status(FAILURE_TEXT, ERROR_COLOR)
            self.surface.mark_choice(self.problem.correct_answer, Mark.HINT)

    def redraw(self):
        """Push the whole current view to the surface again."""
        if self.problem is None:
            return
        self._render_problem()
        if self.state.is_locked:
            self._render_feedback()

    # -- snapshots --------------------------------------------------------

    def to_dict(self) -> Dict:
        return {
            "problem": self.problem.to_dict() if self.problem else None,
            "choices": list(self.choices),
            "state": self.state.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict, surface, scheduler, rng=None, operations=OPERATIONS) -> "QuizSession":
        """Rebuild a session from ``to_dict`` output and redraw it on ``surface``.

        A pending resolution is re-armed for whatever is left of its delay.
        Raises ValueError (or KeyError/TypeError) on a malformed snapshot.
        """
        state = SessionState.from_dict(data["state"])
        session = cls(surface, scheduler, rng=rng, max_questions=state.max_questions, operations=operations)
        if not 1 <= state.question_index <= state.max_questions:
            raise ValueError(f"question_index out of range: {state.question_index}")
        session.state = state
        if data.get("problem") is None:
            session.start()
            return session

        session.problem = Problem.from_dict(data["problem"], operations)
        choices = [int(c) for c in data["choices"]]
        if (
            len(choices) != CHOICE_COUNT
            or len(set(choices)) != CHOICE_COUNT
            or min(choices) <= 0
            or choices.count(session.problem.correct_answer) != 1
        ):
            raise ValueError(f"invalid choice set: {choices}")
        session.choices = choices

        if state.is_locked:
            if state.outcome is None or state.selected not in choices:
                raise ValueError("resolving snapshot without an outcome")
            if state.outcome is Outcome.CORRECT:
                callback = session._finish_correct
            else:
                callback = session._finish_wrong
            resolve_at = state.resolve_at if state.resolve_at is not None else scheduler.now()
            session._timer = scheduler.call_later(max(0.0, resolve_at - scheduler.now()), callback)
            state.resolve_at = session._timer.due_at

        session.redraw()
        return session
