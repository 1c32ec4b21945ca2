# services/presentation.py - the command interface between QuizSession and whatever draws it
from typing import Callable, Dict, List, Optional

from models import Mark


class PresentationSurface:
    """Outbound commands a QuizSession issues. Hosts subclass this."""

    def set_category(self, name: str):
        raise NotImplementedError

    def set_problem_text(self, text: str):
        raise NotImplementedError

    def render_choices(self, choices: List[int], on_choice_selected: Callable[[int], bool]):
        raise NotImplementedError

    def set_status(self, text: str, color: str):
        raise NotImplementedError

    def clear_status(self):
        raise NotImplementedError

    def set_progress(self, current: int, total: int):
        raise NotImplementedError

    def mark_choice(self, choice: int, flag: Mark):
        raise NotImplementedError

    def clear_marks(self):
        raise NotImplementedError


class RecordingSurface(PresentationSurface):
    """Keeps a display mirror plus an ordered log of every command received.

    The web host serialises the mirror with ``to_view()``; tests inspect
    ``commands``.
    """

    def __init__(self):
        self.commands: List[tuple] = []
        self.category = ""
        self.problem_text = ""
        self.choices: List[int] = []
        self.status: Dict = {"text": "", "color": "", "visible": False}
        self.progress: Dict = {"current": 0, "total": 0, "percentage": 0.0}
        self.marks: Dict[int, List[str]] = {}
        self._on_choice_selected: Optional[Callable[[int], bool]] = None

    def _log(self, name, *args):
        self.commands.append((name,) + args)

    def command_names(self) -> List[str]:
        return [c[0] for c in self.commands]

    def set_category(self, name):
        self._log("set_category", name)
        self.category = name

    def set_problem_text(self, text):
        self._log("set_problem_text", text)
        self.problem_text = text

    def render_choices(self, choices, on_choice_selected):
        self._log("render_choices", list(choices))
        self.choices = list(choices)
        # fresh affordances carry no marks
        self.marks = {}
        self._on_choice_selected = on_choice_selected

    def set_status(self, text, color):
        self._log("set_status", text, color)
        self.status = {"text": text, "color": color, "visible": True}

    def clear_status(self):
        self._log("clear_status")
        self.status = dict(self.status, visible=False)

    def set_progress(self, current, total):
        self._log("set_progress", current, total)
        pct = current * 100 / total if total else 0.0
        self.progress = {"current": current, "total": total, "percentage": pct}

    def mark_choice(self, choice, flag):
        flag = Mark(flag)
        self._log("mark_choice", choice, flag.value)
        flags = self.marks.setdefault(choice, [])
        if flag.value not in flags:
            flags.append(flag.value)

    def clear_marks(self):
        self._log("clear_marks")
        self.marks = {}

    def select(self, value: int) -> bool:
        """Simulate activating the affordance showing ``value``."""
        if self._on_choice_selected is None:
            return False
        return self._on_choice_selected(value)

    def to_view(self) -> Dict:
        return {
            "category": self.category,
            "problem": self.problem_text,
            "choices": [
                {"value": c, "marks": list(self.marks.get(c, []))} for c in self.choices
            ],
            "status": dict(self.status),
            "progress": dict(self.progress),
        }
