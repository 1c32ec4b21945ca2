# models.py - quiz domain types: operations, problems and session state
import operator
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class Operation:
    name: str
    symbol: str
    apply: Callable[[int, int], int]
    # operands are drawn from [2, operand_range + 1]
    operand_range: int

    @property
    def min_operand(self) -> int:
        return 2

    @property
    def max_operand(self) -> int:
        return self.operand_range + 1


ADDITION = Operation("Addition", "+", operator.add, 20)
MULTIPLICATION = Operation("Multiplication", "×", operator.mul, 12)

OPERATIONS = (ADDITION, MULTIPLICATION)


def get_operation(name: str, catalog=OPERATIONS) -> Operation:
    """Look up an operation by its display name (used when restoring snapshots)."""
    for op in catalog:
        if op.name == name:
            return op
    raise ValueError(f"Unknown operation: {name!r}")


@dataclass(frozen=True)
class Problem:
    operand_a: int
    operand_b: int
    operation: Operation
    correct_answer: int

    @classmethod
    def create(cls, operation: Operation, a: int, b: int) -> "Problem":
        return cls(a, b, operation, operation.apply(a, b))

    @property
    def text(self) -> str:
        return f"{self.operand_a} {self.operation.symbol} {self.operand_b}"

    def to_dict(self) -> Dict:
        return {"a": self.operand_a, "b": self.operand_b, "operation": self.operation.name}

    @classmethod
    def from_dict(cls, data: Dict, catalog=OPERATIONS) -> "Problem":
        # answer is recomputed, never trusted from the snapshot
        return cls.create(get_operation(data["operation"], catalog), int(data["a"]), int(data["b"]))


class Phase(str, Enum):
    AWAITING_SELECTION = "awaiting_selection"
    RESOLVING = "resolving"


class Outcome(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"


class Mark(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    SHAKE = "shake"
    HINT = "hint"


@dataclass
class SessionState:
    question_index: int = 1
    max_questions: int = 10
    phase: Phase = Phase.AWAITING_SELECTION
    outcome: Optional[Outcome] = None
    selected: Optional[int] = None
    # scheduler time (ms) at which the pending resolution fires
    resolve_at: Optional[float] = None

    @property
    def is_locked(self) -> bool:
        return self.phase is Phase.RESOLVING

    @property
    def progress(self) -> float:
        return self.question_index / self.max_questions

    def lock(self, outcome: Outcome, selected: int, resolve_at: float):
        self.phase = Phase.RESOLVING
        self.outcome = outcome
        self.selected = selected
        self.resolve_at = resolve_at

    def unlock(self):
        self.phase = Phase.AWAITING_SELECTION
        self.outcome = None
        self.selected = None
        self.resolve_at = None

    def advance(self):
        self.question_index = (self.question_index % self.max_questions) + 1

    def to_dict(self) -> Dict:
        return {
            "question_index": self.question_index,
            "max_questions": self.max_questions,
            "phase": self.phase.value,
            "outcome": self.outcome.value if self.outcome else None,
            "selected": self.selected,
            "resolve_at": self.resolve_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "SessionState":
        outcome = data.get("outcome")
        return cls(
            question_index=int(data["question_index"]),
            max_questions=int(data["max_questions"]),
            phase=Phase(data.get("phase", Phase.AWAITING_SELECTION.value)),
            outcome=Outcome(outcome) if outcome else None,
            selected=data.get("selected"),
            resolve_at=data.get("resolve_at"),
        )
