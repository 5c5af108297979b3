"""Data models for deskcalc.

Token and parse-tree nodes for the expression engine, the closed operation
enums, and the immutable CalculatorState threaded through every transition
of the state machine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Union


class TokenKind(str, Enum):
    """Lexical token kinds."""

    NUMBER = "number"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    LPAREN = "("
    RPAREN = ")"


@dataclass(frozen=True)
class Token:
    """A single lexical token and where it started in the source text."""

    kind: TokenKind
    text: str
    position: int = 0


@dataclass(frozen=True)
class Literal:
    value: float


@dataclass(frozen=True)
class Binary:
    op: str
    left: ParseNode
    right: ParseNode
    position: int = 0


@dataclass(frozen=True)
class Negate:
    operand: ParseNode


ParseNode = Union[Literal, Binary, Negate]


class Phase(str, Enum):
    """Conceptual calculator states."""

    ENTRY = "entry"
    AWAITING_OPERAND = "awaiting-operand"
    RESULT = "result"
    ERROR = "error"


class UnaryFunction(str, Enum):
    """Functions applied directly to the display value."""

    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    LOG10 = "log10"
    LN = "ln"
    SQRT = "sqrt"


class MemoryOp(str, Enum):
    """Memory register operations."""

    MC = "MC"
    MR = "MR"
    M_PLUS = "M+"
    M_MINUS = "M-"
    MS = "MS"


ERROR_DISPLAY = "Error"
HISTORY_LIMIT = 10


@dataclass(frozen=True)
class HistoryEntry:
    """One successful evaluation."""

    expression: str
    result: str

    @property
    def text(self) -> str:
        return f"{self.expression} = {self.result}"

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class CalculatorState:
    """Everything the calculator knows, as a single immutable value.

    ``display`` is never empty and ``memory`` is always finite; transitions
    in deskcalc.machine are responsible for keeping it that way.
    """

    display: str = "0"
    expression: str = ""
    memory: float = 0.0
    history: tuple[HistoryEntry, ...] = ()
    phase: Phase = Phase.ENTRY

    @property
    def is_error(self) -> bool:
        return self.phase == Phase.ERROR

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "display": self.display,
            "expression": self.expression,
            "memory": self.memory,
            "history": [entry.text for entry in self.history],
            "phase": self.phase.value,
        }


def format_number(value: float) -> str:
    """Canonical display text for a computed value.

    Whole numbers print without a fraction ('5', not '5.0') up to 1e21,
    everything else uses the shortest repr that round-trips.
    """
    if value == 0:
        # also folds -0.0
        return "0"
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))
