"""Error hierarchy for deskcalc.

Everything the engine or the state machine can recover from derives from
CalculatorError. The machine turns these into the "Error" display sentinel;
the CLI turns them into a red message and a non-zero exit.
"""

from __future__ import annotations

from typing import Optional


class CalculatorError(Exception):
    """Base exception for calculator errors."""

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"


class ParseError(CalculatorError):
    """Malformed expression syntax."""


class EmptyExpression(ParseError):
    """Nothing to evaluate."""

    def __init__(self) -> None:
        super().__init__("Empty expression")


class LexError(ParseError):
    """Unrecognized character in the expression text."""


class EvalError(CalculatorError):
    """Well-formed expression that cannot be reduced to a finite number."""


class DivideByZero(EvalError):
    """Raised when a '/' node has a zero divisor."""

    def __init__(self, position: Optional[int] = None) -> None:
        super().__init__("Division by zero", position)


class NumericOverflow(EvalError):
    """Result is not a finite double."""


class DomainError(CalculatorError):
    """Unary function applied outside its domain."""


class UnknownKey(CalculatorError):
    """The input dispatcher has no mapping for a key."""
