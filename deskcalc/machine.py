"""Calculator state machine.

Every input class has a pure transition ``(state, input) -> state``. The
Calculator class owns the single live state for a session and exposes the
transitions as methods for the input dispatcher and the presentation layer.

Conceptual phases:
    ENTRY            building the current operand in ``display``
    AWAITING_OPERAND an operator was just appended, ``display`` reset to "0"
    RESULT           display holds a computed value (evaluation, function
                     or memory); the next digit starts a new operand
    ERROR            ``display`` holds the "Error" sentinel

Operator sequences are not validated when typed: a stray ``)`` goes into
``expression`` and only fails when equals hands it to the engine.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Callable, Optional, Union

import structlog

from deskcalc.engine import evaluate
from deskcalc.errors import CalculatorError, DomainError
from deskcalc.models import (
    ERROR_DISPLAY,
    HISTORY_LIMIT,
    CalculatorState,
    HistoryEntry,
    MemoryOp,
    Phase,
    UnaryFunction,
    format_number,
)

logger = structlog.get_logger()

DIGIT_KEYS = frozenset("0123456789.")
OPERATOR_KEYS = frozenset("+-*/()")

_FUNCTIONS: dict[UnaryFunction, Callable[[float], float]] = {
    UnaryFunction.SIN: math.sin,
    UnaryFunction.COS: math.cos,
    UnaryFunction.TAN: math.tan,
    UnaryFunction.LOG10: math.log10,
    UnaryFunction.LN: math.log,
    UnaryFunction.SQRT: math.sqrt,
}


def apply_unary(func: UnaryFunction, value: float) -> float:
    """Apply ``func`` to ``value``.

    Raises:
        DomainError: the argument is outside the function's domain or the
            result is not finite (``sqrt(-1)``, ``ln(0)``).
    """
    try:
        result = _FUNCTIONS[func](value)
    except (ValueError, OverflowError) as e:
        raise DomainError(f"{func.value}({format_number(value)}): {e}") from e
    if not math.isfinite(result):
        raise DomainError(f"{func.value}({format_number(value)}) is not finite")
    return result


def _error(state: CalculatorState) -> CalculatorState:
    return replace(state, display=ERROR_DISPLAY, phase=Phase.ERROR)


def _pending_operand(state: CalculatorState) -> str:
    """The display text that belongs in the expression, if any.

    The display is carried over as typed, including the "0" left by an
    operator (``2+=`` evaluates ``2+0``). It is dropped right after a closing
    parenthesis, where ``(2+3)0`` could never parse, and while the display
    shows the error sentinel.
    """
    if state.phase == Phase.ERROR:
        return ""
    if state.phase == Phase.AWAITING_OPERAND and state.expression.endswith(")"):
        return ""
    return state.display


def _display_value(state: CalculatorState) -> float:
    if state.phase == Phase.ERROR:
        return 0.0
    return float(state.display)


# --- Transitions ---


def apply_digit(state: CalculatorState, digit: str) -> CalculatorState:
    """Append a digit or decimal point to the operand being entered.

    Raises:
        ValueError: ``digit`` is not one of 0-9 or '.'.
    """
    if len(digit) != 1 or digit not in DIGIT_KEYS:
        raise ValueError(f"Not a digit: {digit!r}")

    fresh = state.phase != Phase.ENTRY or state.display == "0"
    if fresh:
        display = "0." if digit == "." else digit
    elif digit == "." and "." in state.display:
        return state
    else:
        display = state.display + digit
    return replace(state, display=display, phase=Phase.ENTRY)


def apply_operator(state: CalculatorState, op: str) -> CalculatorState:
    """Move the display operand and ``op`` into the expression.

    Raises:
        ValueError: ``op`` is not one of ``+ - * / ( )``.
    """
    if len(op) != 1 or op not in OPERATOR_KEYS:
        raise ValueError(f"Not an operator: {op!r}")

    operand = _pending_operand(state)
    if op == "(" and operand == "0":
        operand = ""
    return replace(
        state,
        expression=state.expression + operand + op,
        display="0",
        phase=Phase.AWAITING_OPERAND,
    )


def apply_equals(state: CalculatorState, history_limit: int = HISTORY_LIMIT) -> CalculatorState:
    """Evaluate ``expression`` plus the display operand.

    A failed evaluation leaves ``expression`` and ``history`` as they were and
    only swaps the display for the error sentinel.
    """
    text = state.expression + _pending_operand(state)
    try:
        value = evaluate(text)
    except CalculatorError as e:
        logger.info("Evaluation failed", expression=text, error=str(e))
        return _error(state)

    result = format_number(value)
    entry = HistoryEntry(expression=text, result=result)
    history = ((entry,) + state.history)[:min(history_limit, HISTORY_LIMIT)]
    return replace(
        state,
        display=result,
        expression="",
        history=history,
        phase=Phase.RESULT,
    )


def apply_function(state: CalculatorState, func: Union[UnaryFunction, str]) -> CalculatorState:
    """Replace the display value with ``func(display)``.

    Function application is not an evaluation: history stays as it is.

    Raises:
        ValueError: ``func`` names no known function.
    """
    func = UnaryFunction(func)
    value = _display_value(state)
    try:
        result = apply_unary(func, value)
    except DomainError as e:
        logger.info("Function failed", function=func.value, error=str(e))
        return _error(state)
    return replace(state, display=format_number(result), phase=Phase.RESULT)


def apply_memory(state: CalculatorState, op: Union[MemoryOp, str]) -> CalculatorState:
    """Run a memory register operation against the display value.

    An operation that would leave a non-finite value in memory is dropped.

    Raises:
        ValueError: ``op`` names no known memory operation.
    """
    op = MemoryOp(op)
    if state.phase == Phase.ERROR:
        state = replace(state, display="0", phase=Phase.ENTRY)

    if op == MemoryOp.MC:
        return replace(state, memory=0.0)
    if op == MemoryOp.MR:
        return replace(state, display=format_number(state.memory), phase=Phase.RESULT)

    value = _display_value(state)
    if op == MemoryOp.M_PLUS:
        memory = state.memory + value
    elif op == MemoryOp.M_MINUS:
        memory = state.memory - value
    else:
        memory = value

    if not math.isfinite(memory):
        logger.info("Memory update rejected", op=op.value, memory=state.memory, value=value)
        return state
    # typing after a store starts a new operand
    phase = Phase.RESULT if state.phase == Phase.ENTRY else state.phase
    return replace(state, memory=memory, phase=phase)


def clear(state: CalculatorState) -> CalculatorState:
    """Reset display and expression; memory and history survive."""
    return replace(state, display="0", expression="", phase=Phase.ENTRY)


def clear_history(state: CalculatorState) -> CalculatorState:
    return replace(state, history=())


# --- Session object ---


class Calculator:
    """Owns the live CalculatorState for one session.

    Each method runs one transition to completion, stores the new state and
    returns it, so a renderer can read the result before the next input.
    """

    def __init__(
        self,
        history_limit: int = HISTORY_LIMIT,
        state: Optional[CalculatorState] = None,
    ) -> None:
        self.history_limit = min(history_limit, HISTORY_LIMIT)
        self._state = state or CalculatorState()

    @property
    def state(self) -> CalculatorState:
        return self._state

    def _commit(self, action: str, new_state: CalculatorState) -> CalculatorState:
        logger.debug(
            "Transition",
            action=action,
            phase=new_state.phase.value,
            display=new_state.display,
            expression=new_state.expression,
        )
        self._state = new_state
        return new_state

    def apply_digit(self, digit: str) -> CalculatorState:
        return self._commit(f"digit {digit}", apply_digit(self._state, digit))

    def apply_operator(self, op: str) -> CalculatorState:
        return self._commit(f"operator {op}", apply_operator(self._state, op))

    def apply_equals(self) -> CalculatorState:
        return self._commit("equals", apply_equals(self._state, self.history_limit))

    def apply_function(self, func: Union[UnaryFunction, str]) -> CalculatorState:
        return self._commit(f"function {func}", apply_function(self._state, func))

    def apply_memory(self, op: Union[MemoryOp, str]) -> CalculatorState:
        return self._commit(f"memory {op}", apply_memory(self._state, op))

    def clear(self) -> CalculatorState:
        return self._commit("clear", clear(self._state))

    def escape(self) -> CalculatorState:
        """Escape key: same effect as clear."""
        return self._commit("escape", clear(self._state))

    def clear_history(self) -> CalculatorState:
        return self._commit("clear history", clear_history(self._state))
