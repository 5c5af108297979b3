"""Input dispatcher: raw keys and button labels to calculator calls.

Each key maps to exactly one Calculator method. Multiplication and division
glyphs are normalized to '*' and '/' here, so the machine and the engine
only ever see ASCII operators.
"""

from __future__ import annotations

from deskcalc.errors import UnknownKey
from deskcalc.machine import DIGIT_KEYS, OPERATOR_KEYS, Calculator
from deskcalc.models import CalculatorState, MemoryOp, UnaryFunction

OPERATOR_ALIASES: dict[str, str] = {
    "×": "*",
    "x": "*",
    "X": "*",
    "÷": "/",
}

# Lower-cased control words
_EQUALS_KEYS = ("=", "enter", "return")
_ESCAPE_KEYS = ("escape", "esc")
_CLEAR_KEYS = ("c", "ac", "clear")

FUNCTION_ALIASES: dict[str, UnaryFunction] = {f.value: f for f in UnaryFunction}
FUNCTION_ALIASES["log"] = UnaryFunction.LOG10
FUNCTION_ALIASES["√"] = UnaryFunction.SQRT

MEMORY_KEYS: dict[str, MemoryOp] = {m.value.lower(): m for m in MemoryOp}


def is_named_key(key: str) -> bool:
    """True for keys that are words rather than single characters."""
    k = key.lower()
    return (
        k in FUNCTION_ALIASES
        or k in MEMORY_KEYS
        or k in _EQUALS_KEYS
        or k in _ESCAPE_KEYS
        or k in _CLEAR_KEYS
    )


def expand_keys(text: str) -> list[str]:
    """Split a typed line into individual keys.

    Whitespace separates words; a word that is not a named key
    (``sqrt``, ``M+``, ``Enter``...) is split into characters, so
    ``"12+3 ="`` and ``"1 2 + 3 ="`` give the same keys.
    """
    keys: list[str] = []
    for word in text.split():
        if is_named_key(word):
            keys.append(word)
        else:
            keys.extend(word)
    return keys


def dispatch(calculator: Calculator, key: str) -> CalculatorState:
    """Route one key to the matching calculator call.

    Raises:
        UnknownKey: nothing is mapped to ``key``.
    """
    if key in DIGIT_KEYS:
        return calculator.apply_digit(key)

    op = OPERATOR_ALIASES.get(key, key)
    if op in OPERATOR_KEYS:
        return calculator.apply_operator(op)

    k = key.lower()
    if k in _EQUALS_KEYS:
        return calculator.apply_equals()
    if k in _ESCAPE_KEYS:
        return calculator.escape()
    if k in _CLEAR_KEYS:
        return calculator.clear()
    if k in FUNCTION_ALIASES:
        return calculator.apply_function(FUNCTION_ALIASES[k])
    if k in MEMORY_KEYS:
        return calculator.apply_memory(MEMORY_KEYS[k])

    raise UnknownKey(f"No mapping for key {key!r}")
