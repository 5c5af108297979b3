"""Tests for the expression engine (parser + reducer)."""

from pathlib import Path

import pytest

from deskcalc import engine
from deskcalc.engine import MAX_DEPTH, evaluate, parse, reduce
from deskcalc.errors import (
    DivideByZero,
    EmptyExpression,
    EvalError,
    LexError,
    NumericOverflow,
    ParseError,
)
from deskcalc.models import Binary, Literal, Negate


# --- Arithmetic ---

def test_addition():
    assert evaluate("2+3") == pytest.approx(5.0)


def test_subtraction():
    assert evaluate("10 - 4") == pytest.approx(6.0)


def test_multiplication():
    assert evaluate("3*7") == pytest.approx(21.0)


def test_division():
    assert evaluate("15/4") == pytest.approx(3.75)


def test_decimal_numbers():
    assert evaluate("3.14 * 2") == pytest.approx(6.28)


def test_float_arithmetic_is_unrounded():
    assert evaluate("0.1+0.2") == 0.1 + 0.2


# --- Precedence and associativity ---

def test_precedence_mul_before_add():
    assert evaluate("2+3*4") == 14


def test_parentheses_override_precedence():
    assert evaluate("(2+3)*4") == 20


def test_left_associative_subtraction():
    assert evaluate("10-4-3") == 3


def test_left_associative_division():
    assert evaluate("64/4/2") == 8


def test_precedence_complex():
    assert evaluate("10 - 2 * 3 + 4 / 2") == pytest.approx(6.0)


def test_nested_parentheses():
    assert evaluate("((2+3)*(4-1))") == 15


# --- Unary minus ---

def test_unary_minus_binds_tighter_than_add():
    assert evaluate("-2+3") == 1


def test_unary_minus_on_group():
    assert evaluate("-(2+3)") == -5


def test_double_negation():
    assert evaluate("--4") == 4


def test_unary_minus_after_operator():
    assert evaluate("2*-3") == -6
    assert evaluate("2--3") == 5


def test_negate_node_shape():
    assert parse("-2") == Negate(Literal(2.0))


def test_binary_node_shape():
    tree = parse("1-2*3")
    assert isinstance(tree, Binary)
    assert tree.op == "-"
    assert tree.left == Literal(1.0)
    assert isinstance(tree.right, Binary) and tree.right.op == "*"


# --- Errors ---

def test_empty_expression():
    with pytest.raises(EmptyExpression):
        evaluate("")


def test_whitespace_only_is_empty():
    with pytest.raises(EmptyExpression):
        evaluate("   ")


def test_division_by_zero():
    with pytest.raises(DivideByZero):
        evaluate("5/0")


def test_division_by_zero_inside_larger_expression():
    with pytest.raises(DivideByZero):
        evaluate("1 + 2/(3-3) * 100")


def test_division_by_zero_is_eval_error():
    with pytest.raises(EvalError):
        evaluate("1/0")


@pytest.mark.parametrize("text", ["(2+3", "2+3)", "2+", "*2", "2++3", "()", "2 3", "."])
def test_malformed_syntax(text):
    with pytest.raises(ParseError):
        evaluate(text)


def test_missing_paren_reports_open_position():
    with pytest.raises(ParseError) as exc:
        evaluate("1+(2*3")
    assert exc.value.position == 2


def test_lex_error_propagates_as_parse_error():
    with pytest.raises(LexError):
        evaluate("2+x")


def test_overflow_is_rejected():
    with pytest.raises(NumericOverflow):
        evaluate("1e308*10")


def test_deep_nesting_is_a_parse_error():
    text = "(" * (MAX_DEPTH + 5) + "1" + ")" * (MAX_DEPTH + 5)
    with pytest.raises(ParseError):
        evaluate(text)


def test_moderate_nesting_is_fine():
    depth = MAX_DEPTH // 2
    assert evaluate("(" * depth + "7" + ")" * depth) == 7


def test_long_chain_reduces_without_recursion():
    assert evaluate("+".join(["1"] * 5000)) == 5000


# --- Purity ---

def test_deterministic():
    results = {evaluate("(1.5+2)*3/7-0.25") for _ in range(20)}
    assert len(results) == 1


def test_reduce_is_repeatable():
    tree = parse("6/(1+2)")
    assert reduce(tree) == reduce(tree) == 2


def test_no_eval():
    """The engine source must not hand text to eval(), exec() or compile()."""
    source = Path(engine.__file__).read_text(encoding="utf-8")
    lines = [line for line in source.splitlines()
             if line.strip() and not line.strip().startswith("#")]
    code = "\n".join(lines)
    for forbidden in (" eval(", "exec(", "compile("):
        assert forbidden not in code, f"engine uses forbidden function: {forbidden}"
