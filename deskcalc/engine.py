"""Expression engine: recursive-descent parser plus tree reduction.

Grammar (lowest to highest precedence):

    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := NUMBER | '(' expression ')' | '-' factor

Binary operators are left-associative, unary minus is right-associative.
Nothing here ever runs the text as Python code; the parse tree is the only
evaluation path. The module is stateless, so identical input always gives
the identical result or the identical error.
"""

from __future__ import annotations

import math
import operator
from typing import Callable, Optional

from deskcalc.errors import DivideByZero, EmptyExpression, NumericOverflow, ParseError
from deskcalc.models import Binary, Literal, Negate, ParseNode, Token, TokenKind
from deskcalc.tokenizer import tokenize

# Guards the interpreter stack against input like "((((((...".
MAX_DEPTH = 100

_BINARY_OPS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


class _Parser:
    """Single-use cursor over a token list."""

    def __init__(self, tokens: list[Token], source: str) -> None:
        self.tokens = tokens
        self.source = source
        self.pos = 0
        self.depth = 0

    def _peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _end_position(self) -> int:
        return len(self.source)

    def parse(self) -> ParseNode:
        node = self._expression()
        tok = self._peek()
        if tok is not None:
            if tok.kind == TokenKind.RPAREN:
                raise ParseError("Unmatched ')'", tok.position)
            raise ParseError(f"Unexpected {tok.text!r}", tok.position)
        return node

    def _expression(self) -> ParseNode:
        node = self._term()
        while True:
            tok = self._peek()
            if tok is None or tok.kind not in (TokenKind.PLUS, TokenKind.MINUS):
                return node
            self._advance()
            node = Binary(tok.text, node, self._term(), tok.position)

    def _term(self) -> ParseNode:
        node = self._factor()
        while True:
            tok = self._peek()
            if tok is None or tok.kind not in (TokenKind.STAR, TokenKind.SLASH):
                return node
            self._advance()
            node = Binary(tok.text, node, self._factor(), tok.position)

    def _factor(self) -> ParseNode:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise ParseError("Expression nested too deeply", self._current_position())
        try:
            return self._factor_inner()
        finally:
            self.depth -= 1

    def _current_position(self) -> int:
        tok = self._peek()
        return tok.position if tok else self._end_position()

    def _factor_inner(self) -> ParseNode:
        tok = self._peek()
        if tok is None:
            raise ParseError("Expected a number or '('", self._end_position())

        if tok.kind == TokenKind.NUMBER:
            self._advance()
            return Literal(_to_float(tok))

        if tok.kind == TokenKind.MINUS:
            self._advance()
            return Negate(self._factor())

        if tok.kind == TokenKind.LPAREN:
            self._advance()
            node = self._expression()
            close = self._peek()
            if close is None or close.kind != TokenKind.RPAREN:
                raise ParseError("Missing ')'", tok.position)
            self._advance()
            return node

        raise ParseError(f"Expected a number or '(' but found {tok.text!r}", tok.position)


def _to_float(tok: Token) -> float:
    try:
        return float(tok.text)
    except ValueError:
        raise ParseError(f"Malformed number {tok.text!r}", tok.position) from None


def parse(text: str) -> ParseNode:
    """Parse expression text into a tree.

    Raises:
        EmptyExpression: text is empty or only whitespace.
        ParseError: anything else that does not match the grammar
            (LexError included).
    """
    tokens = tokenize(text)
    if not tokens:
        raise EmptyExpression()
    return _Parser(tokens, text).parse()


def reduce(node: ParseNode) -> float:
    """Reduce a parse tree to a float, depth-first.

    Walks the tree with an explicit stack: a long chain like ``1+1+...+1``
    builds a left-leaning tree as deep as the chain is long.

    Raises:
        DivideByZero: any '/' node has a zero right operand.
    """
    pending: list[tuple[ParseNode, bool]] = [(node, False)]
    values: list[float] = []
    while pending:
        current, children_done = pending.pop()
        if isinstance(current, Literal):
            values.append(current.value)
        elif not children_done:
            pending.append((current, True))
            if isinstance(current, Negate):
                pending.append((current.operand, False))
            else:
                pending.append((current.right, False))
                pending.append((current.left, False))
        elif isinstance(current, Negate):
            values.append(-values.pop())
        else:
            right = values.pop()
            left = values.pop()
            if current.op == "/" and right == 0:
                raise DivideByZero(current.position)
            values.append(_BINARY_OPS[current.op](left, right))
    return values[0]


def evaluate(text: str) -> float:
    """Parse and reduce ``text``.

    Raises:
        ParseError: malformed syntax (including EmptyExpression, LexError).
        DivideByZero: division by zero anywhere in the tree.
        NumericOverflow: the result is infinite or NaN.
    """
    result = reduce(parse(text))
    if not math.isfinite(result):
        raise NumericOverflow(f"Result out of range: {text}")
    return result
