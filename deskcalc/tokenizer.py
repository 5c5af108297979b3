"""Lexer for calculator expressions.

Turns text like ``"(2+3.5)*-4"`` into Token records. Sign is never folded
into a number here: a leading '-' is always a MINUS token and the parser's
unary rule decides what it means.
"""

from __future__ import annotations

from deskcalc.errors import LexError
from deskcalc.models import Token, TokenKind

_SINGLE_CHAR: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
}

_DIGITS = "0123456789"


def _scan_number(text: str, start: int) -> int:
    """Return the index one past the number literal beginning at ``start``.

    A literal is a run of digits with at most one decimal point, optionally
    followed by an exponent (``e``, optional sign, digits) so that formatted
    results such as ``1e+21`` lex back into a single number.
    """
    i = start
    seen_dot = False
    while i < len(text) and (text[i] in _DIGITS or (text[i] == "." and not seen_dot)):
        if text[i] == ".":
            seen_dot = True
        i += 1

    if i < len(text) and text[i] in "eE":
        j = i + 1
        if j < len(text) and text[j] in "+-":
            j += 1
        if j < len(text) and text[j] in _DIGITS:
            while j < len(text) and text[j] in _DIGITS:
                j += 1
            i = j
    return i


def tokenize(text: str) -> list[Token]:
    """Split an expression into tokens.

    Raises:
        LexError: on any character that is not a digit, '.', whitespace,
            or one of ``+ - * / ( )``.
    """
    tokens: list[Token] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if ch in _DIGITS or ch == ".":
            end = _scan_number(text, i)
            tokens.append(Token(TokenKind.NUMBER, text[i:end], i))
            i = end
            continue
        kind = _SINGLE_CHAR.get(ch)
        if kind is None:
            raise LexError(f"Unexpected character {ch!r}", i)
        tokens.append(Token(kind, ch, i))
        i += 1
    return tokens
