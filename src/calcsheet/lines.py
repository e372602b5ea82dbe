# -------------------------------------
# line classifier
# -------------------------------------
"""
Classify one sheet line.

Tokenizer output:
  - Token(kind, text, start, end), kind in NAME, NUMBER, STRING, OP

Rules, tried in order on the text before the eval marker:
  - Define(function)       name(p1, p2, ...) = body
  - Assign(name, expr)     name = expr
  - Eval(expr)             <expr> =>         (marker required)
  - Plain                  anything else, passed through verbatim

Multi-character operators are single tokens, so "a == 1" and "a <= 1"
are never assignments.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Union

from .scope import FunctionDefinition

__all__ = [
    "MARKER",
    "Token",
    "Define",
    "Assign",
    "Eval",
    "Plain",
    "Line",
    "find_marker",
    "split_marker",
    "tokenize",
    "classify",
]

MARKER = "=>"


# ============================================================
# Tokens
# ============================================================

TokenKind = Literal["NAME", "NUMBER", "STRING", "OP"]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    end: int


_token_re = re.compile(
    r"""
    (?P<SPACE>\s+)
  | (?P<NUMBER>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?[jJ]?)
  | (?P<NAME>[^\W\d]\w*)
  | (?P<STRING>"(?:[^"\\]|\\.)*"?|'(?:[^'\\]|\\.)*'?)
  | (?P<OP>=>|==|!=|<=|>=|\*\*|//|.)
    """,
    re.VERBOSE,
)


def tokenize(text: str) -> list[Token]:
    out = []
    for m in _token_re.finditer(text):
        kind = m.lastgroup
        if kind == "SPACE":
            continue
        out.append(Token(kind, m.group(), m.start(), m.end()))
    return out


# ============================================================
# Line variants
# ============================================================

@dataclass(frozen=True)
class Define:
    expr_part: str
    has_marker: bool
    function: FunctionDefinition


@dataclass(frozen=True)
class Assign:
    expr_part: str
    has_marker: bool
    name: str
    expr: str


@dataclass(frozen=True)
class Eval:
    expr_part: str
    has_marker: bool
    expr: str


@dataclass(frozen=True)
class Plain:
    expr_part: str
    has_marker: bool


Line = Union[Define, Assign, Eval, Plain]


# ============================================================
# Classifier
# ============================================================

def find_marker(text: str) -> int:
    """Offset of the first eval marker outside string literals, or -1."""
    for tok in tokenize(text):
        if tok.kind == "OP" and tok.text == MARKER:
            return tok.start
    return -1


def split_marker(text: str) -> tuple[str, bool]:
    """
    Split a line at its first eval marker.

    Returns (expr_part, has_marker); expr_part keeps its indentation and
    drops trailing whitespace.
    """
    idx = find_marker(text)
    if idx == -1:
        return text.rstrip(), False
    return text[:idx].rstrip(), True


def _is(tok: Token, kind: str, text: str | None = None) -> bool:
    return tok.kind == kind and (text is None or tok.text == text)


def _rest(source: str, tok: Token) -> str:
    return source[tok.end:].strip()


def _match_define(source: str, toks: list[Token]) -> FunctionDefinition | None:
    if len(toks) < 4 or not _is(toks[0], "NAME") or not _is(toks[1], "OP", "("):
        return None
    params: list[str] = []
    k = 2
    if _is(toks[k], "OP", ")"):
        k += 1
    else:
        while True:
            if k >= len(toks) or not _is(toks[k], "NAME"):
                return None
            params.append(toks[k].text)
            k += 1
            if k >= len(toks):
                return None
            if _is(toks[k], "OP", ")"):
                k += 1
                break
            if not _is(toks[k], "OP", ","):
                return None
            k += 1
    if k >= len(toks) or not _is(toks[k], "OP", "="):
        return None
    body = _rest(source, toks[k])
    if not body or len(set(params)) != len(params):
        return None
    return FunctionDefinition(toks[0].text, tuple(params), body)


def _match_assign(source: str, toks: list[Token]) -> tuple[str, str] | None:
    if len(toks) < 3 or not _is(toks[0], "NAME") or not _is(toks[1], "OP", "="):
        return None
    expr = _rest(source, toks[1])
    if not expr:
        return None
    return toks[0].text, expr


def classify(text: str) -> Line:
    """Classify one line of a sheet."""
    expr_part, has_marker = split_marker(text)
    source = expr_part.strip()
    toks = tokenize(source)

    fn = _match_define(source, toks)
    if fn is not None:
        return Define(expr_part, has_marker, fn)

    assign = _match_assign(source, toks)
    if assign is not None:
        return Assign(expr_part, has_marker, *assign)

    if has_marker and source:
        return Eval(expr_part, has_marker, source)

    return Plain(expr_part, has_marker)
