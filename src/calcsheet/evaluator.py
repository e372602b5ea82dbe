# -------------------------------------
# expression evaluator
# -------------------------------------
"""
Evaluate one expression string against a scope.

Failures never escape: malformed syntax, unknown names, type errors,
arithmetic errors and runaway recursion all come back as ERROR, which
prints as "Error".

User functions are bound when they are called: the body sees the
variables of the scope the caller was evaluated in, overlaid with the
call's arguments.
"""
from __future__ import annotations

import ast
import logging
import re
from typing import Any

import numpy as np
from simpleeval import EvalWithCompoundTypes

from . import eval_state as state
from .lines import tokenize
from .scope import FunctionDefinition

__all__ = [
    "ERROR",
    "ErrorMarker",
    "CallDepthError",
    "ExpressionEvaluator",
    "evaluate",
    "stringify",
    "format_value",
    "parses",
]

logger = logging.getLogger(__name__)

MAX_CALL_DEPTH = 32
PRECISION = 14


# ============================================================
# Values
# ============================================================

class ErrorMarker:
    """The value of an expression that failed. There is exactly one."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ERROR"

    def __str__(self):
        return "Error"


ERROR = ErrorMarker()


class CallDepthError(RuntimeError):
    pass


# ============================================================
# Formatting
# ============================================================

_exp_re = re.compile(r"e([+-])0*(\d)")

# Line breaks a value must not carry into its line, as escapes
_LINE_BREAKS = {ord(c): repr(c)[1:-1] for c in "\n\r\v\f\x1c\x1d\x1e\x85\u2028\u2029"}


def _format_big_int(n: int) -> str:
    """Scientific notation for ints too long for str(); no digit string is built."""
    sign = "-" if n < 0 else ""
    n = abs(n)
    exp = int((n.bit_length() - 1) * 0.30102999566398120)
    while 10 ** exp > n:
        exp -= 1
    while 10 ** (exp + 1) <= n:
        exp += 1
    shift = exp - PRECISION + 1
    lead = (n + 5 * 10 ** (shift - 1)) // 10 ** shift
    if lead >= 10 ** PRECISION:
        lead //= 10
        exp += 1
    digits = str(lead).rstrip("0")
    mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
    return f"{sign}{mantissa}e+{exp}"


def _format_real(x) -> str:
    try:
        s = f"{x:.{PRECISION}g}"
    except OverflowError:
        try:
            return str(x)
        except ValueError:
            return _format_big_int(int(x))
    s = _exp_re.sub(r"e\1\2", s)
    return "0" if s == "-0" else s


def _format_complex(z: complex) -> str:
    re_, im = z.real, z.imag
    if im == 0:
        return _format_real(re_)
    if im == 1:
        ims = "i"
    elif im == -1:
        ims = "-i"
    else:
        ims = f"{_format_real(im)}i"
    if re_ == 0:
        return ims
    if ims.startswith("-"):
        return f"{_format_real(re_)} - {ims[1:]}"
    return f"{_format_real(re_)} + {ims}"


def format_value(value: Any) -> str:
    """
    Render a value the way it appears after the marker.

    Numbers use 14 significant digits (0.1 + 0.2 -> 0.3, 3.0 -> 3),
    complex numbers print as a + bi, arrays as nested [a, b] lists.
    The result is always one line: line breaks in text come out as
    escapes (\\n).
    """
    if value is ERROR:
        return "Error"
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (int, float, np.integer, np.floating)):
        return _format_real(value)
    if isinstance(value, (complex, np.complexfloating)):
        return _format_complex(complex(value))
    if isinstance(value, np.ndarray):
        if value.ndim == 0:
            return format_value(value.item())
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value).translate(_LINE_BREAKS)


# ============================================================
# Parsing
# ============================================================

def _normalize(expr: str) -> str:
    """'^' is exponentiation in sheets; string literals are left alone."""
    parts = []
    last = 0
    for tok in tokenize(expr):
        if tok.kind == "OP" and tok.text == "^":
            parts.append(expr[last:tok.start])
            parts.append("**")
            last = tok.end
    parts.append(expr[last:])
    return "".join(parts).strip()


def parses(expr: str) -> bool:
    """True when expr is syntactically a single expression."""
    try:
        ast.parse(_normalize(expr), mode="eval")
    except SyntaxError:
        return False
    return True


class _SheetEval(EvalWithCompoundTypes):
    """simpleeval with list literals building numpy arrays."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.nodes[ast.List] = self._eval_vector

    def _eval_vector(self, node):
        return np.array([self._eval(x) for x in node.elts])


# ============================================================
# Evaluator
# ============================================================

class ExpressionEvaluator:
    """
    The expression algebra behind a sheet.

    A pass only needs `evaluate(expr, scope)` and `format(value)`, so any
    object with those two methods can stand in for this one.
    """

    def __init__(self, names=None, functions=None, operators=None, max_depth: int = MAX_CALL_DEPTH):
        self.names = state.NAMES if names is None else names
        self.functions = state.FUNCS if functions is None else functions
        self.operators = state.ALLOWED_OPS if operators is None else operators
        self.max_depth = max_depth

    def evaluate(self, expr: str, scope) -> Any:
        """Evaluate expr against scope; ERROR on any failure."""
        try:
            with np.errstate(divide="raise"):
                return self._eval(expr, {**self.names, **scope.variables}, scope, 0)
        except Exception as e:
            logger.debug(f"{expr!r} -> Error ({type(e).__name__}: {e})")
            return ERROR

    def format(self, value: Any) -> str:
        return format_value(value)

    def _eval(self, expr: str, names: dict, scope, depth: int) -> Any:
        functions = dict(self.functions)
        for name, fn in scope.functions.items():
            functions[name] = self._bind(fn, scope, depth)
        se = _SheetEval(names=names, functions=functions, operators=self.operators)
        return se.eval(_normalize(expr))

    def _bind(self, fn: FunctionDefinition, scope, depth: int):
        def call(*args):
            if depth >= self.max_depth:
                raise CallDepthError(f"{fn.name}() nested deeper than {self.max_depth} calls")
            if len(args) != len(fn.params):
                raise TypeError(f"{fn.signature()} takes {len(fn.params)} arguments, got {len(args)}")
            names = {**self.names, **scope.variables, **dict(zip(fn.params, args))}
            return self._eval(fn.body, names, scope, depth + 1)
        call.__name__ = fn.name
        return call


_DEFAULT = ExpressionEvaluator()


def default_evaluator() -> ExpressionEvaluator:
    return _DEFAULT


def evaluate(expr: str, scope) -> Any:
    """Evaluate with the shared default evaluator."""
    return _DEFAULT.evaluate(expr, scope)


def stringify(value: Any) -> str:
    return _DEFAULT.format(value)
