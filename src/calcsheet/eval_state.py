# -------------------------------------
# expression namespace
# -------------------------------------
"""
Shared state for sheet expressions:
- NAMES: constants visible to every expression
- FUNCS: built-in functions visible to every expression
- ALLOWED_OPS: whitelisted operators for simpleeval

User variables shadow NAMES, user functions shadow FUNCS.
"""
import ast
import math
import operator as op

import numpy as np


# ============================================================
# Operators whitelist for simpleeval
# ============================================================

MAX_POWER = 10_000


def safe_power(a, b):
    """a ** b, refusing integer exponents large enough to stall a pass."""
    if isinstance(a, int) and isinstance(b, int) and abs(b) > MAX_POWER:
        raise ValueError(f"exponent {b} is larger than {MAX_POWER}")
    return op.pow(a, b)


ALLOWED_OPS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.Pow: safe_power,
    ast.USub: op.neg,
    ast.UAdd: op.pos,
    ast.FloorDiv: op.floordiv,
    ast.Mod: op.mod,
    ast.MatMult: op.matmul,
    ast.Eq: op.eq,
    ast.NotEq: op.ne,
    ast.Lt: op.lt,
    ast.LtE: op.le,
    ast.Gt: op.gt,
    ast.GtE: op.ge,
    ast.Not: op.not_,
}


# ============================================================
# Constants for expressions
# ============================================================

NAMES: dict[str, object] = {
    "pi": math.pi,
    "tau": math.tau,
    "e": math.e,
    "inf": float("inf"),
    "nan": float("nan"),
    "i": 1j,
    "j": 1j,
    "true": True,
    "false": False,
}


def set_const(name: str, value: object) -> None:
    """Set a constant in NAMES."""
    NAMES[name.strip()] = value


def get_const(name: str) -> object:
    """Get a constant from NAMES."""
    return NAMES[name.strip()]


# ============================================================
# Helper functions
# ============================================================

def _flatten(args):
    if len(args) == 1:
        return np.asarray(args[0]).ravel()
    return np.asarray(args).ravel()


def sheet_max(*args):
    """max(a, b, ...) or max(vector)."""
    return np.max(_flatten(args))


def sheet_min(*args):
    """min(a, b, ...) or min(vector)."""
    return np.min(_flatten(args))


def sheet_sum(*args):
    return np.sum(_flatten(args))


def sheet_mean(*args):
    return np.mean(_flatten(args))


def sheet_round(x, digits=0):
    """Round half to even, like numpy."""
    return np.round(x, int(digits))


def vec(*args):
    """vec(1, 2, 3) -> [1, 2, 3]"""
    return np.array(args)


def matrix(*rows):
    """matrix([1, 2], [3, 4]) -> [[1, 2], [3, 4]]"""
    return np.array(rows)


def size(x):
    return np.array(np.shape(x))


def zeros(*shape):
    return np.zeros(tuple(int(n) for n in shape))


def ones(*shape):
    return np.ones(tuple(int(n) for n in shape))


def eye(n):
    return np.eye(int(n))


# ============================================================
# Functions registry
# ============================================================

FUNCS: dict[str, object] = {
    # trig
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.emath.arcsin,
    "acos": np.emath.arccos,
    "atan": np.arctan,
    "atan2": np.arctan2,
    # math (complex-aware for negative input)
    "sqrt": np.emath.sqrt,
    "log": np.emath.log,
    "log10": np.emath.log10,
    "log2": np.emath.log2,
    "exp": np.exp,
    "abs": np.abs,
    "floor": np.floor,
    "ceil": np.ceil,
    "round": sheet_round,
    # reductions
    "min": sheet_min,
    "max": sheet_max,
    "sum": sheet_sum,
    "mean": sheet_mean,
    # vectors and matrices
    "vec": vec,
    "matrix": matrix,
    "dot": np.dot,
    "cross": np.cross,
    "det": np.linalg.det,
    "inv": np.linalg.inv,
    "transpose": np.transpose,
    "norm": np.linalg.norm,
    "size": size,
    "zeros": zeros,
    "ones": ones,
    "eye": eye,
}
