# -------------------------------------
# document evaluation pass
# -------------------------------------
"""
One top-to-bottom pass over a sheet.

The scope starts as a copy of the seed and accumulates bindings line by
line, so a line only sees what strictly earlier lines (or the seed)
defined. Each marked assignment or eval line is rewritten as

    <expr part> => <result>

and every other line is kept as it is. Running a pass on its own output
gives the same text back.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any

from .evaluator import ERROR, default_evaluator
from .lines import MARKER, Assign, Define, Eval, classify
from .scope import EMPTY, GlobalScope, Scope

__all__ = ["PassResult", "evaluate_lines", "evaluate_text", "split_text"]

logger = logging.getLogger(__name__)

_newline_re = re.compile(r"\r?\n")


@dataclass
class PassResult:
    """
    Output of one pass.

    Attributes:
        lines: canonical text, one entry per input line
        results: rendered result per line index
        scope: bindings after the last line
        values: raw value per line index (same keys as results)
    """
    lines: list[str]
    results: dict[int, str]
    scope: Scope
    values: dict[int, Any] = field(default_factory=dict)

    def text(self, newline: str = "\n") -> str:
        return newline.join(self.lines)

    def changed_lines(self, before: list[str]) -> list[int]:
        """Indices where the canonical text differs from `before`."""
        return [i for i, (a, b) in enumerate(zip(before, self.lines)) if a != b]


def split_text(text: str) -> tuple[list[str], str]:
    """Split a document into lines; also return its line terminator."""
    newline = "\r\n" if "\r\n" in text else "\n"
    return _newline_re.split(text), newline


def evaluate_lines(lines: list[str], seed: GlobalScope | Scope = EMPTY, evaluator=None) -> PassResult:
    """Run one pass over `lines` starting from a copy of `seed`."""
    ev = evaluator or default_evaluator()
    t0 = time.perf_counter()
    scope = Scope.from_seed(seed)
    out: list[str] = []
    results: dict[int, str] = {}
    values: dict[int, Any] = {}

    for idx, text in enumerate(lines):
        line = classify(text)

        if isinstance(line, Define):
            scope.functions[line.function.name] = line.function
            out.append(f"{line.expr_part} {MARKER}" if line.has_marker else text)
            continue

        if isinstance(line, Assign):
            value = ev.evaluate(line.expr, scope)
            scope.variables[line.name] = value
            if not line.has_marker:
                out.append(text)
                continue
        elif isinstance(line, Eval):
            value = ev.evaluate(line.expr, scope)
        else:
            out.append(text)
            continue

        values[idx] = value
        try:
            results[idx] = ev.format(value)
        except Exception as e:
            logger.debug(f"line {idx}: cannot format result ({type(e).__name__}: {e})")
            results[idx] = str(ERROR)
        out.append(f"{line.expr_part} {MARKER} {results[idx]}")

    logger.debug(
        f"pass over {len(lines)} lines: {len(results)} results "
        f"in {(time.perf_counter() - t0) * 1000:.1f} ms"
    )
    return PassResult(out, results, scope, values)


def evaluate_text(text: str, seed: GlobalScope | Scope = EMPTY, evaluator=None) -> tuple[str, PassResult]:
    """Evaluate a whole document; returns (canonical text, pass result)."""
    lines, newline = split_text(text)
    result = evaluate_lines(lines, seed, evaluator)
    return result.text(newline), result
