# -------------------------------------
# rendering strategies
# -------------------------------------
"""
Turn a pass result into a visible change.

TextRewrite edits the document itself, touching only lines whose
canonical text differs, in one edit, with the caret put back where it
was. Overlay leaves the text alone and swaps in a complete new set of
result annotations and name highlights on every pass.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal

from .lines import MARKER, find_marker
from .scope import Scope
from .sheet import PassResult

__all__ = [
    "LineEdit",
    "Annotation",
    "Highlight",
    "TextRewrite",
    "Overlay",
    "STRATEGIES",
    "diff_lines",
    "annotate",
    "highlight",
    "make_strategy",
]

logger = logging.getLogger(__name__)


# ============================================================
# Text rewrite
# ============================================================

@dataclass(frozen=True)
class LineEdit:
    line: int
    old: str
    new: str


def diff_lines(current: list[str], canonical: list[str]) -> list[LineEdit]:
    if len(current) != len(canonical):
        raise ValueError(f"line count mismatch: {len(current)} != {len(canonical)}")
    return [LineEdit(i, a, b) for i, (a, b) in enumerate(zip(current, canonical)) if a != b]


class TextRewrite:
    name = "rewrite"

    def apply(self, buffer, result: PassResult) -> list[LineEdit]:
        edits = diff_lines(buffer.lines(), result.lines)
        if not edits:
            return edits
        line, ch = buffer.caret
        buffer.replace_lines(edits)
        buffer.set_caret(line, min(ch, len(buffer.line(line))))
        logger.debug(f"rewrote lines {[e.line for e in edits]}")
        return edits


# ============================================================
# Overlay
# ============================================================

@dataclass(frozen=True)
class Annotation:
    line: int
    ch: int
    text: str


HighlightKind = Literal["variable", "function"]


@dataclass(frozen=True)
class Highlight:
    line: int
    start: int
    end: int
    name: str
    kind: HighlightKind


def annotate(lines: list[str], results: dict[int, str]) -> list[Annotation]:
    """One annotation per result, right after the marker or at end of content."""
    out = []
    for idx in sorted(results):
        text = lines[idx]
        pos = find_marker(text)
        ch = pos + len(MARKER) if pos != -1 else len(text.rstrip())
        out.append(Annotation(idx, ch, results[idx]))
    return out


def highlight(lines: list[str], scope: Scope) -> list[Highlight]:
    """Every case-sensitive whole-word occurrence of every known name."""
    names = scope.names()
    if not names:
        return []
    rx = re.compile(r"\b(?:" + "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True)) + r")\b")
    out = []
    for idx, text in enumerate(lines):
        for m in rx.finditer(text):
            name = m.group()
            kind = "variable" if name in scope.variables else "function"
            out.append(Highlight(idx, m.start(), m.end(), name, kind))
    return out


class Overlay:
    name = "overlay"

    def __init__(self):
        self.annotations: tuple[Annotation, ...] = ()
        self.highlights: tuple[Highlight, ...] = ()

    def apply(self, buffer, result: PassResult) -> set[int]:
        """Replace both sets; return the lines whose annotation changed."""
        lines = buffer.lines()
        annotations = tuple(annotate(lines, result.results))
        highlights = tuple(highlight(lines, result.scope))
        before = {a.line: a for a in self.annotations}
        after = {a.line: a for a in annotations}
        changed = {i for i in before.keys() | after.keys() if before.get(i) != after.get(i)}
        self.annotations, self.highlights = annotations, highlights
        return changed

    def clear(self) -> None:
        self.annotations, self.highlights = (), ()


STRATEGIES = {
    "rewrite": TextRewrite,
    "overlay": Overlay,
}


def make_strategy(name: str):
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"unknown rendering strategy {name!r}, expected one of {sorted(STRATEGIES)}") from None
