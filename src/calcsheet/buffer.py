# -------------------------------------
# in-memory text buffer
# -------------------------------------
"""
A minimal editor document: lines, a caret and change listeners.

User edits (set_text, insert) and engine edits (replace_lines) both
notify listeners once per edit, after the text and caret are updated.
"""
from __future__ import annotations

from typing import Callable

from .sheet import split_text

Listener = Callable[["TextBuffer"], None]


class TextBuffer:

    def __init__(self, text: str = ""):
        self._lines, self.newline = split_text(text)
        self._caret = (0, 0)
        self._listeners: list[Listener] = []
        self.edits = 0

    @property
    def text(self) -> str:
        return self.newline.join(self._lines)

    def lines(self) -> list[str]:
        return list(self._lines)

    def line(self, n: int) -> str:
        return self._lines[n]

    @property
    def caret(self) -> tuple[int, int]:
        return self._caret

    def set_caret(self, line: int, ch: int) -> None:
        """Move the caret, clamped into the document."""
        line = max(0, min(line, len(self._lines) - 1))
        ch = max(0, min(ch, len(self._lines[line])))
        self._caret = (line, ch)

    # -------------------------------------
    # edits
    # -------------------------------------

    def set_text(self, text: str, caret: tuple[int, int] | None = None) -> None:
        """Replace the whole document (a user edit)."""
        self._lines, self.newline = split_text(text)
        line, ch = caret if caret is not None else self._caret
        self.set_caret(line, ch)
        self._changed()

    def insert(self, text: str) -> None:
        """Type `text` at the caret (a user edit)."""
        line, ch = self._caret
        current = self._lines[line]
        head, tail = current[:ch], current[ch:]
        pieces = (head + text).split("\n")
        self._lines[line:line + 1] = pieces[:-1] + [pieces[-1] + tail]
        self._caret = (line + len(pieces) - 1, len(pieces[-1]))
        self._changed()

    def replace_lines(self, edits) -> None:
        """Apply several whole-line replacements as one edit."""
        edits = list(edits)
        if not edits:
            return
        for edit in edits:
            if self._lines[edit.line] != edit.old:
                raise ValueError(f"line {edit.line} changed under the edit: {self._lines[edit.line]!r}")
        for edit in edits:
            self._lines[edit.line] = edit.new
        self._changed()

    # -------------------------------------
    # listeners
    # -------------------------------------

    def on_change(self, callback: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _changed(self) -> None:
        self.edits += 1
        for callback in list(self._listeners):
            callback(self)
