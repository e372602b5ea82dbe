# -------------------------------------
# sheet file sync
# -------------------------------------
"""
Keep a sheet file evaluated while it is edited elsewhere.

Each poll reads the file, feeds a changed text into the engine's buffer
as a user edit, lets the scheduler run a due pass and writes the
rewritten text back. The text we wrote becomes the known text, so our
own write is not seen as a new edit.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from .buffer import TextBuffer
from .engine import Engine
from .sheet import split_text

__all__ = ["SheetFile", "edit_caret"]

logger = logging.getLogger(__name__)


def edit_caret(old: list[str], new: list[str]) -> tuple[int, int]:
    """Caret for an external edit: end of the first line that differs."""
    for i, line in enumerate(new):
        if i >= len(old) or old[i] != line:
            return i, len(line)
    last = len(new) - 1
    return last, len(new[last])


class SheetFile:

    def __init__(self, path: str | Path, settings, clock: Callable[[], float] = time.monotonic):
        self.path = Path(path)
        self.settings = settings
        self._known = self._read()
        self.buffer = TextBuffer(self._known)
        self.engine = Engine.from_settings(self.buffer, settings, clock)
        self.writes = 0

    def _read(self) -> str:
        with open(self.path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def _write_back(self) -> None:
        text = self.buffer.text
        if text == self._known:
            return
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        self._known = text
        self.writes += 1
        logger.info(f"updated {self.path}")

    def evaluate(self) -> None:
        self.engine.evaluate()
        self._write_back()

    def poll(self) -> bool:
        """One round: pick up edits, run a due pass, write back. True if a pass ran."""
        text = self._read()
        if text != self._known:
            caret = edit_caret(self.buffer.lines(), split_text(text)[0])
            self._known = text
            self.buffer.set_text(text, caret=caret)
        ran = self.engine.tick()
        if ran:
            self._write_back()
        return ran

    def run(self, sleep: Callable[[float], None] = time.sleep) -> None:
        """Poll until interrupted."""
        self.evaluate()
        logger.info(f"watching {self.path}")
        try:
            while True:
                self.poll()
                sleep(self.settings.interval)
        except KeyboardInterrupt:
            logger.info("stopped")
