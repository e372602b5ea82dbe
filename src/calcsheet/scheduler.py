# -------------------------------------
# change scheduler
# -------------------------------------
"""
Decide when a pass runs.

States:
  IDLE        nothing pending
  SCHEDULED   a pass is due at `deadline`
  EVALUATING  a pass is running; notifications are dropped

Bursts of notifications collapse into one pass: each notification moves
the deadline to now + delay. A notification for a freshly typed marker
moves it to now. Time comes from an injected clock and pending passes
only run from tick()/flush()/run_now(), so the host's event loop owns
the timing.
"""
from __future__ import annotations

import enum
import logging
import time
from typing import Callable

from .lines import MARKER

__all__ = ["State", "Scheduler", "DEFAULT_DELAY", "caret_after_marker"]

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 0.3


class State(enum.Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    EVALUATING = "evaluating"


def caret_after_marker(line: str, ch: int) -> bool:
    """True when the caret sits right after an eval marker."""
    return ch >= len(MARKER) and line[:ch].endswith(MARKER)


class Scheduler:

    def __init__(self, run_pass: Callable[[], None], delay: float = DEFAULT_DELAY,
                 clock: Callable[[], float] = time.monotonic):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self._run_pass = run_pass
        self.delay = delay
        self.clock = clock
        self._state = State.IDLE
        self._deadline: float | None = None
        self.runs = 0
        self.dropped = 0

    @property
    def state(self) -> State:
        return self._state

    @property
    def is_evaluating(self) -> bool:
        return self._state is State.EVALUATING

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def notify(self, fast: bool = False) -> bool:
        """
        A document changed. Returns False when the notification was
        dropped because a pass is running.
        """
        if self._state is State.EVALUATING:
            self.dropped += 1
            return False
        self._deadline = self.clock() + (0.0 if fast else self.delay)
        self._state = State.SCHEDULED
        return True

    def cancel(self) -> None:
        """Drop the pending pass. A running pass is not affected."""
        if self._state is State.SCHEDULED:
            self._state = State.IDLE
            self._deadline = None

    def tick(self) -> bool:
        """Run the pending pass if it is due. Returns True if a pass ran."""
        if self._state is not State.SCHEDULED or self.clock() < self._deadline:
            return False
        self._run()
        return True

    def flush(self) -> bool:
        """Run the pending pass now, whether due or not."""
        if self._state is not State.SCHEDULED:
            return False
        self._run()
        return True

    def run_now(self) -> bool:
        """Cancel any pending pass and run one immediately."""
        if self._state is State.EVALUATING:
            self.dropped += 1
            return False
        self._run()
        return True

    def _run(self) -> None:
        self._deadline = None
        self._state = State.EVALUATING
        try:
            self._run_pass()
        finally:
            self._state = State.IDLE
            self.runs += 1
