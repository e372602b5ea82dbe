# -------------------------------------
# sheet engine
# -------------------------------------
"""
One live sheet: a buffer, a seed scope, a scheduler and a rendering
strategy, wired together.

Buffer changes are scheduled (debounced, or immediate right after a
typed marker). A pass re-reads the whole buffer, and its rewrite edits
happen inside the scheduler's EVALUATING state, so the notifications
they cause are dropped instead of scheduling another pass.
"""
from __future__ import annotations

import logging
import time
from typing import Callable

from .buffer import TextBuffer
from .definitions import load_definitions
from .evaluator import ExpressionEvaluator
from .render import make_strategy
from .scheduler import DEFAULT_DELAY, Scheduler, caret_after_marker
from .scope import EMPTY, GlobalScope
from .sheet import PassResult, evaluate_lines

__all__ = ["Engine", "NO_VARIABLES"]

logger = logging.getLogger(__name__)

NO_VARIABLES = "No variables defined"


class Engine:

    def __init__(
        self,
        buffer: TextBuffer,
        seed: GlobalScope = EMPTY,
        strategy="rewrite",
        delay: float = DEFAULT_DELAY,
        clock: Callable[[], float] = time.monotonic,
        evaluator=None,
    ):
        self.buffer = buffer
        self.seed = seed
        self.evaluator = evaluator or ExpressionEvaluator()
        self.strategy = make_strategy(strategy) if isinstance(strategy, str) else strategy
        self.scheduler = Scheduler(self._run_pass, delay=delay, clock=clock)
        self.last: PassResult | None = None
        self._unsubscribe = buffer.on_change(self._on_change)

    @classmethod
    def from_settings(cls, buffer: TextBuffer, settings, clock: Callable[[], float] = time.monotonic) -> "Engine":
        """Build an engine from Settings, loading the definitions file."""
        evaluator = ExpressionEvaluator()
        seed = load_definitions(settings.definitions, evaluator)
        return cls(buffer, seed, settings.strategy, settings.delay, clock, evaluator)

    # -------------------------------------
    # triggers
    # -------------------------------------

    def evaluate(self) -> PassResult | None:
        """Evaluate now, cancelling any pending pass."""
        self.scheduler.run_now()
        return self.last

    def tick(self) -> bool:
        return self.scheduler.tick()

    def flush(self) -> bool:
        return self.scheduler.flush()

    def _on_change(self, buffer: TextBuffer) -> None:
        line, ch = buffer.caret
        fast = caret_after_marker(buffer.line(line), ch)
        if not self.scheduler.notify(fast=fast):
            logger.debug("change during evaluation ignored")

    def _run_pass(self) -> None:
        result = evaluate_lines(self.buffer.lines(), self.seed, self.evaluator)
        self.strategy.apply(self.buffer, result)
        self.last = result

    # -------------------------------------
    # inspection
    # -------------------------------------

    def variables_listing(self) -> str:
        """`name = value` per variable of the last pass, one per line."""
        if self.last is None or not self.last.scope.variables:
            return NO_VARIABLES
        return "\n".join(f"{k} = {self.evaluator.format(v)}" for k, v in self.last.scope.variables.items())

    def known_names(self) -> list[str]:
        if self.last is None:
            return list(dict.fromkeys([*self.seed.variables, *self.seed.functions]))
        return self.last.scope.names()

    # -------------------------------------
    # lifecycle
    # -------------------------------------

    def reset(self, seed: GlobalScope | None = None) -> None:
        """Cancel pending work and forget the last pass; optionally swap the seed."""
        self.scheduler.cancel()
        self.last = None
        if seed is not None:
            self.seed = seed
        if hasattr(self.strategy, "clear"):
            self.strategy.clear()

    def close(self) -> None:
        self.scheduler.cancel()
        self._unsubscribe()
