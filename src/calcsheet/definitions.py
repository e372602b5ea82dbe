# -------------------------------------
# global definitions loader
# -------------------------------------
"""
Load the definitions file into the seed scope shared by every pass.

The file uses sheet syntax. Assignments and function definitions are
kept; everything else, and every line that fails to parse or evaluate,
is skipped without stopping the load.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .evaluator import ERROR, default_evaluator, parses
from .lines import Assign, Define, classify
from .scope import EMPTY, GlobalScope, Scope

__all__ = ["DEFAULT_PATH", "parse_definitions", "load_definitions", "clear_cache"]

logger = logging.getLogger(__name__)

DEFAULT_PATH = "variables.md"

# Module-level cache: resolved path -> seed
_DEFINITIONS_CACHE: dict[str, GlobalScope] = {}


def parse_definitions(lines: Iterable[str], evaluator=None) -> GlobalScope:
    """Build a seed scope from definition lines."""
    ev = evaluator or default_evaluator()
    scope = Scope()
    for lno, text in enumerate(lines, 1):
        line = classify(text)
        if isinstance(line, Define):
            if not parses(line.function.body):
                logger.debug(f"definitions line {lno}: cannot parse {line.function.body!r}, skipped")
                continue
            scope.functions[line.function.name] = line.function
        elif isinstance(line, Assign):
            value = ev.evaluate(line.expr, scope)
            if value is ERROR:
                logger.debug(f"definitions line {lno}: {line.name} = {line.expr!r} failed, skipped")
                continue
            scope.variables[line.name] = value
    return scope.freeze()


def load_definitions(path: str | Path = DEFAULT_PATH, evaluator=None) -> GlobalScope:
    """
    Load a definitions file, once per path.

    Args:
        path: definitions file; a missing or unreadable file gives the empty seed
        evaluator: evaluator for assignment lines (default evaluator if None)

    Returns:
        The frozen seed scope
    """
    path = Path(path)
    key = str(path.resolve())

    if key in _DEFINITIONS_CACHE:
        return _DEFINITIONS_CACHE[key]

    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.debug(f"no definitions file at {path}")
        seed = EMPTY
    except OSError as e:
        logger.debug(f"cannot read definitions file {path}: {e}")
        seed = EMPTY
    else:
        seed = parse_definitions(text.splitlines(), evaluator)
        logger.debug(f"loaded {len(seed.variables)} variables, {len(seed.functions)} functions from {path}")

    _DEFINITIONS_CACHE[key] = seed
    return seed


def clear_cache() -> None:
    """Clear the definitions cache."""
    _DEFINITIONS_CACHE.clear()
