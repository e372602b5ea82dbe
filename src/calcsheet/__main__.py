# -------------------------------------
# calcsheet CLI entry point
# -------------------------------------
"""
CLI entry point.

Usage:
    python -m calcsheet budget.calc             # print the evaluated sheet
    python -m calcsheet budget.calc --in-place  # rewrite the file
    python -m calcsheet budget.calc --vars      # list variables
    python -m calcsheet budget.calc --watch     # keep the file evaluated
    python -m calcsheet -e "sqrt(2) * rate"     # one expression
"""
import argparse
import logging
import sys
from pathlib import Path

from .buffer import TextBuffer
from .config import SETTINGS_FILE, ConfigError, Settings, find_settings, load_settings
from .definitions import DEFAULT_PATH, load_definitions
from .engine import Engine
from .evaluator import ERROR, ExpressionEvaluator
from .scope import Scope
from .watch import SheetFile


def _settings(args) -> Settings:
    base = Path(args.file).parent if args.file and args.file != "-" else Path(".")
    config = args.config or find_settings(base)
    if config is None:
        settings = Settings(definitions=base / DEFAULT_PATH)
    else:
        settings = load_settings(config)
    return settings.merged(
        definitions=args.definitions,
        delay=args.delay,
        strategy="overlay" if args.overlay else None,
    )


def _read_sheet(name: str) -> str:
    if name == "-":
        return sys.stdin.read()
    with open(name, "r", encoding="utf-8", newline="") as f:
        return f.read()


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        prog="calcsheet",
        description="Evaluate a calculator sheet: 'name = expr', 'f(x) = expr' and 'expr =>' lines.",
    )
    ap.add_argument("file", nargs="?", help="Sheet file, or - for stdin.")
    ap.add_argument("--expr", "-e", help="Evaluate one expression against the definitions and exit.")
    ap.add_argument("--definitions", "-d", help=f"Definitions file (default: {DEFAULT_PATH} next to the sheet).")
    ap.add_argument("--config", "-c", help=f"Settings file (default: {SETTINGS_FILE} next to the sheet, if present).")
    ap.add_argument("--in-place", "-i", action="store_true", help="Write the evaluated sheet back to FILE.")
    ap.add_argument("--vars", action="store_true", help="List the variables defined after the last line.")
    ap.add_argument("--overlay", action="store_true", help="Print results as line:column annotations instead of rewriting.")
    ap.add_argument("--watch", "-w", action="store_true", help="Keep FILE evaluated while it is edited.")
    ap.add_argument("--delay", type=float, help="Debounce delay in seconds for --watch.")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = _settings(args)
    except (ConfigError, OSError) as e:
        print(f"calcsheet error: {e}", file=sys.stderr)
        return 2

    if args.expr is not None:
        evaluator = ExpressionEvaluator()
        seed = load_definitions(settings.definitions, evaluator)
        value = evaluator.evaluate(args.expr, Scope.from_seed(seed))
        print(evaluator.format(value))
        return 1 if value is ERROR else 0

    if not args.file:
        ap.error("FILE is required unless --expr is used.")

    if args.watch:
        if args.file == "-":
            ap.error("--watch needs a file, not stdin.")
        if settings.strategy != "rewrite":
            ap.error("--watch only works with the rewrite strategy.")
        try:
            SheetFile(args.file, settings).run()
        except OSError as e:
            print(f"calcsheet error: {e}", file=sys.stderr)
            return 2
        return 0

    if args.in_place and args.file == "-":
        ap.error("--in-place needs a file, not stdin.")

    try:
        text = _read_sheet(args.file)
    except OSError as e:
        print(f"calcsheet error: {e}", file=sys.stderr)
        return 2

    buffer = TextBuffer(text)
    engine = Engine.from_settings(buffer, settings)
    engine.evaluate()

    if args.vars:
        print(engine.variables_listing())
        return 0

    if settings.strategy == "overlay":
        for a in engine.strategy.annotations:
            print(f"{a.line + 1}:{a.ch}: {a.text}")
        return 0

    if args.in_place:
        if buffer.text != text:
            with open(args.file, "w", encoding="utf-8", newline="") as f:
                f.write(buffer.text)
        return 0

    out = buffer.text
    sys.stdout.write(out if out.endswith("\n") else out + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
