# -------------------------------------
# calcsheet
# -------------------------------------
"""
Live calculator sheets in plain text.

Lines declare variables (`rate = 0.07`), functions (`f(x, n) = x * n`)
or ask for a value (`f(100, rate) =>`); a pass evaluates the document top
to bottom and writes each result after its `=>` marker.

Imports are lazy so `python -m calcsheet.<module>` runs cleanly.
Use: from calcsheet import Engine, evaluate_text, etc.
"""

__all__ = [
    # evaluator
    "ERROR",
    "ExpressionEvaluator",
    "evaluate",
    "stringify",
    # scope
    "Scope",
    "GlobalScope",
    "FunctionDefinition",
    # lines
    "MARKER",
    "classify",
    # sheet
    "PassResult",
    "evaluate_lines",
    "evaluate_text",
    # rendering
    "TextRewrite",
    "Overlay",
    # host
    "TextBuffer",
    "Scheduler",
    "Engine",
    "SheetFile",
    # definitions + settings
    "load_definitions",
    "load_settings",
    "Settings",
]

# Lazy import mapping: attribute -> (module, name)
_LAZY_IMPORTS = {
    "ERROR": (".evaluator", "ERROR"),
    "ExpressionEvaluator": (".evaluator", "ExpressionEvaluator"),
    "evaluate": (".evaluator", "evaluate"),
    "stringify": (".evaluator", "stringify"),
    "Scope": (".scope", "Scope"),
    "GlobalScope": (".scope", "GlobalScope"),
    "FunctionDefinition": (".scope", "FunctionDefinition"),
    "MARKER": (".lines", "MARKER"),
    "classify": (".lines", "classify"),
    "PassResult": (".sheet", "PassResult"),
    "evaluate_lines": (".sheet", "evaluate_lines"),
    "evaluate_text": (".sheet", "evaluate_text"),
    "TextRewrite": (".render", "TextRewrite"),
    "Overlay": (".render", "Overlay"),
    "TextBuffer": (".buffer", "TextBuffer"),
    "Scheduler": (".scheduler", "Scheduler"),
    "Engine": (".engine", "Engine"),
    "SheetFile": (".watch", "SheetFile"),
    "load_definitions": (".definitions", "load_definitions"),
    "load_settings": (".config", "load_settings"),
    "Settings": (".config", "Settings"),
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        module_name, attr_name = _LAZY_IMPORTS[name]
        from importlib import import_module
        module = import_module(module_name, __package__)
        return getattr(module, attr_name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
