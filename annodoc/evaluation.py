"""
Execution of `@eval` section snippets.

Snippets are Python code written inside annotation comments. They run
with a restricted set of builtins and see only the names passed in by
the caller, but they are still trusted project code: the restriction
keeps accidental name clashes out, it is not a security boundary.
"""

import builtins
from typing import Any, Dict, Optional

from .exceptions import EvaluationError

SAFE_BUILTIN_NAMES = [
    "abs", "all", "any", "bool", "dict", "enumerate", "filter", "float",
    "format", "int", "isinstance", "len", "list", "map", "max", "min",
    "range", "repr", "reversed", "round", "set", "sorted", "str", "sum",
    "tuple", "zip",
]

SAFE_BUILTINS = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}

# Name holding the value of a snippet written as statements
RESULT_NAME = "result"


def evaluate_snippet(source: str, names: Optional[Dict[str, Any]] = None) -> Any:
    """Evaluate snippet and return its value.

    Snippet is first compiled as a single expression. If it is not one,
    it is executed as statements and the value bound to `result` is
    returned.

    Raises:
        EvaluationError: If snippet can't be compiled or raises
    """
    namespace = {"__builtins__": SAFE_BUILTINS}
    namespace.update(names or {})

    try:
        code = compile(source, "<annodoc-eval>", "eval")
        is_expression = True
    except SyntaxError:
        try:
            code = compile(source, "<annodoc-eval>", "exec")
            is_expression = False
        except SyntaxError as e:
            raise EvaluationError(f"Parsing Python code gave the following error: {e}") from e

    try:
        if is_expression:
            return eval(code, namespace)
        exec(code, namespace)
        return namespace.get(RESULT_NAME)
    except Exception as e:
        raise EvaluationError(
            f"Executing Python code gave the following error: {type(e).__name__}: {e}"
        ) from e
