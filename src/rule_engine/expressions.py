"""
rule_engine/expressions.py - Guard Expression Evaluation

Guards such as ("if", (">", "?y", "?x")) evaluate a small, closed
expression language over grounded atoms:

    - Relational: >, <, >=, <=, =, ==, !=
    - Arithmetic: +, -, *, /, mod, abs, min, max
    - Boolean: and, or, not

Expressions are nested tuples whose first element names the operator.
There is no general-purpose evaluation behind this module.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable
from typing import Any

from .errors import ExpressionError
from .terms import Atom, Var, format_tuple

logger = logging.getLogger(__name__)


def _variadic(fn: Callable[[Any, Any], Any]) -> Callable[..., Any]:
    def apply(*args):
        result = args[0]
        for arg in args[1:]:
            result = fn(result, arg)
        return result

    return apply


def _negate_or_subtract(*args):
    if len(args) == 1:
        return -args[0]
    return _variadic(operator.sub)(*args)


# operator -> (function, min arity, max arity or None for unbounded)
OPERATORS: dict[str, tuple[Callable[..., Any], int, int | None]] = {
    ">": (operator.gt, 2, 2),
    "<": (operator.lt, 2, 2),
    ">=": (operator.ge, 2, 2),
    "<=": (operator.le, 2, 2),
    "=": (operator.eq, 2, 2),
    "==": (operator.eq, 2, 2),
    "!=": (operator.ne, 2, 2),
    "+": (_variadic(operator.add), 1, None),
    "-": (_negate_or_subtract, 1, None),
    "*": (_variadic(operator.mul), 1, None),
    "/": (_variadic(operator.truediv), 2, None),
    "mod": (operator.mod, 2, 2),
    "abs": (abs, 1, 1),
    "min": (min, 1, None),
    "max": (max, 1, None),
    "not": (operator.not_, 1, 1),
}

# Short-circuiting operators are evaluated lazily
BOOLEAN_OPERATORS = frozenset({"and", "or"})


def evaluate(expr: Any) -> Any:
    """Evaluate a grounded expression.

    Args:
        expr: An Atom, or a tuple (operator, operand, ...)

    Returns:
        The plain Python value of the expression

    Raises:
        ExpressionError: On unknown operators, wrong operand counts,
            unbound variables left in the expression, or type errors
    """
    if isinstance(expr, Atom):
        return expr.value
    if isinstance(expr, Var):
        raise ExpressionError(f"Expression is not ground: {expr!r}")
    if not isinstance(expr, tuple) or not expr:
        raise ExpressionError(f"Malformed expression: {expr!r}")

    head, *operands = expr
    name = head.value if isinstance(head, Atom) else head
    if not isinstance(name, str):
        raise ExpressionError(f"Operator must be a symbol: {format_tuple(expr)}")

    if name in BOOLEAN_OPERATORS:
        return _evaluate_boolean(name, operands)

    if name not in OPERATORS:
        raise ExpressionError(f"Unknown operator '{name}' in {format_tuple(expr)}")

    fn, min_args, max_args = OPERATORS[name]
    if len(operands) < min_args or (max_args is not None and len(operands) > max_args):
        raise ExpressionError(
            f"Operator '{name}' got {len(operands)} operands in {format_tuple(expr)}"
        )

    values = [evaluate(operand) for operand in operands]
    try:
        return fn(*values)
    except (TypeError, ZeroDivisionError) as e:
        raise ExpressionError(f"Cannot evaluate {format_tuple(expr)}: {e}") from e


def _evaluate_boolean(name: str, operands: list[Any]) -> bool:
    if name == "and":
        return all(evaluate(operand) for operand in operands)
    return any(evaluate(operand) for operand in operands)


def is_true(expr: Any) -> bool:
    """Evaluate an expression and coerce the result to a boolean."""
    result = bool(evaluate(expr))
    logger.debug(f"Guard {expr!r} evaluated to {result}")
    return result
