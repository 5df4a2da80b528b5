"""
rule_engine/errors.py - Exception taxonomy

Match failures are ordinary control flow (None / empty iterators). The
exceptions below are reserved for malformed rules, expressions and
domain documents.
"""
from __future__ import annotations

from typing import Any


class RuleEngineError(Exception):
    """Base class for all rule engine errors."""


class UnboundVariableError(RuleEngineError):
    """Raised when grounding a variable that has no binding."""

    def __init__(self, variable: Any):
        self.variable = variable
        super().__init__(f"Unbound var: {variable!r}")


class ExpressionError(RuleEngineError):
    """Malformed or ill-typed guard expression."""


class DomainError(RuleEngineError, ValueError):
    """Malformed rule or domain document."""


class BindingError(RuleEngineError, ValueError):
    """Attempt to rebind a variable to a different atom."""
