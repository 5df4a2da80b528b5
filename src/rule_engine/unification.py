"""
rule_engine/unification.py - Matching and Grounding

One-way unification of a pattern against a ground fact, and the
inverse operation of grounding a pattern with a binding.

Key operations:
- match_item(p, f, b): Match one pattern term against one fact term
- match(p, f, b): Match a pattern tuple against a fact tuple
- ground_term(t, b) / ground_tuple(p, b): Replace variables by their values

This is the foundation for pattern matching in the solver.
"""
from __future__ import annotations

from typing import Any

from .errors import UnboundVariableError
from .terms import Atom, Binding, Fact, Pattern, TermLike, to_term


def match_item(
    pattern_term: Any,
    fact_term: Any,
    binding: Binding
) -> Binding | None:
    """Match a single pattern term against a fact term.

    Args:
        pattern_term: Atom or variable from the pattern
        fact_term: Atom from the fact
        binding: Current binding

    Returns:
        The binding, possibly extended with a new variable, or None

    Example:
        match_item(Var("x"), Atom("hello"), Binding())
        # {?x: hello}
        match_item(Var("x"), Atom("hello"), Binding({Var("x"): Atom("world")}))
        # None
    """
    pattern_term = to_term(pattern_term)
    fact_term = to_term(fact_term)

    # Bound variables are compared by value, never rebound
    if pattern_term in binding:
        return binding if binding[pattern_term] == fact_term else None

    if not isinstance(pattern_term, Atom):
        return binding.extend(pattern_term, fact_term)

    return binding if pattern_term == fact_term else None


def match(
    pattern: Pattern,
    fact: Fact,
    binding: Binding | None = None
) -> Binding | None:
    """Match a pattern tuple against a fact tuple.

    Arity mismatch is an ordinary failure, not an error.

    Args:
        pattern: Pattern tuple (may contain variables)
        fact: Ground fact tuple
        binding: Initial binding (default: empty)

    Returns:
        Enriched binding, or None if the match fails
    """
    if binding is None:
        binding = Binding()

    if len(pattern) != len(fact):
        return None

    for pattern_term, fact_term in zip(pattern, fact):
        if isinstance(pattern_term, tuple):
            return None
        binding = match_item(pattern_term, fact_term, binding)
        if binding is None:
            return None

    return binding


def ground_term(term: Any, binding: Binding) -> Atom:
    """Replace a variable by its bound value.

    Raises:
        UnboundVariableError: If term is a variable without a binding
    """
    term: TermLike = to_term(term)
    if isinstance(term, Atom):
        return term
    if term in binding:
        return binding[term]
    raise UnboundVariableError(term)


def ground_tuple(pattern: Pattern, binding: Binding) -> tuple:
    """Ground every element of a pattern.

    Nested tuples (guard expressions) are grounded recursively.

    Raises:
        UnboundVariableError: If any element references an unbound variable
    """
    return tuple(
        ground_tuple(item, binding) if isinstance(item, tuple) else ground_term(item, binding)
        for item in pattern
    )
