"""
rule_engine/solver.py - Conjunctive Solver

Depth-first backtracking over a conjunction of patterns. Each pattern
filters or extends the stream of bindings produced by the ones before
it; patterns are tried strictly left to right.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, Sequence
from typing import TYPE_CHECKING

from .resolver import PatternResolver, resolve_pattern
from .terms import Binding, Fact, Pattern

if TYPE_CHECKING:
    from .domain import Rule


def solve(
    patterns: Sequence[Pattern],
    facts: Collection[Fact],
    binding: Binding | None = None,
    resolver: PatternResolver | None = None,
) -> Iterator[Binding]:
    """Find all bindings satisfying every pattern.

    Args:
        patterns: Conditions, matched in order
        facts: Fact base
        binding: Initial binding (default: empty)
        resolver: Pattern forms to use (default: built-in forms)

    Yields:
        Each enriched binding, in depth-first order
    """
    if binding is None:
        binding = Binding()

    if not patterns:
        yield binding
        return

    first, *rest = patterns
    for candidate in resolve_pattern(first, facts, binding, resolver):
        yield from solve(rest, facts, candidate, resolver)


def unifications(
    rule: Rule,
    facts: Collection[Fact],
    resolver: PatternResolver | None = None,
) -> list[Binding]:
    """All bindings for which the rule's conditions hold in facts.

    Every call starts from an empty binding, so variables never carry
    over between rule applications.
    """
    return list(solve(rule.conditions, facts, Binding(), resolver))
