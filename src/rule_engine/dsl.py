"""
rule_engine/dsl.py - Fluent Builder for Domains

Provides a fluent API for defining rules and facts in a more Pythonic
way than writing nested tuples by hand.

Example:
    from rule_engine.dsl import DomainBuilder, X, Y, Z

    d = DomainBuilder()

    d.fact("mother", "jane", "paul")
    d.fact("father", "michel", "jane")

    d.rule("parent").when("mother", X, Y).then("parent", X, Y).done()
    d.rule("grandfather") \
        .when("father", X, Y) \
        .and_("parent", Y, Z) \
        .then("grandfather", X, Z) \
        .done()

    facts = d.simulate(1000)
"""
from __future__ import annotations

from typing import Any, List, Optional

from .domain import GUARD, NEGATION, Domain, Rule
from .engine import FactBase, SelectionStrategy, random_choice, simulate
from .terms import Pattern, Var, to_pattern

# Create common variables for DSL
X = Var("x")
Y = Var("y")
Z = Var("z")
A = Var("a")
B = Var("b")
C = Var("c")


def not_(*patterns: Any) -> Pattern:
    """Negation form: holds iff none of the sub-patterns can be satisfied together."""
    return to_pattern((NEGATION, *patterns))


def if_(expr: Any) -> Pattern:
    """Guard form: holds iff the expression is true under the binding."""
    return to_pattern((GUARD, expr))


class RuleBuilder:
    """Fluent builder for rules."""

    def __init__(self, builder: DomainBuilder, name: Optional[str] = None):
        self.builder = builder
        self.conditions: List[Pattern] = []
        self.conclusions: List[Pattern] = []
        self._name = name
        self._description: Optional[str] = None

    def when(self, predicate: Any, *args) -> RuleBuilder:
        """Add first condition."""
        self.conditions.append(to_pattern((predicate, *args)))
        return self

    def and_(self, predicate: Any, *args) -> RuleBuilder:
        """Add another condition (AND)."""
        return self.when(predicate, *args)

    def unless(self, *patterns: Any) -> RuleBuilder:
        """Add a negated conjunction of patterns."""
        self.conditions.append(not_(*patterns))
        return self

    def where(self, op: str, *operands: Any) -> RuleBuilder:
        """Add a guard, e.g. where(">", Y, X)."""
        self.conditions.append(if_((op, *operands)))
        return self

    def then(self, predicate: Any, *args) -> RuleBuilder:
        """Add a conclusion."""
        self.conclusions.append(to_pattern((predicate, *args)))
        return self

    def described(self, description: str) -> RuleBuilder:
        """Set rule description."""
        self._description = description
        return self

    def build(self) -> Rule:
        return Rule(
            conditions=tuple(self.conditions),
            conclusions=tuple(self.conclusions),
            name=self._name,
            description=self._description,
        )

    def done(self) -> DomainBuilder:
        """Finalize and add rule to the domain."""
        self.builder.rules.append(self.build())
        return self.builder


class DomainBuilder:
    """Collects rules and facts into a Domain."""

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self.rules: List[Rule] = []
        self.facts: List[Pattern] = []

    def fact(self, predicate: Any, *args) -> DomainBuilder:
        """Add a fact."""
        self.facts.append(to_pattern((predicate, *args)))
        return self

    def rule(self, name: Optional[str] = None) -> RuleBuilder:
        """Start building a rule."""
        return RuleBuilder(self, name)

    def build(self) -> Domain:
        return Domain(rules=tuple(self.rules), facts=tuple(self.facts), name=self.name)

    def simulate(
        self, max_steps: int, strategy: SelectionStrategy = random_choice
    ) -> FactBase:
        """Build the domain and run it."""
        return simulate(max_steps, self.build(), strategy)
