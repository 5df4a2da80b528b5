"""
rule_engine - Forward-Chaining Rule Engine

Derives new facts from a fact base by repeatedly firing rules until no
rule applies (fixpoint) or a step budget is exhausted.

This module implements:
- Flat term model with "?x" variables and immutable bindings
- One-way unification of patterns against facts
- Extensible pattern forms: plain match, negation-as-failure, guards
- Depth-first conjunctive solver
- Monotonic forward chaining with a pluggable selection strategy

Example:
    from rule_engine import Domain, Rule, first_choice, simulate

    family = Domain(
        rules=[
            Rule([("mother", "?x", "?y")], [("parent", "?x", "?y")]),
            Rule([("father", "?x", "?y")], [("parent", "?x", "?y")]),
            Rule(
                [("father", "?x", "?y"), ("parent", "?y", "?z")],
                [("grandfather", "?x", "?z")],
            ),
        ],
        facts=[
            ("mother", "jane", "paul"),
            ("father", "dan", "paul"),
            ("father", "michel", "jane"),
        ],
    )

    facts = simulate(1000, family, first_choice)
"""

from .config import EngineSettings, get_settings
from .domain import Domain, Rule
from .dsl import DomainBuilder, RuleBuilder, if_, not_
from .engine import (
    Firing,
    RuleEngine,
    apply_rule,
    candidates,
    first_choice,
    random_choice,
    seeded_choice,
    select_rule,
    simulate,
    states,
    step,
    trace,
)
from .errors import BindingError, DomainError, ExpressionError, RuleEngineError, UnboundVariableError
from .expressions import evaluate
from .resolver import PatternResolver, default_resolver, resolve_pattern
from .solver import solve, unifications
from .terms import Atom, Binding, Var, format_tuple, is_variable, to_fact, to_pattern, to_term
from .unification import ground_term, ground_tuple, match, match_item

__all__ = [
    # Terms
    "Atom",
    "Var",
    "Binding",
    "is_variable",
    "to_term",
    "to_pattern",
    "to_fact",
    "format_tuple",
    # Matching
    "match_item",
    "match",
    "ground_term",
    "ground_tuple",
    "evaluate",
    # Resolution
    "PatternResolver",
    "default_resolver",
    "resolve_pattern",
    "solve",
    "unifications",
    # Domain
    "Rule",
    "Domain",
    # Engine
    "candidates",
    "select_rule",
    "apply_rule",
    "step",
    "states",
    "simulate",
    "trace",
    "Firing",
    "RuleEngine",
    "random_choice",
    "first_choice",
    "seeded_choice",
    # DSL
    "DomainBuilder",
    "RuleBuilder",
    "not_",
    "if_",
    # Config
    "EngineSettings",
    "get_settings",
    # Errors
    "RuleEngineError",
    "UnboundVariableError",
    "ExpressionError",
    "DomainError",
    "BindingError",
]
