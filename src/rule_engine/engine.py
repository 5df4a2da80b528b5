"""
rule_engine/engine.py - Forward Chaining Driver

FORWARD CHAINING (Data-Driven):
    Start with the initial facts. At every step collect every
    (rule, binding) pair whose conditions hold, let the selection
    strategy pick one, and add the grounded conclusions to the fact
    base. Stop when no pair is applicable (fixpoint) or the step
    budget runs out.

The fact base only grows: each step returns a new frozenset that is a
superset of the previous one.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Collection, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Optional

from .config import EngineSettings, get_settings
from .domain import Domain, Rule
from .resolver import PatternResolver
from .solver import unifications
from .terms import Binding, Fact, format_tuple
from .unification import ground_tuple

logger = logging.getLogger(__name__)

FactBase = frozenset
Candidate = tuple[Rule, Binding]
SelectionStrategy = Callable[[Sequence[Candidate]], Candidate]


# =============================================================================
# SELECTION STRATEGIES
# =============================================================================


def random_choice(candidates: Sequence[Candidate]) -> Candidate:
    """Pick one candidate uniformly at random."""
    return random.choice(candidates)


def first_choice(candidates: Sequence[Candidate]) -> Candidate:
    """Always pick the first candidate (deterministic)."""
    return candidates[0]


def seeded_choice(seed: int) -> SelectionStrategy:
    """Uniform random strategy with its own reproducible generator."""
    rng = random.Random(seed)

    def choose(candidates: Sequence[Candidate]) -> Candidate:
        return rng.choice(candidates)

    return choose


STRATEGIES: dict[str, SelectionStrategy] = {
    "random": random_choice,
    "first": first_choice,
}


def strategy_from_settings(settings: EngineSettings) -> SelectionStrategy:
    """Build the selection strategy described by the settings."""
    if settings.strategy == "random" and settings.seed is not None:
        return seeded_choice(settings.seed)
    return STRATEGIES[settings.strategy]


# =============================================================================
# DRIVER
# =============================================================================


def candidates(
    rules: Iterable[Rule],
    facts: Collection[Fact],
    resolver: PatternResolver | None = None,
) -> list[Candidate]:
    """Every applicable (rule, binding) pair, flattened across rules."""
    return [
        (rule, binding)
        for rule in rules
        for binding in unifications(rule, facts, resolver)
    ]


def select_rule(
    rules: Iterable[Rule],
    facts: Collection[Fact],
    strategy: SelectionStrategy = random_choice,
    resolver: PatternResolver | None = None,
) -> Optional[Candidate]:
    """Pick one applicable rule with one binding, or None at a fixpoint."""
    possibilities = candidates(rules, facts, resolver)
    if not possibilities:
        return None
    return strategy(possibilities)


def apply_rule(rule: Rule, binding: Binding, facts: Collection[Fact]) -> FactBase:
    """Ground the rule's conclusions and add them to the fact base.

    Raises:
        UnboundVariableError: If a conclusion uses a variable the
            conditions never bound
    """
    new_facts = {ground_tuple(conclusion, binding) for conclusion in rule.conclusions}
    return frozenset(facts) | new_facts


def step(
    facts: Collection[Fact],
    rules: Iterable[Rule],
    strategy: SelectionStrategy = random_choice,
    resolver: PatternResolver | None = None,
) -> Optional[FactBase]:
    """Run a single forward-chaining step. None signals a fixpoint."""
    selected = select_rule(rules, facts, strategy, resolver)
    if selected is None:
        return None
    rule, binding = selected
    logger.debug(f"Firing {rule} with {binding}")
    return apply_rule(rule, binding, facts)


def _firings(
    domain: Domain,
    strategy: SelectionStrategy,
    resolver: PatternResolver | None,
) -> Iterator[tuple[Rule, Binding, FactBase, FactBase]]:
    """(rule, binding, before, after) for every step until a fixpoint."""
    facts: FactBase = domain.initial_facts()
    while True:
        selected = select_rule(domain.rules, facts, strategy, resolver)
        if selected is None:
            return
        rule, binding = selected
        logger.debug(f"Firing {rule} with {binding}")
        new_facts = apply_rule(rule, binding, facts)
        yield rule, binding, facts, new_facts
        facts = new_facts


def states(
    domain: Domain,
    strategy: SelectionStrategy = random_choice,
    resolver: PatternResolver | None = None,
) -> Iterator[Optional[FactBase]]:
    """Infinite stream of fact bases produced by running the domain.

    The first element is the initial fact base. After the first None
    (fixpoint) the stream yields None forever. Call again to restart.
    """
    yield domain.initial_facts()
    for _, _, _, after in _firings(domain, strategy, resolver):
        yield after
    while True:
        yield None


def _run(
    max_steps: int,
    domain: Domain,
    strategy: SelectionStrategy,
    resolver: PatternResolver | None,
) -> Iterator[tuple[Firing, FactBase]]:
    """At most max_steps firings, each with the fact base it produced."""
    if max_steps < 0:
        raise ValueError(f"max_steps must be >= 0, got {max_steps}")

    taken = 0
    last: FactBase = domain.initial_facts()
    for rule, binding, before, after in islice(_firings(domain, strategy, resolver), max_steps):
        taken += 1
        last = after
        yield Firing(step=taken, rule=rule, binding=binding, added=after - before), after

    if taken < max_steps:
        logger.info(f"Fixpoint reached after {taken} steps")
    else:
        logger.info(f"Step budget of {max_steps} exhausted with {len(last)} facts")


def simulate(
    max_steps: int,
    domain: Domain,
    strategy: SelectionStrategy = random_choice,
    resolver: PatternResolver | None = None,
) -> FactBase:
    """Run the domain until a fixpoint or until max_steps steps were taken.

    Returns:
        The last fact base reached; the initial one when max_steps is 0
    """
    last: FactBase = domain.initial_facts()
    for _, last in _run(max_steps, domain, strategy, resolver):
        pass
    return last


# =============================================================================
# EXPLANATION
# =============================================================================


@dataclass(frozen=True)
class Firing:
    """One step of a simulation: which rule fired, how, and what it added."""

    step: int
    rule: Rule
    binding: Binding
    added: frozenset = field(default_factory=frozenset)

    def explain(self) -> str:
        label = self.rule.name or str(self.rule)
        binds = ", ".join(f"{k!r}={v!r}" for k, v in self.binding.items())
        if self.added:
            added = " ".join(format_tuple(f) for f in sorted(self.added, key=format_tuple))
        else:
            added = "nothing new"
        return f"{self.step}: {label} {{{binds}}} -> {added}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "rule": self.rule.name or str(self.rule),
            "binding": {repr(k): v.value for k, v in self.binding.items()},
            "added": sorted(format_tuple(f) for f in self.added),
        }


def trace(
    max_steps: int,
    domain: Domain,
    strategy: SelectionStrategy = random_choice,
    resolver: PatternResolver | None = None,
) -> list[Firing]:
    """Run like simulate() and record every firing."""
    return [firing for firing, _ in _run(max_steps, domain, strategy, resolver)]


class RuleEngine:
    """Facade bundling a domain with a strategy and settings.

    Example:
        engine = RuleEngine(domain, strategy=first_choice)
        facts = engine.simulate()
    """

    def __init__(
        self,
        domain: Domain,
        strategy: SelectionStrategy | None = None,
        settings: EngineSettings | None = None,
        resolver: PatternResolver | None = None,
    ):
        self.domain = domain
        self.settings = settings or get_settings()
        self.strategy = strategy or strategy_from_settings(self.settings)
        self.resolver = resolver

    def simulate(self, max_steps: int | None = None) -> FactBase:
        """Run to a fixpoint or to the step budget (default from settings)."""
        budget = self.settings.max_steps if max_steps is None else max_steps
        return simulate(budget, self.domain, self.strategy, self.resolver)

    def trace(self, max_steps: int | None = None) -> list[Firing]:
        """Record every firing of a run."""
        budget = self.settings.max_steps if max_steps is None else max_steps
        return trace(budget, self.domain, self.strategy, self.resolver)

    def states(self) -> Iterator[Optional[FactBase]]:
        return states(self.domain, self.strategy, self.resolver)

    def __repr__(self) -> str:
        return f"RuleEngine(rules={len(self.domain.rules)}, facts={len(self.domain.facts)})"
