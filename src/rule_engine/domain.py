"""
rule_engine/domain.py - Rules and Domains

A Domain is the unit of input to a simulation: a set of rules plus an
initial set of facts. Both are immutable for the lifetime of a run.

Features:
- Normalisation of raw Python values into terms ("?x" -> Var, else Atom)
- Rule safety check for guards, negations and conclusions
- Loading from dictionaries, JSON and YAML documents
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import DomainError
from .terms import Atom, Fact, Pattern, Var, format_tuple, pattern_variables, to_fact, to_pattern

logger = logging.getLogger(__name__)

NEGATION = "not"
GUARD = "if"


def _head(pattern: Pattern) -> Any:
    if pattern and isinstance(pattern[0], Atom):
        return pattern[0].value
    return None


@dataclass(frozen=True)
class Rule:
    """An inference rule: if all conditions hold, assert the conclusions.

    Conditions are plain patterns matched against the fact base, or one
    of the special forms ("not", ...) and ("if", expr). Conclusions are
    plain patterns grounded with the binding found for the conditions.

    Example:
        Rule(
            conditions=[("father", "?x", "?y"), ("parent", "?y", "?z")],
            conclusions=[("grandfather", "?x", "?z")],
            name="grandfather",
        )
    """
    conditions: tuple[Pattern, ...]
    conclusions: tuple[Pattern, ...]
    name: Optional[str] = None
    description: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        conditions = tuple(_as_pattern(p, "condition") for p in self.conditions)
        conclusions = tuple(_as_pattern(p, "conclusion") for p in self.conclusions)
        if not conclusions:
            raise DomainError(f"Rule needs at least one conclusion: {self.name or format_tuple(conditions)}")

        for conclusion in conclusions:
            if any(isinstance(item, tuple) for item in conclusion):
                raise DomainError(f"Conclusion must be a flat pattern: {format_tuple(conclusion)}")

        object.__setattr__(self, "conditions", conditions)
        object.__setattr__(self, "conclusions", conclusions)

    def variables(self) -> set[Var]:
        """All variables in the rule."""
        result: set[Var] = set()
        for pattern in self.conditions + self.conclusions:
            result.update(pattern_variables(pattern))
        return result

    def unsafe_variables(self) -> set[Var]:
        """Variables that may be used before any plain condition binds them.

        Reports variables of a guard that are unbound at that point,
        variables of a conclusion that no plain condition binds, and
        variables a negation reads before a later condition binds them
        (such a negation is checked against facts it was not meant to
        rule out).
        """
        unsafe: set[Var] = set()
        bound: set[Var] = set()
        pending: set[Var] = set()

        for condition in self.conditions:
            head = _head(condition)
            if head == GUARD:
                unsafe.update(pattern_variables(condition) - bound)
            elif head == NEGATION:
                unsafe.update(_unsafe_in_scope(condition[1:], set(bound)))
                pending.update(pattern_variables(condition) - bound)
            else:
                new = pattern_variables(condition)
                unsafe.update(new & pending)
                bound.update(new)

        for conclusion in self.conclusions:
            unsafe.update(pattern_variables(conclusion) - bound)

        return unsafe

    def to_dict(self) -> Dict[str, Any]:
        """Export to dictionary."""
        data: Dict[str, Any] = {
            "conditions": [_pattern_to_list(p) for p in self.conditions],
            "conclusions": [_pattern_to_list(p) for p in self.conclusions],
        }
        if self.name is not None:
            data["name"] = self.name
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Rule:
        """Import from dictionary.

        The keys "patterns" and "assertions" are accepted as aliases of
        "conditions" and "conclusions".
        """
        if not isinstance(data, dict):
            raise DomainError(f"Rule must be a mapping, got: {data!r}")

        conditions = data.get("conditions", data.get("patterns"))
        conclusions = data.get("conclusions", data.get("assertions"))
        if conditions is None or conclusions is None:
            raise DomainError(f"Rule needs conditions and conclusions: {data!r}")

        return cls(
            conditions=conditions,
            conclusions=conclusions,
            name=data.get("name"),
            description=data.get("description"),
        )

    def __str__(self) -> str:
        body = " ".join(format_tuple(p) for p in self.conditions)
        head = " ".join(format_tuple(p) for p in self.conclusions)
        label = f"[{self.name}] " if self.name else ""
        return f"{label}{body} => {head}"


def _unsafe_in_scope(patterns: tuple, bound: set[Var]) -> set[Var]:
    """Unsafe guard variables inside a negation; local bindings stay local."""
    unsafe: set[Var] = set()
    for pattern in patterns:
        head = _head(pattern)
        if head == GUARD:
            unsafe.update(pattern_variables(pattern) - bound)
        elif head == NEGATION:
            unsafe.update(_unsafe_in_scope(pattern[1:], set(bound)))
        else:
            bound.update(pattern_variables(pattern))
    return unsafe


def _as_pattern(value: Any, role: str) -> Pattern:
    if not isinstance(value, (tuple, list)) or not value:
        raise DomainError(f"Rule {role} must be a non-empty sequence, got: {value!r}")
    pattern = to_pattern(value)
    try:
        hash(pattern)
    except TypeError as e:
        raise DomainError(f"Rule {role} values must be hashable, got: {value!r}") from e
    return pattern


def _pattern_to_list(pattern: tuple) -> List[Any]:
    """Convert a pattern back into raw values."""
    result: List[Any] = []
    for item in pattern:
        if isinstance(item, tuple):
            result.append(_pattern_to_list(item))
        elif isinstance(item, Var):
            result.append(repr(item))
        else:
            result.append(item.value)
    return result


@dataclass(frozen=True)
class Domain:
    """Rules plus initial facts.

    Example:
        family = Domain(
            rules=[Rule([("mother", "?x", "?y")], [("parent", "?x", "?y")])],
            facts=[("mother", "jane", "paul")],
        )
    """
    rules: tuple[Rule, ...] = ()
    facts: tuple[Fact, ...] = ()
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        rules = tuple(r if isinstance(r, Rule) else Rule.from_dict(r) for r in self.rules)

        facts = []
        for raw in self.facts:
            if not isinstance(raw, (tuple, list)) or not raw:
                raise DomainError(f"Fact must be a non-empty sequence, got: {raw!r}")
            try:
                fact = to_fact(raw)
                hash(fact)
            except ValueError as e:
                raise DomainError(str(e)) from e
            except TypeError as e:
                raise DomainError(f"Fact values must be hashable, got: {raw!r}") from e
            facts.append(fact)

        object.__setattr__(self, "rules", rules)
        object.__setattr__(self, "facts", tuple(facts))

        for rule in rules:
            unsafe = rule.unsafe_variables()
            if unsafe:
                names = ", ".join(sorted(repr(v) for v in unsafe))
                logger.warning(f"Rule {rule} uses {names} before binding them")

    def initial_facts(self) -> frozenset[Fact]:
        """The initial fact base."""
        return frozenset(self.facts)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Export to dictionary."""
        data: Dict[str, Any] = {
            "rules": [r.to_dict() for r in self.rules],
            "facts": [_pattern_to_list(f) for f in self.facts],
        }
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Domain:
        """Import from dictionary."""
        if not isinstance(data, dict):
            raise DomainError(f"Domain must be a mapping, got: {type(data).__name__}")

        rules = data.get("rules", [])
        facts = data.get("facts", [])
        if not isinstance(rules, list) or not isinstance(facts, list):
            raise DomainError("Domain 'rules' and 'facts' must be lists")

        return cls(
            rules=tuple(Rule.from_dict(r) for r in rules),
            facts=tuple(facts),
            name=data.get("name"),
        )

    def to_json(self, path: str | Path) -> None:
        """Save to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_json(cls, path: str | Path) -> Domain:
        """Load from JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def to_yaml(self, path: str | Path) -> None:
        """Save to YAML file."""
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=None, sort_keys=False)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Domain:
        """Load from YAML file."""
        with open(path) as f:
            return cls.from_dict(yaml.safe_load(f))

    @classmethod
    def load(cls, path: str | Path) -> Domain:
        """Load a domain document, choosing the format by file extension."""
        path = Path(path)
        if path.suffix.lower() == ".json":
            return cls.from_json(path)
        if path.suffix.lower() in (".yaml", ".yml"):
            return cls.from_yaml(path)
        raise DomainError(f"Unsupported domain file type: {path.suffix or path.name}")
