"""
rule_engine/terms.py - Term Model

Implements the flat term structures the engine works with:
- Atom: Ground constants (e.g. jane, mother, 9)
- Var: Logical variables, written with a leading sigil (?x, ?y)
- Binding: Immutable substitution from variables to atoms

Patterns and facts are plain tuples of terms. Special forms such as
("not", ...) and ("if", ...) nest further tuples inside a pattern.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Union

from .errors import BindingError

VARIABLE_SIGIL = "?"


@dataclass(frozen=True)
class Var:
    """Logical variable.

    Variables stand for an as-yet-unknown atom within one rule
    application. The textual form carries the sigil, the name does not.

    Example:
        X = Var("x")
        repr(X)  # ?x
    """
    name: str

    def __repr__(self) -> str:
        return f"{VARIABLE_SIGIL}{self.name}"

    def __str__(self) -> str:
        return repr(self)


@dataclass(frozen=True)
class Atom:
    """Ground constant (atom).

    Atoms wrap any hashable value; equality is value equality.

    Example:
        jane = Atom("jane")
        nine = Atom(9)
    """
    value: Any

    def __repr__(self) -> str:
        return str(self.value)

    def __str__(self) -> str:
        return repr(self)


# Type alias for any term-like value
TermLike = Union[Var, Atom]

# A pattern may nest tuples (special forms); a fact is a flat tuple of atoms
Pattern = tuple
Fact = tuple[Atom, ...]


def is_variable(term: Any) -> bool:
    """True iff the term's textual form begins with the variable sigil."""
    if isinstance(term, Var):
        return True
    return isinstance(term, str) and term.startswith(VARIABLE_SIGIL)


def to_term(value: Any) -> TermLike:
    """Convert a raw value into a term.

    Strings starting with "?" become variables, everything else an atom.
    """
    if isinstance(value, (Var, Atom)):
        return value
    if is_variable(value):
        return Var(value[len(VARIABLE_SIGIL):])
    return Atom(value)


def to_pattern(items: Iterable[Any]) -> Pattern:
    """Normalize a (possibly nested) sequence of raw values into a pattern."""
    return tuple(
        to_pattern(item) if isinstance(item, (tuple, list)) else to_term(item)
        for item in items
    )


def to_fact(items: Iterable[Any]) -> Fact:
    """Normalize a sequence of raw values into a fact.

    Raises:
        ValueError: If the result contains a variable or a nested tuple
    """
    fact = to_pattern(items)
    for item in fact:
        if not isinstance(item, Atom):
            raise ValueError(f"Fact must be ground, got: {format_tuple(fact)}")
    return fact


def pattern_variables(pattern: Pattern) -> set[Var]:
    """All variables occurring in a pattern, nested forms included."""
    result: set[Var] = set()
    for item in pattern:
        if isinstance(item, tuple):
            result.update(pattern_variables(item))
        elif isinstance(item, Var):
            result.add(item)
    return result


def format_tuple(items: tuple) -> str:
    """Render a pattern or fact in (a b c) notation."""
    parts = [format_tuple(item) if isinstance(item, tuple) else str(item) for item in items]
    return "(" + " ".join(parts) + ")"


class Binding(Mapping):
    """Immutable substitution from variables to atoms.

    Bindings only grow: extend() returns a new binding and refuses to
    rebind a variable to a different value.

    Example:
        b = Binding().extend(Var("x"), Atom("jane"))
        b[Var("x")]  # jane
    """

    __slots__ = ("_items", "_hash")

    def __init__(self, items: Mapping[Var, Atom] | None = None):
        self._items: dict[Var, Atom] = dict(items) if items else {}
        self._hash: int | None = None

    def extend(self, var: Var, value: Atom) -> Binding:
        """Return a new binding with var bound to value.

        Raises:
            BindingError: If var is already bound to a different atom
        """
        if var in self._items:
            if self._items[var] != value:
                raise BindingError(f"{var!r} is already bound to {self._items[var]!r}")
            return self
        items = dict(self._items)
        items[var] = value
        return Binding(items)

    def __getitem__(self, var: Var) -> Atom:
        return self._items[var]

    def __iter__(self) -> Iterator[Var]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._items.items()))
        return self._hash

    def __eq__(self, other) -> bool:
        if isinstance(other, Binding):
            return self._items == other._items
        if isinstance(other, Mapping):
            return self._items == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        inner = ", ".join(f"{k!r}: {v!r}" for k, v in self._items.items())
        return "{" + inner + "}"
