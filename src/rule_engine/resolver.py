"""
rule_engine/resolver.py - Pattern Resolution

Each rule condition is resolved against the fact base into a lazy
stream of bindings. The behaviour is chosen by the pattern's leading
symbol:

    ("if", expr)           guard: keep the binding iff expr is true
    ("not", p1, p2, ...)   negation-as-failure over the sub-patterns
    anything else          match against every fact in the fact base

New pattern forms are added by registration, without touching the
existing handlers:

    resolver = PatternResolver()

    @resolver.register("same")
    def resolve_same(resolver, pattern, facts, binding):
        a, b = ground_tuple(pattern[1:], binding)
        if a == b:
            yield binding
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Iterator
from typing import Any

from .errors import ExpressionError
from .expressions import is_true
from .terms import Atom, Binding, Fact, Pattern, format_tuple, to_pattern, to_term
from .unification import ground_term, ground_tuple, match

logger = logging.getLogger(__name__)

# (resolver, pattern, facts, binding) -> bindings
PatternHandler = Callable[["PatternResolver", Pattern, Collection[Fact], Binding], Iterator[Binding]]


class PatternResolver:
    """Registry of pattern forms keyed by leading symbol.

    Patterns whose head is not registered fall back to the default
    handler. A resolver can be copied to extend it without affecting
    the original.
    """

    def __init__(self, default: PatternHandler | None = None):
        self._handlers: dict[Any, PatternHandler] = {}
        self._default: PatternHandler = default or resolve_match

    def register(
        self, symbol: Any, handler: PatternHandler | None = None
    ) -> PatternHandler | Callable[[PatternHandler], PatternHandler]:
        """Register a handler for patterns starting with symbol.

        Usable directly or as a decorator.
        """
        key = _symbol_key(symbol)

        def decorator(fn: PatternHandler) -> PatternHandler:
            if key in self._handlers:
                logger.info(f"Replacing pattern handler for '{key}'")
            self._handlers[key] = fn
            return fn

        if handler is not None:
            return decorator(handler)
        return decorator

    def unregister(self, symbol: Any) -> bool:
        """Remove the handler for symbol. Returns True if one was registered."""
        return self._handlers.pop(_symbol_key(symbol), None) is not None

    def handler_for(self, pattern: Pattern) -> PatternHandler:
        """Handler used to resolve the given pattern (raw or normalised)."""
        if pattern and not isinstance(pattern[0], (tuple, list)):
            head = to_term(pattern[0])
            if isinstance(head, Atom):
                return self._handlers.get(head.value, self._default)
        return self._default

    def resolve(
        self, pattern: Pattern, facts: Collection[Fact], binding: Binding
    ) -> Iterator[Binding]:
        """Resolve one pattern into the bindings that satisfy it.

        Raw values are normalised first ("?x" -> Var, else Atom).
        """
        pattern = to_pattern(pattern)
        return self.handler_for(pattern)(self, pattern, facts, binding)

    def copy(self) -> PatternResolver:
        """Independent copy sharing the current registrations."""
        clone = PatternResolver(self._default)
        clone._handlers = dict(self._handlers)
        return clone

    @property
    def symbols(self) -> list[Any]:
        """Registered leading symbols."""
        return list(self._handlers)

    def __contains__(self, symbol: Any) -> bool:
        return _symbol_key(symbol) in self._handlers


def _symbol_key(symbol: Any) -> Any:
    return symbol.value if isinstance(symbol, Atom) else symbol


# =============================================================================
# BUILT-IN PATTERN FORMS
# =============================================================================


def resolve_match(
    resolver: PatternResolver, pattern: Pattern, facts: Collection[Fact], binding: Binding
) -> Iterator[Binding]:
    """Default form: every binding obtained by matching a fact."""
    for fact in facts:
        result = match(pattern, fact, binding)
        if result is not None:
            yield result


def resolve_guard(
    resolver: PatternResolver, pattern: Pattern, facts: Collection[Fact], binding: Binding
) -> Iterator[Binding]:
    """Guard form ("if", expr): keep the binding iff expr holds.

    Raises:
        UnboundVariableError: If expr references a variable not yet bound
    """
    if len(pattern) != 2:
        raise ExpressionError(f"Guard takes exactly one expression: {format_tuple(pattern)}")

    expr = pattern[1]
    grounded = ground_tuple(expr, binding) if isinstance(expr, tuple) else ground_term(expr, binding)
    if is_true(grounded):
        yield binding


def resolve_negation(
    resolver: PatternResolver, pattern: Pattern, facts: Collection[Fact], binding: Binding
) -> Iterator[Binding]:
    """Negation form ("not", p1, ...): succeed iff the sub-patterns have no solution.

    Bindings made inside the negation never leak outward.
    """
    from .solver import solve

    for _ in solve(pattern[1:], facts, binding, resolver=resolver):
        return
    yield binding


default_resolver = PatternResolver()
default_resolver.register("if", resolve_guard)
default_resolver.register("not", resolve_negation)


def resolve_pattern(
    pattern: Pattern,
    facts: Collection[Fact],
    binding: Binding,
    resolver: PatternResolver | None = None,
) -> Iterator[Binding]:
    """Resolve a pattern with the given resolver (default: built-in forms)."""
    return (resolver or default_resolver).resolve(pattern, facts, binding)
