"""
Tests for the fluent domain builder.
"""

from rule_engine import Atom, DomainBuilder, Rule, first_choice, if_, not_, seeded_choice, to_fact
from rule_engine.dsl import X, Y, Z

from .conftest import KINSHIP_RULES, MAX_RULES


class TestRuleBuilder:
    """Test suite for building rules."""

    def test_builds_same_rule_as_tuples(self):
        d = DomainBuilder()
        rule = d.rule("grandfather").when("father", X, Y).and_("parent", Y, Z).then("grandfather", X, Z).build()
        assert rule == KINSHIP_RULES[2]

    def test_unless_and_where(self):
        d = DomainBuilder()
        rule = (
            d.rule("maximum")
            .when("number", X)
            .unless(("number", Y), if_((">", Y, X)))
            .then("max", X)
            .build()
        )
        assert rule == MAX_RULES[0]

    def test_where_guard(self):
        d = DomainBuilder()
        rule = d.rule().when("number", X).where(">", X, 5).then("big", X).build()
        assert rule.conditions[1] == if_((">", "?x", 5))

    def test_described(self):
        rule = DomainBuilder().rule("r").when("a", X).then("b", X).described("a implies b").build()
        assert rule.description == "a implies b"

    def test_not_helper(self):
        assert not_(("seen", X)) == (Atom("not"), (Atom("seen"), X))


class TestDomainBuilder:
    """Test suite for building and running domains."""

    def test_done_returns_builder(self):
        d = DomainBuilder("family")
        assert d.rule().when("a", X).then("b", X).done() is d
        assert len(d.rules) == 1
        assert isinstance(d.rules[0], Rule)

    def test_kinship(self):
        d = DomainBuilder("kinship")
        d.fact("mother", "jane", "paul").fact("father", "dan", "paul").fact("father", "michel", "jane")
        d.rule("mother-is-parent").when("mother", X, Y).then("parent", X, Y).done()
        d.rule("father-is-parent").when("father", X, Y).then("parent", X, Y).done()
        d.rule("grandfather").when("father", X, Y).and_("parent", Y, Z).then("grandfather", X, Z).done()

        domain = d.build()
        assert domain.name == "kinship"
        assert len(domain.facts) == 3

        result = d.simulate(1000, seeded_choice(1))
        assert to_fact(("grandfather", "michel", "paul")) in result
        assert len(result) == 7

    def test_maximum(self):
        d = DomainBuilder()
        for n in range(10):
            d.fact("number", n)
        d.rule("maximum").when("number", X).unless(("number", Y), if_((">", Y, X))).then("max", X).done()

        result = d.simulate(100, first_choice)
        assert {f for f in result if f[0] == Atom("max")} == {to_fact(("max", 9))}
