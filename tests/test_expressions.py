"""
Tests for guard expression evaluation.
"""

import pytest

from rule_engine import ExpressionError, evaluate, to_fact, to_pattern
from rule_engine.expressions import is_true


def ev(expr):
    return evaluate(to_pattern(expr) if isinstance(expr, tuple) else to_fact((expr,))[0])


class TestRelational:
    """Test suite for comparisons."""

    def test_greater_than(self):
        assert ev((">", 9, 8)) is True
        assert ev((">", 8, 9)) is False

    def test_less_equal(self):
        assert ev(("<=", 3, 3)) is True
        assert ev(("<", 3, 3)) is False

    def test_equality_on_symbols(self):
        assert ev(("=", "jane", "jane")) is True
        assert ev(("!=", "jane", "paul")) is True


class TestArithmetic:
    """Test suite for arithmetic operators."""

    def test_nested(self):
        assert ev((">", ("+", 2, 3), 4)) is True
        assert ev(("*", 2, 3, 4)) == 24

    def test_unary_minus(self):
        assert ev(("-", 5)) == -5
        assert ev(("-", 10, 3, 2)) == 5

    def test_mod_abs_min_max(self):
        assert ev(("mod", 7, 3)) == 1
        assert ev(("abs", ("-", 4))) == 4
        assert ev(("min", 4, 2, 8)) == 2
        assert ev(("max", 4, 2, 8)) == 8

    def test_division_by_zero(self):
        with pytest.raises(ExpressionError):
            ev(("/", 1, 0))


class TestBoolean:
    """Test suite for boolean connectives."""

    def test_and_or_not(self):
        assert ev(("and", (">", 2, 1), ("<", 1, 2))) is True
        assert ev(("or", (">", 1, 2), ("<", 1, 2))) is True
        assert ev(("not", (">", 1, 2))) is True

    def test_atom_truthiness(self):
        assert is_true(to_fact((1,))[0]) is True
        assert is_true(to_fact((0,))[0]) is False


class TestErrors:
    """Invalid expressions fail loudly."""

    def test_unknown_operator(self):
        with pytest.raises(ExpressionError, match="Unknown operator"):
            ev(("__import__", "os"))

    def test_wrong_arity(self):
        with pytest.raises(ExpressionError, match="operands"):
            ev((">", 1))

    def test_type_error(self):
        with pytest.raises(ExpressionError, match="Cannot evaluate"):
            ev((">", "jane", 3))

    def test_unground(self):
        with pytest.raises(ExpressionError, match="not ground"):
            ev((">", "?x", 3))
