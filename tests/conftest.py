"""
Pytest fixtures for rule engine tests.

Provides the example domains (kinship, maximum) as named constants and
fixtures, plus paths to their document versions.
"""

from pathlib import Path

import pytest

from rule_engine import Domain, Rule, get_settings

FIXTURES = Path(__file__).parent / "fixtures"

# =============================================================================
# EXAMPLE DOMAINS
# =============================================================================

KINSHIP_RULES = [
    Rule([("mother", "?x", "?y")], [("parent", "?x", "?y")], name="mother-is-parent"),
    Rule([("father", "?x", "?y")], [("parent", "?x", "?y")], name="father-is-parent"),
    Rule(
        [("father", "?x", "?y"), ("parent", "?y", "?z")],
        [("grandfather", "?x", "?z")],
        name="grandfather",
    ),
]

KINSHIP_FACTS = [
    ("mother", "jane", "paul"),
    ("father", "dan", "paul"),
    ("father", "michel", "jane"),
]

# If there is a number x and no number y with y > x, x is the maximum
MAX_RULES = [
    Rule(
        [("number", "?x"), ("not", ("number", "?y"), ("if", (">", "?y", "?x")))],
        [("max", "?x")],
        name="maximum",
    ),
]

MAX_FACTS = [("number", n) for n in (1, 7, 2, 0, 3, 5, 8, 9, 6, 4)]

# Marks each number exactly once, then stops: reaches a real fixpoint
MARKING_RULES = [
    Rule(
        [("number", "?x"), ("not", ("seen", "?x"))],
        [("seen", "?x")],
        name="mark",
    ),
]


@pytest.fixture
def kinship() -> Domain:
    return Domain(rules=KINSHIP_RULES, facts=KINSHIP_FACTS, name="kinship")


@pytest.fixture
def maximum() -> Domain:
    return Domain(rules=MAX_RULES, facts=MAX_FACTS, name="maximum")


@pytest.fixture
def marking() -> Domain:
    return Domain(rules=MARKING_RULES, facts=MAX_FACTS, name="marking")


@pytest.fixture
def kinship_yaml() -> Path:
    return FIXTURES / "kinship.yaml"


@pytest.fixture
def maximum_json() -> Path:
    return FIXTURES / "maximum.json"


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Isolate tests from RULE_ENGINE_* variables and the settings cache."""
    for var in ("MAX_STEPS", "STRATEGY", "SEED", "LOG_LEVEL"):
        monkeypatch.delenv(f"RULE_ENGINE_{var}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
