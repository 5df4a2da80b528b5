"""CLI entry point for the rule engine.

Usage:
    # Run a domain to a fixpoint (or the step budget) and print the facts
    rule-engine simulate domain.yaml
    rule-engine simulate domain.yaml --max-steps 100 --strategy first

    # Show which rule fired at every step
    rule-engine simulate domain.yaml --explain

    # Report rules that use variables before binding them
    rule-engine check domain.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config import EngineSettings, get_settings
from .domain import Domain
from .engine import RuleEngine
from .errors import RuleEngineError
from .terms import format_tuple

logger = logging.getLogger(__name__)


def _load_domain(path: str) -> Domain:
    source = Path(path)
    if not source.exists():
        print(f"Error: Path not found: {source}", file=sys.stderr)
        sys.exit(1)
    return Domain.load(source)


def _settings_from_args(args: argparse.Namespace) -> EngineSettings:
    overrides = {
        key: value
        for key, value in (
            ("max_steps", args.max_steps),
            ("strategy", args.strategy),
            ("seed", args.seed),
            ("log_level", args.log_level),
        )
        if value is not None
    }
    return EngineSettings(**{**get_settings().model_dump(), **overrides})


def _cmd_simulate(args: argparse.Namespace) -> None:
    """Run a domain and print the resulting fact base."""
    settings = _settings_from_args(args)
    logging.basicConfig(level=settings.log_level)

    domain = _load_domain(args.domain)
    engine = RuleEngine(domain, settings=settings)

    if args.explain:
        firings = engine.trace()
        if args.json:
            print(json.dumps([f.to_dict() for f in firings], indent=2))
        else:
            for firing in firings:
                print(firing.explain())
        return

    facts = engine.simulate()
    lines = sorted(format_tuple(fact) for fact in facts)
    if args.json:
        print(json.dumps(lines, indent=2))
    else:
        print("\n".join(lines))


def _cmd_check(args: argparse.Namespace) -> None:
    """Report rules whose guards, negations or conclusions use unbound variables."""
    logging.basicConfig(level=get_settings().log_level)

    domain = _load_domain(args.domain)
    problems = 0
    for rule in domain.rules:
        unsafe = rule.unsafe_variables()
        if unsafe:
            problems += 1
            names = ", ".join(sorted(repr(v) for v in unsafe))
            print(f"{rule}: {names}")

    print(f"{len(domain.rules)} rules, {problems} with unbound variables")
    if problems:
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="rule-engine",
        description="Forward-chaining rule engine",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # simulate
    simulate_parser = subparsers.add_parser("simulate", help="Run a domain file")
    simulate_parser.add_argument("domain", help="Path to a YAML or JSON domain file")
    simulate_parser.add_argument(
        "--max-steps",
        type=int,
        help="Step budget (default: RULE_ENGINE_MAX_STEPS or 1000)",
    )
    simulate_parser.add_argument(
        "--strategy",
        choices=["random", "first"],
        help="Selection strategy (default: random)",
    )
    simulate_parser.add_argument("--seed", type=int, help="Seed for the random strategy")
    simulate_parser.add_argument(
        "--explain",
        action="store_true",
        help="Print every firing instead of the final facts",
    )
    simulate_parser.add_argument("--json", action="store_true", help="Print JSON output")
    simulate_parser.add_argument("--log-level", help="Log level (default: WARNING)")

    # check
    check_parser = subparsers.add_parser("check", help="Check rules for unbound variables")
    check_parser.add_argument("domain", help="Path to a YAML or JSON domain file")

    args = parser.parse_args(argv)

    try:
        if args.command == "simulate":
            _cmd_simulate(args)
        elif args.command == "check":
            _cmd_check(args)
        else:
            parser.print_help()
            sys.exit(1)
    except (RuleEngineError, ValidationError, yaml.YAMLError, json.JSONDecodeError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
