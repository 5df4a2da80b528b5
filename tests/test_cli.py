"""
Tests for the rule-engine command line.
"""

import json

import pytest

from rule_engine.cli import main


class TestSimulateCommand:
    """Test suite for `rule-engine simulate`."""

    def test_prints_sorted_facts(self, maximum_json, capsys):
        main(["simulate", str(maximum_json), "--max-steps", "5"])
        lines = capsys.readouterr().out.splitlines()
        assert "(max 9)" in lines
        assert lines == sorted(lines)
        assert len(lines) == 11

    def test_kinship_seeded(self, kinship_yaml, capsys):
        main(["simulate", str(kinship_yaml), "--seed", "42"])
        lines = capsys.readouterr().out.splitlines()
        assert "(grandfather michel paul)" in lines
        assert len(lines) == 7

    def test_zero_steps(self, kinship_yaml, capsys):
        main(["simulate", str(kinship_yaml), "--max-steps", "0"])
        assert len(capsys.readouterr().out.splitlines()) == 3

    def test_json_output(self, maximum_json, capsys):
        main(["simulate", str(maximum_json), "--json"])
        assert "(max 9)" in json.loads(capsys.readouterr().out)

    def test_explain(self, maximum_json, capsys):
        main(["simulate", str(maximum_json), "--explain", "--max-steps", "2", "--strategy", "first"])
        lines = capsys.readouterr().out.splitlines()
        # Unnamed rules are labelled by their text
        assert lines[0] == "1: (number ?x) (not (number ?y) (if (> ?y ?x))) => (max ?x) {?x=9} -> (max 9)"
        assert lines[1].endswith("nothing new")

    def test_explain_json(self, kinship_yaml, capsys):
        main(["simulate", str(kinship_yaml), "--explain", "--json", "--max-steps", "3"])
        firings = json.loads(capsys.readouterr().out)
        assert [f["step"] for f in firings] == [1, 2, 3]

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["simulate", str(tmp_path / "missing.yaml")])
        assert exc.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_rule_error_exits_1(self, tmp_path, capsys):
        path = tmp_path / "broken.yaml"
        path.write_text(
            "rules:\n"
            "  - conditions: [[number, '?x']]\n"
            "    conclusions: [[pair, '?x', '?y']]\n"
            "facts:\n"
            "  - [number, 1]\n"
        )
        with pytest.raises(SystemExit) as exc:
            main(["simulate", str(path)])
        assert exc.value.code == 1
        assert "Unbound var" in capsys.readouterr().err

    def test_unhashable_fact_exits_1(self, tmp_path, capsys):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"rules": [], "facts": [["a", {"k": 1}]]}))
        with pytest.raises(SystemExit) as exc:
            main(["simulate", str(path)])
        assert exc.value.code == 1
        assert "hashable" in capsys.readouterr().err

    def test_invalid_log_level(self, kinship_yaml, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["simulate", str(kinship_yaml), "--log-level", "LOUD"])
        assert exc.value.code == 1


class TestCheckCommand:
    """Test suite for `rule-engine check`."""

    def test_clean_domain(self, kinship_yaml, capsys):
        main(["check", str(kinship_yaml)])
        assert "3 rules, 0 with unbound variables" in capsys.readouterr().out

    def test_reports_unsafe_rule(self, tmp_path, capsys):
        path = tmp_path / "unsafe.json"
        path.write_text(json.dumps({
            "rules": [{"conditions": [["not", ["seen", "?x"]], ["number", "?x"]],
                       "conclusions": [["seen", "?x"]]}],
            "facts": [["number", 1]],
        }))
        with pytest.raises(SystemExit) as exc:
            main(["check", str(path)])
        assert exc.value.code == 1
        assert "?x" in capsys.readouterr().out


class TestNoCommand:
    def test_prints_help(self, capsys):
        with pytest.raises(SystemExit):
            main([])
        assert "usage" in capsys.readouterr().out.lower()
