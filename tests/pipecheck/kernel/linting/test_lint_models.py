"""Tests for pipecheck.kernel.linting.models and the rule runner."""

from dataclasses import dataclass

import pytest

from pipecheck.kernel.linting.models import LintReport, LintViolation
from pipecheck.kernel.linting.rules import run_rules


class TestLintViolation:
    def test_creation(self) -> None:
        v = LintViolation(
            rule_id="B101",
            severity="error",
            message="Invalid function",
            location="pipeline.processors[0].mapping",
            suggestion="Use method syntax",
        )
        assert v.rule_id == "B101"
        assert v.severity == "error"
        assert v.location == "pipeline.processors[0].mapping"
        assert v.suggestion == "Use method syntax"

    def test_defaults(self) -> None:
        v = LintViolation(rule_id="W200", severity="warning", message="test")
        assert v.location == ""
        assert v.suggestion is None

    def test_frozen(self) -> None:
        v = LintViolation(rule_id="I300", severity="info", message="test")
        with pytest.raises(AttributeError):
            v.rule_id = "X"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("severity", "floor", "expected"),
        [
            ("error", "warning", True),
            ("warning", "warning", True),
            ("info", "warning", False),
            ("info", "info", True),
            ("warning", "error", False),
        ],
    )
    def test_at_least(self, severity: str, floor: str, expected: bool) -> None:
        v = LintViolation(rule_id="X", severity=severity, message="m")  # type: ignore[arg-type]
        assert v.at_least(floor) is expected  # type: ignore[arg-type]


class TestLintReport:
    def test_empty_report(self) -> None:
        report = LintReport()
        assert report.is_clean
        assert not report.has_errors
        assert report.violations == []
        assert report.errors == []
        assert report.warnings == []
        assert report.info == []

    def test_add_violations(self) -> None:
        report = LintReport()
        report.add(LintViolation(rule_id="E100", severity="error", message="err"))
        report.extend(
            [
                LintViolation(rule_id="W200", severity="warning", message="warn"),
                LintViolation(rule_id="I300", severity="info", message="info"),
            ]
        )

        assert not report.is_clean
        assert report.has_errors
        assert len(report.violations) == 3
        assert len(report.errors) == 1
        assert len(report.warnings) == 1
        assert len(report.info) == 1
        assert [v.rule_id for v in report.at_least("warning")] == ["E100", "W200"]

    def test_warning_lines_respect_floor(self) -> None:
        report = LintReport(
            [
                LintViolation(rule_id="C001", severity="warning", message="no retries"),
                LintViolation(rule_id="C002", severity="info", message="large workflow"),
            ]
        )
        assert len(report) == 2
        assert report.warning_lines() == ["C001: no retries"]
        assert report.warning_lines("info") == ["C001: no retries", "C002: large workflow"]
        assert [v.rule_id for v in report] == ["C001", "C002"]

    def test_no_errors_means_no_has_errors(self) -> None:
        report = LintReport()
        report.add(LintViolation(rule_id="W200", severity="warning", message="warn"))
        assert not report.is_clean
        assert not report.has_errors


@dataclass
class _Rule:
    rule_id: str
    severity: str = "warning"
    description: str = ""
    fail: bool = False

    def check(self, subject: object) -> list[LintViolation]:
        if self.fail:
            raise KeyError("missing")
        return [LintViolation(self.rule_id, "warning", f"saw {subject}")]


class TestRunRules:
    def test_runs_in_order(self) -> None:
        report = run_rules([_Rule("A"), _Rule("B")], "x")
        assert [v.rule_id for v in report.violations] == ["A", "B"]
        assert report.violations[0].message == "saw x"

    def test_failing_rule_is_skipped(self) -> None:
        report = run_rules([_Rule("A", fail=True), _Rule("B")], "x")
        assert [v.rule_id for v in report.violations] == ["B"]
