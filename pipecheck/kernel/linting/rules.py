"""Lint rule protocol and runner."""

from __future__ import annotations

from typing import Any, Protocol

from pipecheck.kernel.linting.models import LintReport, LintViolation
from pipecheck.kernel.logging import get_logger

logger = get_logger(__name__)


class LintRule(Protocol):
    """Protocol for a single lint rule."""

    rule_id: str
    severity: str
    description: str

    def check(self, subject: Any) -> list[LintViolation]:
        """Run this rule against the subject and return violations."""
        ...


def run_rules(rules: list[LintRule] | tuple[LintRule, ...], subject: Any) -> LintReport:
    """Run lint rules against a subject and return a report.

    A rule that raises while evaluating is skipped; its failure is logged
    at DEBUG and never reported as a violation.
    """
    report = LintReport()
    for rule in rules:
        try:
            violations = rule.check(subject)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.debug("Lint rule {rule_id} skipped: {error}", rule_id=rule.rule_id, error=e)
            continue
        report.extend(violations)
    return report
