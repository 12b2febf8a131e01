"""Lint violations and the report that collects them.

Bloblang lint violations become validation errors. Compatibility
violations become ``"{rule_id}: {message}"`` warning lines filtered by a
severity floor.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Literal

Severity = Literal["error", "warning", "info"]

_SEVERITY_RANK: dict[str, int] = {"info": 0, "warning": 1, "error": 2}


@dataclass(frozen=True, slots=True)
class LintViolation:
    """One finding of a Bloblang or compatibility rule.

    ``location`` is a dotted pipeline path such as
    ``pipeline.processors[0].mapping``; it is empty for pipeline-wide findings.
    """

    rule_id: str
    severity: Severity
    message: str
    location: str = ""
    suggestion: str | None = None

    def at_least(self, severity: Severity) -> bool:
        """Whether this violation is as severe as ``severity`` or more."""
        return _SEVERITY_RANK[self.severity] >= _SEVERITY_RANK[severity]

    def as_warning(self) -> str:
        return f"{self.rule_id}: {self.message}"


class LintReport:
    """Ordered violations from one run of a rule set."""

    __slots__ = ("_violations",)

    def __init__(self, violations: Iterable[LintViolation] = ()) -> None:
        self._violations: list[LintViolation] = list(violations)

    def __iter__(self) -> Iterator[LintViolation]:
        return iter(self._violations)

    def __len__(self) -> int:
        return len(self._violations)

    def add(self, violation: LintViolation) -> None:
        self._violations.append(violation)

    def extend(self, violations: Iterable[LintViolation]) -> None:
        self._violations.extend(violations)

    @property
    def violations(self) -> list[LintViolation]:
        return self._violations

    def of_severity(self, severity: Severity) -> list[LintViolation]:
        """Violations with exactly ``severity``."""
        return [v for v in self._violations if v.severity == severity]

    errors = property(lambda self: self.of_severity("error"))
    warnings = property(lambda self: self.of_severity("warning"))
    info = property(lambda self: self.of_severity("info"))

    @property
    def is_clean(self) -> bool:
        return not self._violations

    @property
    def has_errors(self) -> bool:
        return any(v.severity == "error" for v in self._violations)

    def at_least(self, severity: Severity) -> list[LintViolation]:
        """Violations at or above ``severity``, in rule order."""
        return [v for v in self._violations if v.at_least(severity)]

    def warning_lines(self, floor: Severity = "warning") -> list[str]:
        """``"{rule_id}: {message}"`` lines for violations at or above ``floor``."""
        return [v.as_warning() for v in self.at_least(floor)]
