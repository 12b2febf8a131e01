"""Validation result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

#: Path used for document-level errors
ROOT = "root"


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A single problem found in a pipeline document.

    Attributes
    ----------
    path : str
        Dotted location such as ``pipeline.processors[0].mapping``, or
        ``root`` for document-level problems
    message : str
        What is wrong
    suggestion : str | None
        How to fix it, when known
    """

    path: str
    message: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"path": self.path, "message": self.message}
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


@dataclass(slots=True)
class ValidationResult:
    """Errors and warnings collected for one document.

    ``valid`` is derived from ``errors`` so the two can never disagree.
    """

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.valid

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Return a new result holding the errors and warnings of both."""
        return ValidationResult(
            errors=[*self.errors, *other.errors],
            warnings=[*self.warnings, *(w for w in other.warnings if w not in self.warnings)],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
        }


def format_validation_errors(result: ValidationResult) -> str:
    """Render a result as plain text for terminals and chat replies."""
    if result.valid:
        lines = ["✓ Pipeline configuration is valid"]
    else:
        lines = ["✗ Pipeline validation failed:", ""]
        for error in result.errors:
            lines.append(f"  • {error.path}: {error.message}")
            if error.suggestion:
                lines.append(f"    → {error.suggestion}")
    if result.warnings:
        lines.extend(["", "Warnings:"])
        lines.extend(f"  ! {warning}" for warning in result.warnings)
    return "\n".join(lines)
