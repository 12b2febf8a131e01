"""Tests for pipecheck.compiler.results."""

from pipecheck.compiler.results import (
    ROOT,
    ValidationError,
    ValidationResult,
    format_validation_errors,
)


class TestValidationError:
    def test_to_dict_omits_missing_suggestion(self) -> None:
        assert ValidationError("input", "bad").to_dict() == {"path": "input", "message": "bad"}

    def test_to_dict_with_suggestion(self) -> None:
        error = ValidationError("input.kafaka", "Unknown", "Did you mean: kafka?")
        assert error.to_dict() == {
            "path": "input.kafaka",
            "message": "Unknown",
            "suggestion": "Did you mean: kafka?",
        }


class TestValidationResult:
    def test_empty_is_valid(self) -> None:
        result = ValidationResult()
        assert result.valid
        assert bool(result)
        assert result.to_dict() == {"valid": True, "errors": [], "warnings": []}

    def test_errors_make_invalid(self) -> None:
        result = ValidationResult(errors=[ValidationError(ROOT, "broken")])
        assert not result.valid
        assert not result
        assert result.to_dict()["errors"] == [{"path": "root", "message": "broken"}]

    def test_warnings_keep_valid(self) -> None:
        assert ValidationResult(warnings=["careful"]).valid

    def test_merge(self) -> None:
        a = ValidationResult(errors=[ValidationError("a", "x")], warnings=["w1", "w2"])
        b = ValidationResult(errors=[ValidationError("b", "y")], warnings=["w2", "w3"])
        merged = a.merge(b)
        assert [e.path for e in merged.errors] == ["a", "b"]
        assert merged.warnings == ["w1", "w2", "w3"]
        assert len(a.errors) == 1


class TestFormatValidationErrors:
    def test_valid(self) -> None:
        assert format_validation_errors(ValidationResult()) == "✓ Pipeline configuration is valid"

    def test_invalid_with_suggestion_and_warning(self) -> None:
        result = ValidationResult(
            errors=[
                ValidationError("input.kafaka", 'Unknown input type: "kafaka"', "Did you mean: kafka?"),
                ValidationError(ROOT, 'Missing required "output" section'),
            ],
            warnings=["try-without-catch: no catch"],
        )
        assert format_validation_errors(result).splitlines() == [
            "✗ Pipeline validation failed:",
            "",
            '  • input.kafaka: Unknown input type: "kafaka"',
            "    → Did you mean: kafka?",
            '  • root: Missing required "output" section',
            "",
            "Warnings:",
            "  ! try-without-catch: no catch",
        ]
