"""Tests for pipecheck.kernel.exceptions."""

import pytest

from pipecheck.kernel.exceptions import (
    ConfigurationError,
    ExternalValidatorError,
    ParseError,
    PipecheckError,
    UnknownComponentError,
)


class TestPipecheckError:
    """Test the base exception."""

    def test_is_exception(self) -> None:
        assert issubclass(PipecheckError, Exception)

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("auto_fix", "must be a boolean"),
            ParseError("bad line", line=3),
            UnknownComponentError("kafaka"),
            ExternalValidatorError("http://validator", "HTTP 500"),
        ],
    )
    def test_all_errors_inherit_base(self, error: PipecheckError) -> None:
        assert isinstance(error, PipecheckError)


class TestConfigurationError:
    """Test ConfigurationError formatting and attributes."""

    def test_message(self) -> None:
        error = ConfigurationError("max_fix_iterations", "must be a positive integer")
        assert str(error) == (
            "Configuration error in 'max_fix_iterations': must be a positive integer"
        )
        assert error.component == "max_fix_iterations"
        assert error.reason == "must be a positive integer"


class TestParseError:
    """Test ParseError formatting."""

    def test_with_line(self) -> None:
        error = ParseError("expected 'key: value'", line=7)
        assert str(error) == "line 7: expected 'key: value'"
        assert error.line == 7
        assert error.reason == "expected 'key: value'"

    def test_without_line(self) -> None:
        error = ParseError("unterminated flow collection")
        assert str(error) == "unterminated flow collection"
        assert error.line is None


class TestUnknownComponentError:
    """Test UnknownComponentError formatting."""

    def test_with_category_and_suggestions(self) -> None:
        error = UnknownComponentError("kafaka", "input", ["kafka", "kafka_franz"])
        assert str(error) == "Unknown input component 'kafaka'. Did you mean: kafka, kafka_franz?"
        assert error.suggestions == ["kafka", "kafka_franz"]

    def test_bare(self) -> None:
        error = UnknownComponentError("nope")
        assert str(error) == "Unknown component 'nope'"
        assert error.category is None
        assert error.suggestions == []


class TestExternalValidatorError:
    """Test ExternalValidatorError formatting."""

    def test_message(self) -> None:
        error = ExternalValidatorError("http://validator/validate", "HTTP 503")
        assert "http://validator/validate" in str(error)
        assert error.reason == "HTTP 503"
        assert error.url == "http://validator/validate"
