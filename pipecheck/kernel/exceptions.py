"""Exception hierarchy for pipecheck.

Problems found *in a pipeline document* are never raised: they are collected
as :class:`~pipecheck.compiler.yaml_validator.ValidationError` values. The
exceptions below cover programmer and environment errors (bad configuration,
strict lookups of unknown components) plus the parser's internal failure
signal. All of them inherit from :class:`PipecheckError`.
"""

from __future__ import annotations

# ============================================================================
# Base Exception
# ============================================================================


class PipecheckError(Exception):
    """Base exception for all pipecheck errors.

    Catch this to handle every error raised by the library.
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(PipecheckError):
    """Raised when a pipecheck configuration file or value is invalid.

    Examples
    --------
    Example usage::

        raise ConfigurationError("max_fix_iterations", "must be a positive integer")
    """

    def __init__(self, component: str, reason: str) -> None:
        """Initialize configuration error.

        Args
        ----
            component: Name of the setting or file with invalid configuration
            reason: Explanation of what's wrong
        """
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


# ============================================================================
# Parsing Errors
# ============================================================================


class ParseError(PipecheckError):
    """Raised by the structural parser when a line fits no supported form.

    The validator converts this into a single document-level error, so it
    never escapes :func:`~pipecheck.compiler.yaml_validator.validate_pipeline_yaml`.

    Examples
    --------
    Example usage::

        raise ParseError("expected 'key: value' or '- item'", line=3)
    """

    def __init__(self, reason: str, line: int | None = None) -> None:
        """Initialize parse error.

        Args
        ----
            reason: What the parser expected
            line: 1-based line number of the offending line (optional)
        """
        msg = f"line {line}: {reason}" if line is not None else reason
        super().__init__(msg)
        self.reason = reason
        self.line = line


# ============================================================================
# Registry Errors
# ============================================================================


class UnknownComponentError(PipecheckError):
    """Raised by strict registry lookups when a component name is unknown.

    Examples
    --------
    Example usage::

        raise UnknownComponentError("kafaka", "input", ["kafka", "kafka_franz"])
    """

    def __init__(
        self, name: str, category: str | None = None, suggestions: list[str] | None = None
    ) -> None:
        """Initialize unknown component error.

        Args
        ----
            name: The component name that was looked up
            category: Category searched, or None for all categories
            suggestions: Close names, if any
        """
        where = f" {category}" if category else ""
        msg = f"Unknown{where} component '{name}'"
        if suggestions:
            msg += f". Did you mean: {', '.join(suggestions)}?"
        super().__init__(msg)
        self.name = name
        self.category = category
        self.suggestions = suggestions or []


# ============================================================================
# External Service Errors
# ============================================================================


class ExternalValidatorError(PipecheckError):
    """Raised inside the external validator driver when the service fails.

    The driver catches it and fails open; callers never see it.
    """

    def __init__(self, url: str, reason: str) -> None:
        """Initialize external validator error.

        Args
        ----
            url: Endpoint that was called
            reason: Transport or protocol failure description
        """
        super().__init__(f"External validator at '{url}' failed: {reason}")
        self.url = url
        self.reason = reason
