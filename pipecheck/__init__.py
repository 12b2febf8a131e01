"""pipecheck - validation and auto-fix for Expanso pipeline configurations.

Checks pipeline documents (``input`` / ``pipeline.processors`` / ``output``)
against a component schema catalog, lints embedded Bloblang, and rewrites
high-confidence mistakes while surfacing ambiguous ones as suggestions.

Examples
--------
>>> from pipecheck import apply_auto_fixes, validate_pipeline_yaml
>>> fixed = apply_auto_fixes("input:\\n  kafaka: {}\\n")
>>> fixed.applied_fixes
['Component: "kafaka" -> "kafka"']
"""

from importlib.metadata import PackageNotFoundError, version

# Version is defined in pyproject.toml and read dynamically
try:
    __version__ = version("pipecheck")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for source checkouts

from pipecheck.compiler import (
    AutoFixResult,
    Fix,
    PipelineValidator,
    ValidationError,
    ValidationResult,
    apply_auto_fixes,
    format_validation_errors,
    parse_pipeline_text,
    validate_pipeline,
    validate_pipeline_yaml,
)
from pipecheck.kernel import Confidence, PipecheckConfig, PipecheckError

__all__ = [
    "AutoFixResult",
    "Confidence",
    "Fix",
    "PipecheckConfig",
    "PipecheckError",
    "PipelineValidator",
    "ValidationError",
    "ValidationResult",
    "__version__",
    "apply_auto_fixes",
    "format_validation_errors",
    "parse_pipeline_text",
    "validate_pipeline",
    "validate_pipeline_yaml",
]
