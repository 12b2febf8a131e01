"""Pipeline document compiler for pipecheck.

This package contains the lenient structural parser, the validator, the
text-level auto-fixer, plus the configuration loader.
"""

from .autofix import AutoFixResult, Fix, apply_auto_fixes
from .results import ValidationError, ValidationResult, format_validation_errors
from .yaml_parser import count_pipeline_documents, parse_pipeline_text, split_documents
from .yaml_validator import PipelineValidator, validate_pipeline, validate_pipeline_yaml


def __getattr__(name: str) -> object:
    """Lazy imports for config loader symbols."""
    _config_names = {
        "ConfigLoader",
        "clear_config_cache",
        "get_default_config",
        "load_config",
    }
    if name in _config_names:
        from pipecheck.compiler import config_loader

        return getattr(config_loader, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AutoFixResult",
    "Fix",
    "PipelineValidator",
    "ValidationError",
    "ValidationResult",
    "apply_auto_fixes",
    "count_pipeline_documents",
    "format_validation_errors",
    "parse_pipeline_text",
    "split_documents",
    "validate_pipeline",
    "validate_pipeline_yaml",
]
