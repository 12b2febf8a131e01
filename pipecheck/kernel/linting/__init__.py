"""Lint rules over Bloblang expressions and whole pipelines."""

from pipecheck.kernel.linting.bloblang_rules import (
    ANTI_PATTERNS,
    EXPRESSION_KEYS,
    QUERY_PARENT_KEYS,
    BloblangAntiPattern,
    CallVerdict,
    classify_call,
    iter_calls,
    iter_interpolations,
    lint_bloblang,
    lint_interpolations,
    mask_literals,
)
from pipecheck.kernel.linting.compatibility_rules import (
    COMPATIBILITY_RULES,
    CompatibilityRule,
    ParsedPipeline,
    format_compatibility_warnings,
    parse_pipeline_for_compatibility,
    run_compatibility_rules,
)
from pipecheck.kernel.linting.models import LintReport, LintViolation, Severity
from pipecheck.kernel.linting.rules import LintRule, run_rules

__all__ = [
    "ANTI_PATTERNS",
    "COMPATIBILITY_RULES",
    "EXPRESSION_KEYS",
    "QUERY_PARENT_KEYS",
    "BloblangAntiPattern",
    "CallVerdict",
    "CompatibilityRule",
    "LintReport",
    "LintRule",
    "LintViolation",
    "ParsedPipeline",
    "Severity",
    "classify_call",
    "format_compatibility_warnings",
    "iter_calls",
    "iter_interpolations",
    "lint_bloblang",
    "lint_interpolations",
    "mask_literals",
    "parse_pipeline_for_compatibility",
    "run_compatibility_rules",
    "run_rules",
]
