"""Pipeline validation API.

Provides the functions that callers (chat handlers, protocol servers, the
CLI) use to check a pipeline document. Combines auto-fix, structural
validation, compatibility warnings and the optional external validator
into one JSON-ready dictionary.
"""

from __future__ import annotations

from typing import Any

from pipecheck.compiler.autofix import apply_auto_fixes
from pipecheck.compiler.config_loader import get_default_config
from pipecheck.compiler.results import ValidationResult
from pipecheck.compiler.yaml_validator import validate_pipeline_yaml
from pipecheck.drivers.external_validator import ExternalValidatorDriver
from pipecheck.kernel.config.models import PipecheckConfig
from pipecheck.kernel.logging import get_logger

logger = get_logger(__name__)


def _validate(text: str, config: PipecheckConfig) -> ValidationResult:
    return validate_pipeline_yaml(
        text,
        compatibility=config.compatibility_checks,
        warning_severity=config.warning_severity,
    )


def _local_check(text: str, config: PipecheckConfig) -> tuple[ValidationResult, dict[str, Any]]:
    """Run auto-fix (when enabled) and validation; return the result and the fix fields."""
    extra: dict[str, Any] = {}
    checked = text
    if config.auto_fix:
        fixed = apply_auto_fixes(text, max_iterations=config.max_fix_iterations)
        if fixed.was_modified:
            checked = fixed.corrected_text
            extra["fixed_yaml"] = fixed.corrected_text
            extra["fixes_applied"] = list(fixed.applied_fixes)
        if fixed.suggested_fixes:
            extra["suggested_fixes"] = [fix.to_dict() for fix in fixed.suggested_fixes]
    return _validate(checked, config), extra


def check_pipeline(text: str, config: PipecheckConfig | None = None) -> dict[str, Any]:
    """Validate a pipeline document, auto-fixing it first when configured.

    Parameters
    ----------
    text : str
        Pipeline document as a string
    config : PipecheckConfig | None
        Settings; defaults (with environment overrides) when omitted

    Returns
    -------
    dict
        Result with keys:
        - valid: bool - validity of the fixed text when fixes applied, else of the input
        - errors: list[dict] - ``{path, message, suggestion?}`` entries
        - warnings: list[str] - non-fatal findings
        - fixed_yaml: str - corrected document (only when fixes applied)
        - fixes_applied: list[str] - applied-fix strings (only when fixes applied)
        - suggested_fixes: list[dict] - fixes not safe to apply (only when any)

    Examples
    --------
    >>> result = check_pipeline('''
    ... input:
    ...   kafaka:
    ...     addresses: [localhost:9092]
    ...     topics: [events]
    ... output:
    ...   stdout: {}
    ... ''')
    >>> result["valid"], result["fixes_applied"]
    (True, ['Component: "kafaka" -> "kafka"'])
    """
    config = config or get_default_config()
    result, extra = _local_check(text, config)
    return {**result.to_dict(), **extra}


async def avalidate_with_external(
    text: str,
    config: PipecheckConfig | None = None,
    driver: ExternalValidatorDriver | None = None,
) -> dict[str, Any]:
    """Like :func:`check_pipeline`, then merge in the external validator's verdict.

    The external call runs only when ``config.external.enabled`` is set or a
    ``driver`` is passed. A failing service contributes nothing.

    Parameters
    ----------
    text : str
        Pipeline document as a string
    config : PipecheckConfig | None
        Settings; defaults when omitted
    driver : ExternalValidatorDriver | None
        Driver to use instead of one built from ``config.external``

    Returns
    -------
    dict
        Same shape as :func:`check_pipeline`
    """
    config = config or get_default_config()
    result, extra = _local_check(text, config)

    checked = extra.get("fixed_yaml", text)
    if driver is not None:
        external = await driver.avalidate(checked)
    elif config.external.enabled:
        async with ExternalValidatorDriver.from_config(config.external) as owned:
            external = await owned.avalidate(checked)
    else:
        return {**result.to_dict(), **extra}

    logger.debug("External validator returned {count} errors", count=len(external.errors))
    return {**result.merge(external).to_dict(), **extra}
