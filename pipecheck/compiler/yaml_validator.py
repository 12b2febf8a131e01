"""Pipeline validator - checks a parsed pipeline document against the catalogs.

The validator collects problems instead of raising them. Every check runs
and all errors come back together, so one call reports everything wrong with
a document.
"""

from __future__ import annotations

from typing import Any

from pipecheck.compiler.field_validator import validate_fields
from pipecheck.compiler.results import (
    ROOT,
    ValidationError,
    ValidationResult,
    format_validation_errors,
)
from pipecheck.compiler.yaml_parser import (
    is_pipeline_document,
    parse_pipeline_text,
    split_documents,
)
from pipecheck.kernel.catalog.aliases import resolve_component
from pipecheck.kernel.catalog.components import VALID_BUFFERS, WRAPPER_COMPONENTS, component_type
from pipecheck.kernel.catalog.models import ComponentCategory
from pipecheck.kernel.catalog.registry import SchemaRegistry, get_registry
from pipecheck.kernel.config.models import WarningSeverity
from pipecheck.kernel.exceptions import ParseError
from pipecheck.kernel.linting.bloblang_rules import (
    EXPRESSION_KEYS,
    QUERY_PARENT_KEYS,
    lint_bloblang,
    lint_interpolations,
)
from pipecheck.kernel.linting.compatibility_rules import run_compatibility_rules
from pipecheck.kernel.linting.models import LintViolation
from pipecheck.kernel.logging import get_logger

__all__ = [
    "PipelineValidator",
    "ValidationError",
    "ValidationResult",
    "format_validation_errors",
    "validate_pipeline",
    "validate_pipeline_yaml",
]

logger = get_logger(__name__)

# Section names invented by generators that are not pipeline sections
HALLUCINATED_KEYS = (
    "components", "with", "steps", "tasks", "stages", "jobs",
    "sources", "sinks", "transforms", "actions", "flows",
)  # fmt: skip
KUBERNETES_KEYS = ("apiVersion", "kind", "metadata", "spec", "version")
VALID_PIPELINE_KEYS = frozenset({"processors", "threads"})
KNOWN_TOP_LEVEL_KEYS = frozenset({
    "input", "output", "pipeline", "buffer", "resources",
    "cache_resources", "rate_limit_resources", "processor_resources",
    "input_resources", "output_resources",
    "http", "logger", "metrics", "tracer", "shutdown_timeout", "shutdown_delay", "tests",
})  # fmt: skip

_STRUCTURE_HINT = "Expanso pipelines use: input:, pipeline: processors: [...], output:"
_SECTION_HINT = (
    "Structure: input: <type>: <config>, pipeline: processors: [...], output: <type>: <config>"
)
_MISSING_HINTS = {
    "input": "Add an input section like: input: kafka: addresses: [...]",
    "output": "Add an output section like: output: aws_s3: bucket: my-bucket",
}
_RESOURCE_SECTIONS: tuple[tuple[str, ComponentCategory], ...] = (
    ("cache_resources", "cache"),
    ("rate_limit_resources", "rate_limit"),
    ("processor_resources", "processor"),
    ("input_resources", "input"),
    ("output_resources", "output"),
)
# Processors whose value is itself a list of processors
_PROCESSOR_LIST_TYPES = frozenset({"try", "catch", "for_each", "processors"})

MULTIPLE_DOCUMENTS_ERROR = ValidationError(
    ROOT,
    "Multiple pipeline documents detected. A pipeline must be a single YAML document",
    "Combine all processors into one pipeline: processors: [...] array. Do not use --- separators",
)


class PipelineValidator:
    """Validates parsed pipeline documents.

    Parameters
    ----------
    registry : SchemaRegistry | None
        Catalog to validate against; the built-in catalog by default
    compatibility : bool
        Run the cross-component compatibility rules and report them as warnings
    warning_severity : WarningSeverity
        Lowest compatibility severity reported
    """

    __slots__ = ("registry", "compatibility", "warning_severity")

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        *,
        compatibility: bool = True,
        warning_severity: WarningSeverity = "warning",
    ) -> None:
        self.registry = registry or get_registry()
        self.compatibility = compatibility
        self.warning_severity = warning_severity

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def validate(self, config: Any) -> ValidationResult:
        """Validate a parsed document. Never raises for malformed documents."""
        result = ValidationResult()
        if not isinstance(config, dict):
            result.errors.append(
                ValidationError(ROOT, "Pipeline configuration must be an object")
            )
            return result

        errors = result.errors
        self._check_foreign_keys(config, errors, result.warnings)

        for section in ("input", "output"):
            if section not in config:
                errors.append(
                    ValidationError(
                        ROOT, f'Missing required "{section}" section', _MISSING_HINTS[section]
                    )
                )
            else:
                self._validate_component(config[section], section, section, errors)

        section = config.get("pipeline")
        if isinstance(section, dict) and isinstance(section.get("processors"), list):
            self._validate_processor_list(section["processors"], "pipeline.processors", errors)

        self._validate_buffer(config.get("buffer"), errors)
        self._validate_resources(config, errors)
        errors.extend(self._lint_expressions(config))

        if self.compatibility:
            report = run_compatibility_rules(config)
            result.warnings.extend(report.warning_lines(self.warning_severity))
        logger.debug(
            "Validated pipeline: {errors} errors, {warnings} warnings",
            errors=len(result.errors),
            warnings=len(result.warnings),
        )
        return result

    def validate_text(self, text: str) -> ValidationResult:
        """Check for multiple documents, parse ``text`` and validate it."""
        documents = split_documents(text)
        pipelines = [doc for doc in documents if is_pipeline_document(doc)]
        if len(pipelines) > 1:
            return ValidationResult(errors=[MULTIPLE_DOCUMENTS_ERROR])
        source = pipelines[0] if len(documents) > 1 and pipelines else text

        try:
            config = parse_pipeline_text(source)
        except ParseError as e:
            logger.debug("Parse failure: {error}", error=e)
            return ValidationResult(
                errors=[ValidationError(ROOT, f"Failed to parse YAML: {e}")]
            )
        return self.validate(config)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _check_foreign_keys(
        self, config: dict[str, Any], errors: list[ValidationError], warnings: list[str]
    ) -> None:
        for key in HALLUCINATED_KEYS:
            if key in config:
                errors.append(
                    ValidationError(
                        f"root.{key}",
                        f'Invalid key "{key}". Expanso pipelines use "input", "pipeline", '
                        'and "output"',
                        _SECTION_HINT,
                    )
                )
        for key in KUBERNETES_KEYS:
            if key in config:
                errors.append(
                    ValidationError(
                        f"root.{key}",
                        f'Invalid Kubernetes-style key "{key}". This is not a K8s manifest',
                        _STRUCTURE_HINT,
                    )
                )
        if isinstance(config.get("type"), str):
            errors.append(
                ValidationError(
                    "root.type",
                    f'Invalid top-level "type: {config["type"]}". '
                    "This looks like hallucinated syntax",
                    "Pipeline components are defined as: input: <component_type>: <config>",
                )
            )
        if "name" in config and "on" in config:
            errors.append(
                ValidationError(
                    ROOT,
                    "This looks like a GitHub Actions workflow, not an Expanso pipeline",
                    _STRUCTURE_HINT,
                )
            )
        if "services" in config or "volumes" in config:
            errors.append(
                ValidationError(
                    ROOT,
                    "This looks like a Docker Compose file, not an Expanso pipeline",
                    _STRUCTURE_HINT,
                )
            )

        section = config.get("pipeline")
        if isinstance(section, dict):
            for key in section:
                if key not in VALID_PIPELINE_KEYS:
                    errors.append(
                        ValidationError(
                            f"pipeline.{key}",
                            f'Invalid pipeline key "{key}". Use "processors" for transformations',
                            "Correct structure: pipeline: processors: [- mapping: ..., - jq: ...]",
                        )
                    )
        elif section is not None:
            errors.append(
                ValidationError(
                    "pipeline",
                    "pipeline must be an object",
                    "Correct structure: pipeline: processors: [- mapping: ..., - jq: ...]",
                )
            )

        flagged = {*HALLUCINATED_KEYS, *KUBERNETES_KEYS, "type", "services", "volumes"}
        if "on" in config:
            flagged.update(("name", "on"))
        for key in config:
            if key not in KNOWN_TOP_LEVEL_KEYS and key not in flagged:
                warnings.append(f'Unknown top-level key "{key}" will be ignored')

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def _validate_component(
        self,
        component: Any,
        path: str,
        category: ComponentCategory,
        errors: list[ValidationError],
    ) -> None:
        if not isinstance(component, dict):
            errors.append(ValidationError(path, f"{path} must be an object"))
            return

        name = component_type(component)
        if name is None:
            errors.append(
                ValidationError(
                    path,
                    f"No component type found in {path}",
                    "Specify a component type like: kafka:, aws_s3:, http_server:, etc.",
                )
            )
            return

        if category in ("input", "output") and isinstance(component.get("processors"), list):
            self._validate_processor_list(component["processors"], f"{path}.processors", errors)

        if not self.registry.is_known(name, category):
            errors.append(self._unknown_component(name, path, category))
            return

        value = component.get(name)
        type_path = f"{path}.{name}"
        if name in WRAPPER_COMPONENTS:
            self._validate_wrapper(name, value, type_path, category, errors)
            return

        schema = self.registry.get(name, category)
        if schema is not None:
            errors.extend(validate_fields(value, schema, type_path))

        if category == "processor":
            if name in _PROCESSOR_LIST_TYPES and isinstance(value, list):
                self._validate_processor_list(value, type_path, errors)
            elif isinstance(value, dict) and isinstance(value.get("processors"), list):
                self._validate_processor_list(value["processors"], f"{type_path}.processors", errors)

    def _validate_processor_list(
        self, processors: list[Any], path: str, errors: list[ValidationError]
    ) -> None:
        for i, proc in enumerate(processors):
            self._validate_component(proc, f"{path}[{i}]", "processor", errors)

    def _validate_wrapper(
        self,
        name: str,
        value: Any,
        path: str,
        category: ComponentCategory,
        errors: list[ValidationError],
    ) -> None:
        """Validate the children of a wrapper; the wrapper's own fields are not checked."""
        if name in ("try", "catch") and isinstance(value, list):
            self._validate_processor_list(value, path, errors)
        elif name == "fallback" and isinstance(value, list):
            for i, child in enumerate(value):
                self._validate_component(child, f"{path}[{i}]", category, errors)
        elif name == "broker" and isinstance(value, dict):
            key = "inputs" if category == "input" else "outputs"
            children = value.get(key)
            if isinstance(children, list):
                for i, child in enumerate(children):
                    self._validate_component(child, f"{path}.{key}[{i}]", category, errors)
        elif name == "switch":
            cases = value.get("cases") if isinstance(value, dict) else value
            if not isinstance(cases, list):
                return
            prefix = f"{path}.cases" if isinstance(value, dict) else path
            for i, case in enumerate(cases):
                if not isinstance(case, dict):
                    continue
                if category == "processor" and isinstance(case.get("processors"), list):
                    self._validate_processor_list(
                        case["processors"], f"{prefix}[{i}].processors", errors
                    )
                elif category == "output" and "output" in case:
                    self._validate_component(
                        case["output"], f"{prefix}[{i}].output", category, errors
                    )

    @staticmethod
    def _unknown_component(
        name: str, path: str, category: ComponentCategory
    ) -> ValidationError:
        resolution = resolve_component(name, category)
        label = category.replace("_", " ")
        if resolution is not None and resolution.candidates:
            suggestion = f"Did you mean: {', '.join(resolution.candidates)}?"
        else:
            suggestion = f"Check the Expanso documentation for valid {label} types"
        return ValidationError(f"{path}.{name}", f'Unknown {label} type: "{name}"', suggestion)

    # ------------------------------------------------------------------
    # Buffer and resources
    # ------------------------------------------------------------------

    def _validate_buffer(self, buffer: Any, errors: list[ValidationError]) -> None:
        if not isinstance(buffer, dict) or not buffer:
            return
        name = next(iter(buffer))
        if name not in VALID_BUFFERS:
            errors.append(
                ValidationError(
                    f"buffer.{name}",
                    f'Unknown buffer type: "{name}"',
                    "Valid buffer types are: " + ", ".join(sorted(VALID_BUFFERS)),
                )
            )
            return
        schema = self.registry.get(name, "buffer")
        if schema is not None:
            errors.extend(validate_fields(buffer[name], schema, f"buffer.{name}"))

    def _validate_resources(self, config: dict[str, Any], errors: list[ValidationError]) -> None:
        for section, category in _RESOURCE_SECTIONS:
            entries = config.get(section)
            if entries is None:
                continue
            if not isinstance(entries, list):
                errors.append(
                    ValidationError(
                        section,
                        f"{section} must be a list",
                        f"Use: {section}: [- label: my_resource, ...]",
                    )
                )
                continue
            for i, entry in enumerate(entries):
                path = f"{section}[{i}]"
                if isinstance(entry, dict) and not entry.get("label"):
                    errors.append(
                        ValidationError(
                            path,
                            f"Resource in {section} has no label",
                            "Add: label: my_resource and reference it by that label",
                        )
                    )
                self._validate_component(entry, path, category, errors)

    # ------------------------------------------------------------------
    # Bloblang
    # ------------------------------------------------------------------

    def _lint_expressions(self, config: dict[str, Any]) -> list[ValidationError]:
        violations: list[LintViolation] = []
        _walk_expressions(config, "", violations)
        return [ValidationError(v.location, v.message, v.suggestion) for v in violations]


def _walk_expressions(value: Any, path: str, out: list[LintViolation]) -> None:
    """Collect lint violations from every expression field and interpolation under ``value``."""
    if isinstance(value, dict):
        for key, child in value.items():
            child_path = f"{path}.{key}" if path else str(key)
            if key in EXPRESSION_KEYS and isinstance(child, str):
                out.extend(lint_bloblang(child, child_path))
            elif key in QUERY_PARENT_KEYS and isinstance(child, dict):
                query = child.get("query")
                if isinstance(query, str):
                    out.extend(lint_bloblang(query, f"{child_path}.query"))
                rest = {k: v for k, v in child.items() if k != "query"}
                _walk_expressions(rest, child_path, out)
            else:
                _walk_expressions(child, child_path, out)
    elif isinstance(value, list):
        for i, item in enumerate(value):
            _walk_expressions(item, f"{path}[{i}]", out)
    elif isinstance(value, str) and "${!" in value:
        out.extend(lint_interpolations(value, path))


# ============================================================================
# Module-level API
# ============================================================================


def validate_pipeline(
    config: Any,
    *,
    compatibility: bool = True,
    warning_severity: WarningSeverity = "warning",
) -> ValidationResult:
    """Validate an already parsed pipeline document.

    >>> validate_pipeline({"input": {"stdin": {}}, "output": {"stdout": {}}}).valid
    True
    >>> [e.message for e in validate_pipeline({"input": {"stdin": {}}}).errors]
    ['Missing required "output" section']
    """
    validator = PipelineValidator(compatibility=compatibility, warning_severity=warning_severity)
    return validator.validate(config)


def validate_pipeline_yaml(
    text: str,
    *,
    compatibility: bool = True,
    warning_severity: WarningSeverity = "warning",
) -> ValidationResult:
    """Parse and validate pipeline text.

    Parameters
    ----------
    text : str
        Pipeline document (YAML or JSON)
    compatibility : bool
        Report compatibility warnings
    warning_severity : WarningSeverity
        Lowest compatibility severity reported

    Returns
    -------
    ValidationResult
        A text with several ``---``-separated pipelines gives one "multiple
        documents" error. Text that cannot be parsed gives one "Failed to
        parse YAML" error.
    """
    validator = PipelineValidator(compatibility=compatibility, warning_severity=warning_severity)
    return validator.validate_text(text)
