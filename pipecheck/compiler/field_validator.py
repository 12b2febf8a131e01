"""Field-level validation of a component's configuration against its schema."""

from __future__ import annotations

import json
import re
from typing import Any

from pipecheck.compiler.results import ValidationError
from pipecheck.kernel.catalog.models import ComponentSchema, FieldSchema, FieldType
from pipecheck.kernel.fuzzy import nearest_names

DURATION_RE = re.compile(r"^(?:\d+(?:\.\d+)?(?:ns|us|µs|ms|s|m|h))+$")
_NUMBER_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_BOOL_STRINGS = frozenset({"true", "false", "yes", "no", "on", "off"})

_PLACEHOLDERS = {
    FieldType.STRING: "value",
    FieldType.INTERPOLATED_STRING: "value",
    FieldType.BLOBLANG: "root = this",
    FieldType.NUMBER: 1,
    FieldType.BOOLEAN: True,
    FieldType.ARRAY: [],
    FieldType.OBJECT: {},
    FieldType.DURATION: "1s",
}


def is_interpolated(value: Any) -> bool:
    """Whether ``value`` is resolved at runtime (``${! ... }`` or ``${ENV}``)."""
    return isinstance(value, str) and "${" in value


def is_duration(value: str) -> bool:
    """Whether ``value`` is a duration like ``1s``, ``500ms`` or ``1h30m``.

    Empty strings (meaning "disabled") and interpolations are accepted.
    """
    return value == "" or is_interpolated(value) or DURATION_RE.match(value) is not None


def enum_accepts(enum: tuple[str, ...], value: Any) -> bool:
    """Whether ``value`` is allowed by ``enum``.

    Entries ending in ``:X`` or ``:N`` are prefixes: ``delim:X`` accepts
    ``delim:,``. Matching is case-insensitive.
    """
    text = str(value).lower()
    for entry in enum:
        option = entry.lower()
        if option.endswith((":x", ":n")):
            prefix = option[:-1]
            if text.startswith(prefix) and len(text) > len(prefix):
                return True
        elif text == option:
            return True
    return False


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


def example_literal(spec: FieldSchema) -> str:
    """Literal used in "missing field" hints: first example, else default, else a placeholder."""
    if spec.examples:
        value = spec.examples[0]
    elif spec.default is not None:
        value = spec.default
    else:
        value = _PLACEHOLDERS[spec.type]
    return value if isinstance(value, str) else json.dumps(value)


def check_value(value: Any, spec: FieldSchema, path: str, name: str) -> list[ValidationError]:
    """Type-check one present value.

    Parameters
    ----------
    value : Any
        Value from the document
    spec : FieldSchema
        Its schema
    path : str
        Location reported on errors
    name : str
        Field name used in messages

    Returns
    -------
    list[ValidationError]
        Problems found, possibly nested ones from array items and object properties
    """
    if value is None:
        return []

    expected = spec.type
    actual = _type_name(value)
    mismatch = ValidationError(
        path,
        f'Invalid type for "{name}": expected {expected.value}, got {actual}',
    )

    if expected in (FieldType.STRING, FieldType.INTERPOLATED_STRING):
        if actual in ("array", "object"):
            return [mismatch]
    elif expected is FieldType.BLOBLANG:
        if not isinstance(value, str):
            return [mismatch]
    elif expected is FieldType.NUMBER:
        if isinstance(value, bool):
            return [mismatch]
        if isinstance(value, str) and not (_NUMBER_RE.match(value) or is_interpolated(value)):
            return [mismatch]
        if actual in ("array", "object"):
            return [mismatch]
    elif expected is FieldType.BOOLEAN:
        if isinstance(value, str):
            if value.lower() not in _BOOL_STRINGS and not is_interpolated(value):
                return [mismatch]
        elif not isinstance(value, bool):
            return [mismatch]
    elif expected is FieldType.DURATION:
        if not isinstance(value, str):
            return [
                ValidationError(
                    path,
                    f'Invalid duration for "{name}": {value!r}',
                    f'Use a duration string like "{value}s" or "500ms"',
                )
            ]
        if not is_duration(value):
            return [
                ValidationError(
                    path,
                    f'Invalid duration for "{name}": "{value}"',
                    'Use <number><unit> with units ns, us, ms, s, m, h (e.g. "1s", "500ms", "1h30m")',
                )
            ]
    elif expected is FieldType.ARRAY:
        if not isinstance(value, list):
            return [mismatch]
        if spec.items is not None:
            errors: list[ValidationError] = []
            for i, item in enumerate(value):
                errors.extend(check_value(item, spec.items, f"{path}[{i}]", f"{name}[{i}]"))
            return errors
    elif expected is FieldType.OBJECT:
        if not isinstance(value, dict):
            return [mismatch]
        if spec.properties:
            errors = []
            for key, child in value.items():
                child_spec = spec.properties.get(key)
                if child_spec is not None:
                    errors.extend(check_value(child, child_spec, f"{path}.{key}", key))
            return errors

    if spec.enum and isinstance(value, (str, int, float)) and not is_interpolated(value):
        if not enum_accepts(spec.enum, value):
            return [
                ValidationError(
                    path,
                    f'Invalid value for "{name}": "{value}"',
                    "Valid values: " + ", ".join(spec.enum),
                )
            ]
    return []


def validate_fields(config: Any, schema: ComponentSchema, path: str) -> list[ValidationError]:
    """Validate a component's configuration value against ``schema``.

    Parameters
    ----------
    config : Any
        The value under the component type key (``kafka: <config>``)
    schema : ComponentSchema
        Schema of the component in its category
    path : str
        Location of the component type key, e.g. ``input.kafka``

    Returns
    -------
    list[ValidationError]
        Missing required fields, unknown fields and type errors, in that order
    """
    if schema.is_scalar:
        spec = schema.fields[""]
        if config is None or config == "":
            if spec.required:
                return [
                    ValidationError(
                        path,
                        f'Missing value for "{schema.name}"',
                        f"Add: {schema.name}: {example_literal(spec)}",
                    )
                ]
            return []
        return check_value(config, spec, path, schema.name)

    if config is None:
        config = {}
    if not isinstance(config, dict):
        return [
            ValidationError(
                path,
                f'"{schema.name}" configuration must be an object, got {_type_name(config)}',
                f"Use: {schema.name}: {{ ... }}",
            )
        ]

    errors: list[ValidationError] = []
    for name in schema.required_fields:
        if name not in config:
            errors.append(
                ValidationError(
                    f"{path}.{name}",
                    f'Missing required field "{name}" for {schema.category} "{schema.name}"',
                    f"Add: {name}: {example_literal(schema.fields[name])}",
                )
            )

    known = list(schema.fields)
    for name in config:
        if name in schema.fields:
            continue
        similar = nearest_names(str(name), known, use_edit_distance=True)
        if similar:
            suggestion = f"Did you mean: {', '.join(similar)}?"
        elif known:
            suggestion = f"Valid fields: {', '.join(sorted(known))}"
        else:
            suggestion = f'"{schema.name}" takes no fields: use {schema.name}: {{}}'
        errors.append(
            ValidationError(
                f"{path}.{name}",
                f'Unknown field "{name}" for {schema.category} "{schema.name}"',
                suggestion,
            )
        )

    for name, value in config.items():
        spec = schema.fields.get(name)
        if spec is not None:
            errors.extend(check_value(value, spec, f"{path}.{name}", name))
    return errors
