"""CLI command modules."""

from . import bloblang_cmd, components_cmd, fix_cmd, schema_cmd, validate_cmd

__all__ = [
    "bloblang_cmd",
    "components_cmd",
    "fix_cmd",
    "schema_cmd",
    "validate_cmd",
]
