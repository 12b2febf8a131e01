"""Read-only schema registry keyed by (category, name)."""

from __future__ import annotations

import json
from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from pipecheck.kernel.catalog.components import COMPONENT_NAMES, sorted_names
from pipecheck.kernel.catalog.inputs import INPUT_SCHEMAS
from pipecheck.kernel.catalog.models import (
    CATEGORY_PRECEDENCE,
    ComponentCategory,
    ComponentSchema,
    FieldSchema,
)
from pipecheck.kernel.catalog.outputs import OUTPUT_SCHEMAS
from pipecheck.kernel.catalog.processors import PROCESSOR_SCHEMAS
from pipecheck.kernel.catalog.resources import BUFFER_SCHEMAS, CACHE_SCHEMAS, RATE_LIMIT_SCHEMAS
from pipecheck.kernel.exceptions import UnknownComponentError
from pipecheck.kernel.fuzzy import nearest_names

SCHEMAS: MappingProxyType[ComponentCategory, Mapping[str, ComponentSchema]] = MappingProxyType({
    "input": INPUT_SCHEMAS,
    "processor": PROCESSOR_SCHEMAS,
    "output": OUTPUT_SCHEMAS,
    "cache": CACHE_SCHEMAS,
    "rate_limit": RATE_LIMIT_SCHEMAS,
    "buffer": BUFFER_SCHEMAS,
})


class SchemaRegistry:
    """Lookup over the per-category component catalogs.

    Input, processor and output catalogs are distinct: ``kafka`` has one
    field set as an input and another as an output. The registry never
    changes after construction.
    """

    __slots__ = ("_schemas", "_names")

    def __init__(
        self,
        schemas: Mapping[ComponentCategory, Mapping[str, ComponentSchema]] = SCHEMAS,
        names: Mapping[ComponentCategory, frozenset[str]] = COMPONENT_NAMES,
    ) -> None:
        self._schemas = schemas
        self._names = names

    def get(self, name: str, category: ComponentCategory | None = None) -> ComponentSchema | None:
        """Return the schema for ``name``.

        Parameters
        ----------
        name : str
            Component type name
        category : ComponentCategory | None
            Restrict the lookup to one catalog. When omitted, catalogs are
            searched in the order input, processor, output, cache,
            rate_limit, buffer and the first hit wins.

        Returns
        -------
        ComponentSchema | None
            None when no detailed schema is known, even if the name itself is
        """
        categories = (category,) if category is not None else CATEGORY_PRECEDENCE
        for cat in categories:
            schema = self._schemas.get(cat, {}).get(name)
            if schema is not None:
                return schema
        return None

    def require(self, name: str, category: ComponentCategory | None = None) -> ComponentSchema:
        """Like :meth:`get`, but raise :class:`UnknownComponentError` on a miss."""
        schema = self.get(name, category)
        if schema is not None:
            return schema
        pool: list[str] = []
        for cat in (category,) if category is not None else CATEGORY_PRECEDENCE:
            pool.extend(self._schemas.get(cat, {}))
        raise UnknownComponentError(name, category, nearest_names(name, pool))

    def is_known(self, name: str, category: ComponentCategory) -> bool:
        """Whether ``name`` is a known component of ``category``, documented or not."""
        return name in self._names.get(category, frozenset())

    def list_component_names(
        self, category: ComponentCategory | None = None
    ) -> dict[ComponentCategory, list[str]]:
        """Sorted known names, grouped by category."""
        categories = (category,) if category is not None else CATEGORY_PRECEDENCE
        return {cat: sorted(self._names.get(cat, frozenset())) for cat in categories}

    def list_schemas(self, category: ComponentCategory | None = None) -> list[ComponentSchema]:
        """All detailed schemas, in category precedence then name order."""
        categories = (category,) if category is not None else CATEGORY_PRECEDENCE
        return [
            self._schemas[cat][name]
            for cat in categories
            for name in sorted(self._schemas.get(cat, {}))
        ]

    def search_components(
        self, query: str, category: ComponentCategory | None = None
    ) -> list[ComponentSchema]:
        """Schemas whose name or description contains ``query`` (case-insensitive).

        Name hits come before description hits.
        """
        needle = query.lower().strip()
        if not needle:
            return self.list_schemas(category)
        schemas = self.list_schemas(category)
        by_name = [s for s in schemas if needle in s.name.lower()]
        by_text = [s for s in schemas if s not in by_name and needle in s.description.lower()]
        return by_name + by_text

    def suggest(self, name: str, category: ComponentCategory) -> list[str]:
        """Up to three known names of ``category`` close to ``name``."""
        return nearest_names(name, sorted_names(category))


@lru_cache(maxsize=1)
def get_registry() -> SchemaRegistry:
    """Return the process-wide registry over the built-in catalogs."""
    return SchemaRegistry()


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _render_field(name: str, spec: FieldSchema, depth: int = 0) -> list[str]:
    indent = "  " * depth
    flags = ["required"] if spec.required else []
    if spec.default is not None:
        flags.append(f"default: `{_render_value(spec.default)}`")
    if spec.enum:
        flags.append("one of: " + ", ".join(f"`{v}`" for v in spec.enum))
    label = f"`{name}`" if name else "*(value)*"
    detail = f" ({'; '.join(flags)})" if flags else ""
    lines = [f"{indent}- {label} *{spec.type.value}*{detail}: {spec.description}".rstrip(": ")]
    for child_name, child in (spec.properties or {}).items():
        lines.extend(_render_field(child_name, child, depth + 1))
    if spec.items is not None and spec.items.properties:
        for child_name, child in spec.items.properties.items():
            lines.extend(_render_field(child_name, child, depth + 1))
    return lines


def format_component_schema(schema: ComponentSchema) -> str:
    """Render a schema as markdown: description, fields, examples, docs link."""
    lines = [f"# {schema.name} ({schema.category})", "", schema.description, ""]
    if schema.fields:
        lines.append("## Fields")
        lines.append("")
        for name, spec in schema.fields.items():
            lines.extend(_render_field(name, spec))
        lines.append("")
    for example in schema.examples:
        lines.extend(["## Example", "", "```yaml", example.rstrip(), "```", ""])
    if schema.docs_url:
        lines.append(f"Documentation: {schema.docs_url}")
    return "\n".join(lines).rstrip() + "\n"
