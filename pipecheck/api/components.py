"""Component and Bloblang reference API.

Read-only lookups over the built-in catalogs, returned as JSON-ready
dictionaries for protocol servers and the CLI.
"""

from __future__ import annotations

from typing import Any

from pipecheck.kernel.catalog import (
    BloblangItem,
    ComponentCategory,
    ComponentSchema,
    format_component_schema,
    get_bloblang_by_category,
    get_bloblang_item,
    get_registry,
    search_bloblang,
)


def _schema_to_dict(schema: ComponentSchema) -> dict[str, Any]:
    return {
        "name": schema.name,
        "category": schema.category,
        "description": schema.description,
        "fields": {
            name: spec.model_dump(mode="json", exclude_none=True)
            for name, spec in schema.fields.items()
        },
        "examples": list(schema.examples),
        "docs_url": schema.docs_url,
    }


def _item_to_dict(item: BloblangItem) -> dict[str, Any]:
    return {
        "name": item.name,
        "kind": item.kind,
        "category": item.category,
        "signature": item.signature,
        "description": item.description,
        "example": item.example,
    }


def list_components(category: ComponentCategory | None = None) -> dict[str, list[str]]:
    """Known component names grouped by category.

    Examples
    --------
    >>> "kafka" in list_components("input")["input"]
    True
    """
    return dict(get_registry().list_component_names(category))


def get_component_schema(
    name: str, category: ComponentCategory | None = None
) -> dict[str, Any] | None:
    """Schema of one component, or None when no detailed schema exists."""
    schema = get_registry().get(name, category)
    return _schema_to_dict(schema) if schema is not None else None


def describe_component(name: str, category: ComponentCategory | None = None) -> str:
    """Markdown documentation of one component.

    Raises
    ------
    UnknownComponentError
        If no detailed schema exists for ``name``
    """
    return format_component_schema(get_registry().require(name, category))


def search_components(
    query: str, category: ComponentCategory | None = None
) -> list[dict[str, Any]]:
    """Components whose name or description matches ``query``."""
    return [
        {"name": s.name, "category": s.category, "description": s.description}
        for s in get_registry().search_components(query, category)
    ]


def lookup_bloblang(query: str = "", category: str | None = None) -> list[dict[str, Any]]:
    """Bloblang functions and methods matching ``query``.

    An exact name returns that single entry. An empty query lists
    ``category`` (or everything when no category is given).
    """
    scope = get_bloblang_by_category(category or "all")
    if not query:
        return [_item_to_dict(item) for item in scope]
    exact = get_bloblang_item(query)
    if exact is not None and exact in scope:
        return [_item_to_dict(exact)]
    items = [item for item in search_bloblang(query) if item in scope]
    return [_item_to_dict(item) for item in items]
