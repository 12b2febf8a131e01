"""Tests for pipecheck.kernel.catalog.registry."""

import pytest

from pipecheck.kernel.catalog.registry import (
    SCHEMAS,
    SchemaRegistry,
    format_component_schema,
    get_registry,
)
from pipecheck.kernel.exceptions import UnknownComponentError


class TestSchemaRegistry:
    """Test lookups over the built-in catalogs."""

    def setup_method(self) -> None:
        self.registry = SchemaRegistry()

    def test_get_with_category(self) -> None:
        schema = self.registry.get("kafka", "input")
        assert schema is not None
        assert schema.category == "input"
        assert schema.required_fields == ["addresses", "topics"]

    def test_categories_are_distinct(self) -> None:
        kafka_in = self.registry.get("kafka", "input")
        kafka_out = self.registry.get("kafka", "output")
        assert kafka_in is not None and kafka_out is not None
        assert "topics" in kafka_in.fields
        assert "topic" in kafka_out.fields
        assert "topics" not in kafka_out.fields

    def test_get_without_category_uses_precedence(self) -> None:
        schema = self.registry.get("kafka")
        assert schema is not None
        assert schema.category == "input"

    def test_get_unknown(self) -> None:
        assert self.registry.get("kafaka", "input") is None

    def test_known_without_schema(self) -> None:
        assert self.registry.is_known("pulsar", "input")
        assert self.registry.get("pulsar", "input") is None

    def test_require_raises_with_suggestions(self) -> None:
        with pytest.raises(UnknownComponentError) as exc_info:
            self.registry.require("stdot", "output")
        assert exc_info.value.suggestions == ["stdout"]
        assert exc_info.value.category == "output"

    def test_require_returns_schema(self) -> None:
        assert self.registry.require("mapping", "processor").is_scalar

    def test_list_component_names(self) -> None:
        names = self.registry.list_component_names("buffer")
        assert names == {"buffer": ["memory", "none", "system_window"]}

    def test_list_component_names_all_categories(self) -> None:
        names = self.registry.list_component_names()
        assert list(names) == ["input", "processor", "output", "cache", "rate_limit", "buffer"]
        assert all(items == sorted(items) for items in names.values())

    def test_list_schemas_order(self) -> None:
        schemas = self.registry.list_schemas("output")
        assert [s.name for s in schemas] == sorted(SCHEMAS["output"])

    def test_search_name_hits_first(self) -> None:
        results = self.registry.search_components("kafka")
        assert [s.name for s in results[:2]] == ["kafka", "kafka"]
        assert {s.category for s in results[:2]} == {"input", "output"}

    def test_search_empty_query_lists_all(self) -> None:
        assert self.registry.search_components("  ", "buffer") == self.registry.list_schemas(
            "buffer"
        )

    def test_suggest(self) -> None:
        assert self.registry.suggest("kafka_consumer", "input") == ["kafka"]

    def test_get_registry_is_shared(self) -> None:
        assert get_registry() is get_registry()


class TestFormatComponentSchema:
    """Test markdown rendering."""

    def test_renders_fields_examples_and_docs(self) -> None:
        schema = get_registry().require("kafka", "input")
        text = format_component_schema(schema)
        assert text.startswith("# kafka (input)")
        assert "## Fields" in text
        assert "- `addresses` *array* (required)" in text
        assert "## Example" in text
        assert "```yaml" in text
        assert "Documentation: " in text
        assert text.endswith("\n")

    def test_renders_enum_and_default(self) -> None:
        text = format_component_schema(get_registry().require("stdout", "output"))
        assert "default: `lines`" in text
        assert "one of: `lines`, `all-bytes`, `delim:X`" in text

    def test_scalar_component(self) -> None:
        text = format_component_schema(get_registry().require("mapping", "processor"))
        assert "*(value)*" in text
