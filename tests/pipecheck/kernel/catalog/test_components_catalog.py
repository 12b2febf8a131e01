"""Tests for pipecheck.kernel.catalog.components and the schema tables."""

import pytest

from pipecheck.kernel.catalog.components import (
    COMPONENT_NAMES,
    VALID_BUFFERS,
    WRAPPER_COMPONENTS,
    component_type,
    is_known_component,
    is_metadata_key,
)
from pipecheck.kernel.catalog.models import ComponentSchema, FieldType, field
from pipecheck.kernel.catalog.registry import SCHEMAS


class TestComponentNames:
    """Test the per-category name sets."""

    @pytest.mark.parametrize(
        ("name", "category"),
        [
            ("kafka", "input"),
            ("kafka", "output"),
            ("mapping", "processor"),
            ("http", "processor"),
            ("stdout", "output"),
            ("memory", "cache"),
            ("local", "rate_limit"),
            ("system_window", "buffer"),
        ],
    )
    def test_known(self, name: str, category: str) -> None:
        assert is_known_component(name, category)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        ("name", "category"),
        [("stdout", "input"), ("stdin", "output"), ("http", "input"), ("kafaka", "input")],
    )
    def test_unknown(self, name: str, category: str) -> None:
        assert not is_known_component(name, category)  # type: ignore[arg-type]

    def test_every_schema_is_a_known_name(self) -> None:
        for category, schemas in SCHEMAS.items():
            for name, schema in schemas.items():
                assert name in COMPONENT_NAMES[category]
                assert schema.name == name
                assert schema.category == category

    def test_wrappers_are_known_somewhere(self) -> None:
        known = set().union(*COMPONENT_NAMES.values())
        assert WRAPPER_COMPONENTS <= known

    def test_buffers(self) -> None:
        assert VALID_BUFFERS == frozenset({"memory", "none", "system_window"})


class TestComponentType:
    """Test extraction of the component type key."""

    def test_first_non_metadata_key(self) -> None:
        assert component_type({"label": "in", "kafka": {}}) == "kafka"

    def test_underscore_keys_are_metadata(self) -> None:
        assert component_type({"_expanso_component_id": "x", "stdout": {}}) == "stdout"

    def test_processors_only(self) -> None:
        assert component_type({"label": "p", "processors": []}) == "processors"

    def test_processors_beside_type(self) -> None:
        assert component_type({"processors": [], "kafka": {}}) == "kafka"

    def test_nothing(self) -> None:
        assert component_type({"label": "x"}) is None

    @pytest.mark.parametrize("key", ["label", "description", "processors", "_private"])
    def test_metadata_keys(self, key: str) -> None:
        assert is_metadata_key(key)

    def test_component_key_is_not_metadata(self) -> None:
        assert not is_metadata_key("kafka")


class TestSchemaModels:
    """Test the pydantic schema models."""

    def test_field_shorthand(self) -> None:
        spec = field("duration", "Commit period", default="1s", examples=["1s"])
        assert spec.type is FieldType.DURATION
        assert spec.examples == ("1s",)
        assert not spec.required

    def test_models_are_frozen(self) -> None:
        spec = field("string")
        with pytest.raises(ValueError):
            spec.required = True  # type: ignore[misc]

    def test_extra_keys_rejected(self) -> None:
        with pytest.raises(ValueError):
            ComponentSchema(name="x", description="", category="input", unknown=1)  # type: ignore[call-arg]

    def test_required_fields_in_declaration_order(self) -> None:
        schema = ComponentSchema(
            name="x",
            description="",
            category="output",
            fields={
                "b": field("string", required=True),
                "a": field("string"),
                "c": field("number", required=True),
            },
        )
        assert schema.required_fields == ["b", "c"]
        assert not schema.is_scalar
