"""Schema models for pipeline components."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ComponentCategory = Literal["input", "processor", "output", "cache", "rate_limit", "buffer"]

#: Lookup precedence when no category is given
CATEGORY_PRECEDENCE: tuple[ComponentCategory, ...] = (
    "input",
    "processor",
    "output",
    "cache",
    "rate_limit",
    "buffer",
)


class FieldType(StrEnum):
    """Value types a component field can declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    DURATION = "duration"
    BLOBLANG = "bloblang"
    INTERPOLATED_STRING = "interpolated_string"


class FieldSchema(BaseModel):
    """Schema of a single component field.

    Attributes
    ----------
    type : FieldType
        Expected value type
    description : str
        Human-readable description
    required : bool
        Whether the field must be present
    default : Any
        Default value used by the runtime when the field is omitted
    enum : tuple[str, ...] | None
        Allowed values. Entries ending in ``:X`` or ``:N`` are prefixes
        (``delim:X`` accepts ``delim:,``)
    items : FieldSchema | None
        Element schema for arrays
    properties : dict[str, FieldSchema] | None
        Nested field schemas for objects
    examples : tuple[Any, ...]
        Example values; the first one is used in "missing field" hints
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: FieldType
    description: str = ""
    required: bool = False
    default: Any = None
    enum: tuple[str, ...] | None = None
    items: FieldSchema | None = None
    properties: dict[str, FieldSchema] | None = None
    examples: tuple[Any, ...] = ()


class ComponentSchema(BaseModel):
    """Field-level schema of one component in one category.

    The empty field name ``""`` describes the component value itself, for
    components written as ``mapping: <bloblang>``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    description: str
    category: ComponentCategory
    fields: dict[str, FieldSchema] = Field(default_factory=dict)
    examples: tuple[str, ...] = ()
    docs_url: str | None = None

    @property
    def required_fields(self) -> list[str]:
        """Names of required fields, in declaration order."""
        return [name for name, spec in self.fields.items() if spec.required]

    @property
    def is_scalar(self) -> bool:
        """True when the component is written as a bare value (``mapping: ...``)."""
        return "" in self.fields


def field(
    type: FieldType | str,
    description: str = "",
    *,
    required: bool = False,
    default: Any = None,
    enum: tuple[str, ...] | list[str] | None = None,
    items: FieldSchema | None = None,
    properties: dict[str, FieldSchema] | None = None,
    examples: tuple[Any, ...] | list[Any] = (),
) -> FieldSchema:
    """Shorthand constructor used by the schema tables."""
    return FieldSchema(
        type=FieldType(type),
        description=description,
        required=required,
        default=default,
        enum=tuple(enum) if enum is not None else None,
        items=items,
        properties=properties,
        examples=tuple(examples),
    )
