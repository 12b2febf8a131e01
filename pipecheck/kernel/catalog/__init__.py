"""Component, Bloblang and alias catalogs.

Everything exported here is immutable data built at import time, or a pure
function over it. Nothing in this package is mutated after import.
"""

from pipecheck.kernel.catalog.aliases import (
    AMBIGUOUS_COMPONENTS,
    AMBIGUOUS_FUNCTIONS,
    AMBIGUOUS_METHODS,
    BLOBLANG_FUNCTION_TYPOS,
    BLOBLANG_METHOD_TYPOS,
    CATEGORY_COMPONENT_TYPOS,
    COMPONENT_TYPOS,
    STRUCTURE_FIXES,
    AmbiguousAlias,
    Confidence,
    Resolution,
    resolve_component,
    resolve_function,
    resolve_method,
)
from pipecheck.kernel.catalog.bloblang import (
    BLOBLANG_FUNCTIONS,
    BLOBLANG_METHODS,
    FUNCTION_NAMES,
    METHOD_NAMES,
    BloblangItem,
    format_bloblang_reference,
    get_bloblang_by_category,
    get_bloblang_item,
    list_bloblang_categories,
    search_bloblang,
)
from pipecheck.kernel.catalog.components import (
    COMPONENT_NAMES,
    METADATA_KEYS,
    VALID_BUFFERS,
    VALID_CACHES,
    VALID_INPUTS,
    VALID_OUTPUTS,
    VALID_PROCESSORS,
    VALID_RATE_LIMITS,
    WRAPPER_COMPONENTS,
    component_type,
    is_known_component,
    is_metadata_key,
)
from pipecheck.kernel.catalog.models import (
    CATEGORY_PRECEDENCE,
    ComponentCategory,
    ComponentSchema,
    FieldSchema,
    FieldType,
)
from pipecheck.kernel.catalog.registry import (
    SCHEMAS,
    SchemaRegistry,
    format_component_schema,
    get_registry,
)

__all__ = [
    "AMBIGUOUS_COMPONENTS",
    "AMBIGUOUS_FUNCTIONS",
    "AMBIGUOUS_METHODS",
    "BLOBLANG_FUNCTIONS",
    "BLOBLANG_FUNCTION_TYPOS",
    "BLOBLANG_METHODS",
    "BLOBLANG_METHOD_TYPOS",
    "CATEGORY_COMPONENT_TYPOS",
    "CATEGORY_PRECEDENCE",
    "COMPONENT_NAMES",
    "COMPONENT_TYPOS",
    "FUNCTION_NAMES",
    "METADATA_KEYS",
    "METHOD_NAMES",
    "SCHEMAS",
    "STRUCTURE_FIXES",
    "VALID_BUFFERS",
    "VALID_CACHES",
    "VALID_INPUTS",
    "VALID_OUTPUTS",
    "VALID_PROCESSORS",
    "VALID_RATE_LIMITS",
    "WRAPPER_COMPONENTS",
    "AmbiguousAlias",
    "BloblangItem",
    "ComponentCategory",
    "ComponentSchema",
    "Confidence",
    "FieldSchema",
    "FieldType",
    "Resolution",
    "SchemaRegistry",
    "component_type",
    "format_bloblang_reference",
    "format_component_schema",
    "get_bloblang_by_category",
    "get_bloblang_item",
    "get_registry",
    "is_known_component",
    "is_metadata_key",
    "list_bloblang_categories",
    "resolve_component",
    "resolve_function",
    "resolve_method",
    "search_bloblang",
]
