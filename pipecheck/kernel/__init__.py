"""pipecheck kernel: catalogs, lint rules, configuration and errors.

User-space code (``pipecheck.api``, ``pipecheck.cli`` and applications)
should import from ``pipecheck.kernel`` rather than from its submodules.

The exports are grouped by category:
- Component and Bloblang catalogs
- Name resolution
- Linting
- Configuration
- Exceptions
- Logging
"""

# ============================================================================
# 1. Catalogs
# ============================================================================
from pipecheck.kernel.catalog import (
    FUNCTION_NAMES,
    METHOD_NAMES,
    ComponentCategory,
    ComponentSchema,
    FieldSchema,
    FieldType,
    SchemaRegistry,
    format_component_schema,
    get_registry,
)

# ============================================================================
# 2. Name resolution
# ============================================================================
from pipecheck.kernel.catalog.aliases import (
    Confidence,
    Resolution,
    resolve_component,
    resolve_function,
    resolve_method,
)

# ============================================================================
# 3. Configuration
# ============================================================================
from pipecheck.kernel.config import (
    ExternalValidatorConfig,
    LoggingConfig,
    PipecheckConfig,
    WarningSeverity,
)

# ============================================================================
# 4. Exceptions
# ============================================================================
from pipecheck.kernel.exceptions import (
    ConfigurationError,
    ExternalValidatorError,
    ParseError,
    PipecheckError,
    UnknownComponentError,
)
from pipecheck.kernel.fuzzy import camel_to_snake, edit_distance, nearest_names

# ============================================================================
# 5. Linting
# ============================================================================
from pipecheck.kernel.linting import (
    LintReport,
    LintViolation,
    lint_bloblang,
    run_compatibility_rules,
)

# ============================================================================
# 6. Logging
# ============================================================================
from pipecheck.kernel.logging import configure_logging, get_logger

__all__ = [
    "FUNCTION_NAMES",
    "METHOD_NAMES",
    "ComponentCategory",
    "ComponentSchema",
    "Confidence",
    "ConfigurationError",
    "ExternalValidatorConfig",
    "ExternalValidatorError",
    "FieldSchema",
    "FieldType",
    "LintReport",
    "LintViolation",
    "LoggingConfig",
    "ParseError",
    "PipecheckConfig",
    "PipecheckError",
    "Resolution",
    "SchemaRegistry",
    "UnknownComponentError",
    "WarningSeverity",
    "camel_to_snake",
    "configure_logging",
    "edit_distance",
    "format_component_schema",
    "get_logger",
    "get_registry",
    "lint_bloblang",
    "nearest_names",
    "resolve_component",
    "resolve_function",
    "resolve_method",
    "run_compatibility_rules",
]
