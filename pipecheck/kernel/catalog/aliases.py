"""Misspelling and ambiguity tables, and the resolvers built on them.

The validator and the auto-fixer both resolve wrong names through this
module, so a name the auto-fixer rewrites silently is exactly a name the
validator reports with a single high-confidence suggestion.

Confidence tiers are curated data. A newly discovered ambiguous alias goes
into one of the ``AMBIGUOUS_*`` tables with an explicit tier and reason.
Never promote it to a typo table without a test that pins the expected
rewrite.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from pipecheck.kernel.catalog.bloblang import FUNCTION_NAMES, METHOD_NAMES
from pipecheck.kernel.catalog.components import COMPONENT_NAMES, sorted_names
from pipecheck.kernel.catalog.models import ComponentCategory
from pipecheck.kernel.fuzzy import camel_to_snake, nearest_names


class Confidence(StrEnum):
    """How certain an automatic correction is. Only HIGH is ever applied."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class AmbiguousAlias:
    """A wrong name with several plausible targets."""

    candidates: tuple[str, ...]
    confidence: Confidence
    reason: str


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving a wrong name.

    Attributes
    ----------
    candidates : tuple[str, ...]
        Plausible canonical names, best first
    confidence : Confidence
        Tier of the whole resolution
    source : str
        Which table or heuristic produced it (``typo``, ``case``,
        ``snake_case``, ``ambiguous``, ``kind``, ``prefix``, ``fuzzy``)
    reason : str
        Human-readable justification, empty for plain typos
    """

    candidates: tuple[str, ...]
    confidence: Confidence
    source: str
    reason: str = ""

    @property
    def replacement(self) -> str | None:
        """The target to apply silently, if this resolution is auto-fixable."""
        if self.confidence is Confidence.HIGH and len(self.candidates) == 1:
            return self.candidates[0]
        return None


# ============================================================================
# Component tables
# ============================================================================

# fmt: off
COMPONENT_TYPOS: MappingProxyType[str, str] = MappingProxyType({
    # Bloblang processor
    "blobl": "bloblang", "blobang": "bloblang", "blob": "bloblang",
    "map": "mapping", "transform": "mapping", "mappings": "mapping",
    # Kafka
    "kafaka": "kafka", "kafk": "kafka", "kakfa": "kafka", "kafak": "kafka",
    "kafka_consumer": "kafka", "kafka_producer": "kafka",
    # Cloud storage and queues
    "s3": "aws_s3", "amazon_s3": "aws_s3", "aws_s3_bucket": "aws_s3",
    "gcs": "gcp_cloud_storage", "google_cloud_storage": "gcp_cloud_storage",
    "azure_blob": "azure_blob_storage",
    "sqs": "aws_sqs", "sns": "aws_sns", "kinesis": "aws_kinesis",
    "dynamodb": "aws_dynamodb",
    "pubsub": "gcp_pubsub", "google_pubsub": "gcp_pubsub",
    # Search and databases
    "elasticsearch": "elasticsearch_v8", "elastic": "elasticsearch_v8",
    "es": "elasticsearch_v8", "elastic_search": "elasticsearch_v8",
    "elasticsearch_v7": "elasticsearch_v8",
    "mongo": "mongodb", "mongdb": "mongodb", "mongo_db": "mongodb",
    # Messaging
    "nat": "nats", "nats_consumer": "nats", "nats_producer": "nats",
    "redis_queue": "redis_list", "redis_stream": "redis_streams",
    "rabbitmq": "amqp_0_9", "rabbit": "amqp_0_9", "amqp": "amqp_0_9",
})

#: Typos whose target depends on the component's direction
CATEGORY_COMPONENT_TYPOS: MappingProxyType[ComponentCategory, MappingProxyType[str, str]] = (
    MappingProxyType({
        "input": MappingProxyType({
            "console": "stdin", "webhook": "http_server", "http_listener": "http_server",
        }),
        "output": MappingProxyType({
            "console": "stdout", "print": "stdout", "null": "drop", "discard": "drop",
            "devnull": "drop", "webhook": "http_client",
        }),
        "processor": MappingProxyType({
            "logger": "log", "print": "log", "delay": "sleep", "wait": "sleep",
        }),
    })
)
# fmt: on

_HTTP = ("http_client", "http_server")
_SQL = ("sql_select", "sql_insert", "sql_raw")

AMBIGUOUS_COMPONENTS: MappingProxyType[str, AmbiguousAlias] = MappingProxyType({
    "http": AmbiguousAlias(
        _HTTP, Confidence.MEDIUM, "polling a URL and serving requests are different components"
    ),
    "https": AmbiguousAlias(
        _HTTP, Confidence.MEDIUM, "polling a URL and serving requests are different components"
    ),
    "rest": AmbiguousAlias(_HTTP, Confidence.LOW, "generic API term"),
    "api": AmbiguousAlias(_HTTP, Confidence.LOW, "generic API term"),
    "sql": AmbiguousAlias(_SQL, Confidence.MEDIUM, "select, insert and raw statements differ"),
    "postgres": AmbiguousAlias(
        _SQL + ("postgres_cdc",), Confidence.MEDIUM, "use a sql_* component with driver: postgres"
    ),
    "postgresql": AmbiguousAlias(
        _SQL + ("postgres_cdc",), Confidence.MEDIUM, "use a sql_* component with driver: postgres"
    ),
    "pg": AmbiguousAlias(
        _SQL + ("postgres_cdc",), Confidence.MEDIUM, "use a sql_* component with driver: postgres"
    ),
    "mysql": AmbiguousAlias(
        _SQL + ("mysql_cdc",), Confidence.MEDIUM, "use a sql_* component with driver: mysql"
    ),
    "database": AmbiguousAlias(
        _SQL + ("mongodb",), Confidence.LOW, "no database is implied by the name"
    ),
    "db": AmbiguousAlias(_SQL + ("mongodb",), Confidence.LOW, "no database is implied by the name"),
    "redis": AmbiguousAlias(
        ("redis_list", "redis_pubsub", "redis_streams", "redis_scan", "redis_hash"),
        Confidence.MEDIUM,
        "Redis inputs and outputs are split by data structure",
    ),
    "queue": AmbiguousAlias(
        ("nats", "aws_sqs", "redis_list", "amqp_0_9"), Confidence.LOW, "no broker is implied"
    ),
    "stream": AmbiguousAlias(
        ("kafka", "redis_streams", "nats_jetstream"), Confidence.LOW, "no broker is implied"
    ),
    "filter": AmbiguousAlias(
        ("mapping", "switch"),
        Confidence.MEDIUM,
        "filtering is a mapping that assigns deleted() or a switch with checks",
    ),
    "lambda": AmbiguousAlias(
        ("aws_lambda",), Confidence.MEDIUM, "AWS Lambda is only available as a processor"
    ),
    "cron": AmbiguousAlias(
        ("generate",), Confidence.MEDIUM, "schedules are generate inputs with an interval"
    ),
    "timer": AmbiguousAlias(
        ("generate",), Confidence.MEDIUM, "schedules are generate inputs with an interval"
    ),
})

# ============================================================================
# Bloblang tables
# ============================================================================

# fmt: off
BLOBLANG_METHOD_TYPOS: MappingProxyType[str, str] = MappingProxyType({
    # Parsing and serialization
    "parseJson": "parse_json", "parseJSON": "parse_json", "json_parse": "parse_json",
    "fromJson": "parse_json", "json_decode": "parse_json",
    "formatJson": "format_json", "toJson": "format_json", "toJSON": "format_json",
    "to_json": "format_json", "stringify": "format_json", "json_encode": "format_json",
    "parseYaml": "parse_yaml", "parseXml": "parse_xml", "parseCsv": "parse_csv",
    "parseUrl": "parse_url",
    # Arrays
    "mapEach": "map_each", "forEach": "map_each", "for_each": "map_each",
    "sortBy": "sort_by", "uniq": "unique", "distinct": "unique", "flat": "flatten",
    "push": "append", "len": "length", "size": "length", "count": "length",
    # Strings
    "toUpperCase": "uppercase", "toUpper": "uppercase", "upper": "uppercase",
    "upperCase": "uppercase", "to_upper": "uppercase",
    "toLowerCase": "lowercase", "toLower": "lowercase", "lower": "lowercase",
    "lowerCase": "lowercase", "to_lower": "lowercase",
    "toString": "string", "to_string": "string", "str": "string",
    "toNumber": "number", "to_number": "number", "parseInt": "number",
    "parseFloat": "number", "to_int": "number", "int": "number", "float": "number",
    "toBool": "bool", "to_bool": "bool",
    "startsWith": "has_prefix", "starts_with": "has_prefix",
    "endsWith": "has_suffix", "ends_with": "has_suffix",
    "includes": "contains", "indexOf": "index_of",
    "replaceAll": "replace_all", "replace": "replace_all",
    "strip": "trim", "substring": "slice", "substr": "slice",
    "default": "or",
    # Timestamps
    "format_timestamp": "ts_format", "formatTimestamp": "ts_format",
    "parse_timestamp": "ts_parse", "parseTimestamp": "ts_parse",
    "format_timestamp_unix": "ts_unix",
    "strftime": "ts_strftime", "strptime": "ts_strptime",
})

BLOBLANG_FUNCTION_TYPOS: MappingProxyType[str, str] = MappingProxyType({
    "uuid": "uuid_v4", "uuidv4": "uuid_v4", "uuid4": "uuid_v4", "guid": "uuid_v4",
    "random": "random_int", "rand": "random_int",
    "getenv": "env", "environ": "env",
    "delete": "deleted", "drop": "deleted",
    "unix_timestamp": "timestamp_unix", "timestamp_ms": "timestamp_unix_milli",
    "host_name": "hostname",
})
# fmt: on

AMBIGUOUS_METHODS: MappingProxyType[str, AmbiguousAlias] = MappingProxyType({
    "map": AmbiguousAlias(
        ("map_each", "map_each_key"), Confidence.MEDIUM, "values and keys are mapped separately"
    ),
    "reduce": AmbiguousAlias(
        ("fold",), Confidence.MEDIUM, "fold takes an initial value and a two-field context"
    ),
    "parse": AmbiguousAlias(
        ("parse_json", "parse_yaml", "parse_xml", "parse_csv"), Confidence.LOW, "format unknown"
    ),
    "find": AmbiguousAlias(("index_of", "filter"), Confidence.LOW, "position or matching elements"),
    "format_date": AmbiguousAlias(
        ("ts_format", "ts_strftime"), Confidence.MEDIUM, "Go layout or strftime format"
    ),
})

AMBIGUOUS_FUNCTIONS: MappingProxyType[str, AmbiguousAlias] = MappingProxyType({
    "timestamp": AmbiguousAlias(
        ("now", "timestamp_unix"), Confidence.LOW, "string or numeric timestamp"
    ),
    "date": AmbiguousAlias(("now",), Confidence.LOW, "no date-only function exists"),
    "id": AmbiguousAlias(("uuid_v4", "ulid", "ksuid"), Confidence.LOW, "several ID generators"),
})

#: Synonyms of ``pipeline.processors``
STRUCTURE_FIXES: MappingProxyType[str, str] = MappingProxyType({
    key: "processors"
    for key in (
        "with",
        "steps",
        "stages",
        "tasks",
        "transforms",
        "transformations",
        "actions",
        "processor",
        "processes",
    )
})

_METHOD_TYPOS_CI = MappingProxyType({k.lower(): v for k, v in BLOBLANG_METHOD_TYPOS.items()})
_FUNCTION_TYPOS_CI = MappingProxyType({k.lower(): v for k, v in BLOBLANG_FUNCTION_TYPOS.items()})
_PREFIX_LENGTH = 4


# ============================================================================
# Resolvers
# ============================================================================


def resolve_component(name: str, category: ComponentCategory) -> Resolution | None:
    """Resolve an unknown component name within ``category``.

    Order: direction-specific typo, generic typo (exact, then
    case-insensitive), case normalization, ambiguity table, then fuzzy
    substring/prefix matching. Targets not valid for ``category`` are
    discarded at every step.

    Returns
    -------
    Resolution | None
        None when ``name`` is already valid or nothing plausible exists
    """
    valid = COMPONENT_NAMES[category]
    if name in valid:
        return None

    typo_tables = (CATEGORY_COMPONENT_TYPOS.get(category, MappingProxyType({})), COMPONENT_TYPOS)
    for key in (name, name.lower()):
        for table in typo_tables:
            target = table.get(key)
            if target is not None and target in valid:
                return Resolution((target,), Confidence.HIGH, "typo")

    if name.lower() in valid:
        return Resolution((name.lower(),), Confidence.HIGH, "case")

    ambiguous = AMBIGUOUS_COMPONENTS.get(name.lower())
    if ambiguous is not None:
        candidates = tuple(c for c in ambiguous.candidates if c in valid)
        if candidates:
            return Resolution(candidates, ambiguous.confidence, "ambiguous", ambiguous.reason)

    similar = nearest_names(name, sorted_names(category))
    if similar:
        return Resolution(tuple(similar), Confidence.LOW, "fuzzy")
    return None


def resolve_method(name: str) -> Resolution | None:
    """Resolve an unknown method name. See :func:`_resolve_identifier`."""
    return _resolve_identifier(
        name,
        registry=METHOD_NAMES,
        other=FUNCTION_NAMES,
        typos=BLOBLANG_METHOD_TYPOS,
        typos_ci=_METHOD_TYPOS_CI,
        ambiguous=AMBIGUOUS_METHODS,
        other_kind="function",
    )


def resolve_function(name: str) -> Resolution | None:
    """Resolve an unknown function name. See :func:`_resolve_identifier`."""
    return _resolve_identifier(
        name,
        registry=FUNCTION_NAMES,
        other=METHOD_NAMES,
        typos=BLOBLANG_FUNCTION_TYPOS,
        typos_ci=_FUNCTION_TYPOS_CI,
        ambiguous=AMBIGUOUS_FUNCTIONS,
        other_kind="method",
    )


def _resolve_identifier(
    name: str,
    *,
    registry: frozenset[str],
    other: frozenset[str],
    typos: MappingProxyType[str, str],
    typos_ci: MappingProxyType[str, str],
    ambiguous: MappingProxyType[str, AmbiguousAlias],
    other_kind: str,
) -> Resolution | None:
    """Resolve an identifier against one registry.

    Order: misspelling map (case-sensitive, then case-insensitive),
    camelCase to snake_case membership, case normalization, ambiguity
    table, use of a name from the other registry, and finally a shared
    4-character prefix.
    """
    if name in registry:
        return None

    target = typos.get(name) or typos_ci.get(name.lower())
    if target is not None:
        return Resolution((target,), Confidence.HIGH, "typo")

    snake = camel_to_snake(name)
    if snake != name and snake in registry:
        return Resolution((snake,), Confidence.HIGH, "snake_case")
    if name.lower() in registry:
        return Resolution((name.lower(),), Confidence.HIGH, "case")

    alias = ambiguous.get(name) or ambiguous.get(name.lower())
    if alias is not None:
        return Resolution(alias.candidates, alias.confidence, "ambiguous", alias.reason)

    if name in other:
        return Resolution((name,), Confidence.LOW, "kind", f'"{name}" is a {other_kind}')

    if len(snake) >= _PREFIX_LENGTH:
        prefix = snake[:_PREFIX_LENGTH]
        prefixed = sorted(n for n in registry if n.startswith(prefix))
        if prefixed:
            return Resolution(tuple(prefixed[:3]), Confidence.LOW, "prefix")
    return None
