"""Cross-component compatibility rules.

These rules look at combinations of components (an ``http_server`` input
without ``sync_response``, a ``try`` without ``catch``) and produce advisory
violations. The validator reports them as warnings; they never make a
pipeline invalid.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pipecheck.kernel.catalog.components import component_type
from pipecheck.kernel.linting.models import LintReport, LintViolation, Severity
from pipecheck.kernel.linting.rules import run_rules


@dataclass(frozen=True, slots=True)
class ComponentRef:
    """A component reduced to its type name and its configuration value."""

    type: str
    config: Any = None

    @property
    def options(self) -> dict[str, Any]:
        """The configuration as a mapping, empty for scalar configs."""
        return self.config if isinstance(self.config, dict) else {}


@dataclass(frozen=True, slots=True)
class ParsedPipeline:
    """Flattened view of a pipeline used by the compatibility rules."""

    raw: dict[str, Any]
    input: ComponentRef | None = None
    output: ComponentRef | None = None
    processors: tuple[ComponentRef, ...] = ()
    buffer: ComponentRef | None = None
    cache_labels: tuple[str, ...] = ()
    rate_limit_labels: tuple[str, ...] = ()

    @property
    def input_type(self) -> str:
        return self.input.type if self.input else ""

    @property
    def output_type(self) -> str:
        return self.output.type if self.output else ""

    @property
    def input_options(self) -> dict[str, Any]:
        return self.input.options if self.input else {}

    @property
    def output_options(self) -> dict[str, Any]:
        return self.output.options if self.output else {}

    def has_processor(self, name: str) -> bool:
        return any(p.type == name for p in self.processors)

    def first_processor(self, name: str) -> ComponentRef | None:
        return next((p for p in self.processors if p.type == name), None)


def _component_ref(value: Any) -> ComponentRef | None:
    if not isinstance(value, dict):
        return None
    name = component_type(value)
    return ComponentRef(name, value.get(name)) if name is not None else None


def _labels(entries: Any) -> tuple[str, ...]:
    if not isinstance(entries, list):
        return ()
    return tuple(str(e.get("label", "")) for e in entries if isinstance(e, dict))


def parse_pipeline_for_compatibility(config: dict[str, Any]) -> ParsedPipeline:
    """Reduce a parsed document to the shape the compatibility rules inspect."""
    section = config.get("pipeline")
    raw_processors = section.get("processors") if isinstance(section, dict) else None
    processors: list[ComponentRef] = []
    if isinstance(raw_processors, list):
        for proc in raw_processors:
            processors.append(_component_ref(proc) or ComponentRef("unknown", proc))

    return ParsedPipeline(
        raw=config,
        input=_component_ref(config.get("input")),
        output=_component_ref(config.get("output")),
        processors=tuple(processors),
        buffer=_component_ref(config.get("buffer")),
        cache_labels=_labels(config.get("cache_resources")),
        rate_limit_labels=_labels(config.get("rate_limit_resources")),
    )


@dataclass(frozen=True, slots=True)
class CompatibilityRule:
    """One compatibility rule: a predicate plus its diagnostic."""

    rule_id: str
    name: str
    severity: Severity
    message: str
    suggestion: str
    condition: Callable[[ParsedPipeline], bool] = field(repr=False)

    @property
    def description(self) -> str:
        return self.name

    def check(self, pipeline: ParsedPipeline) -> list[LintViolation]:
        if not self.condition(pipeline):
            return []
        return [
            LintViolation(
                rule_id=self.rule_id,
                severity=self.severity,
                message=self.message,
                suggestion=self.suggestion,
            )
        ]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_BATCHING_OUTPUTS = frozenset({
    "aws_s3", "gcp_cloud_storage", "azure_blob_storage", "elasticsearch_v8", "opensearch",
    "http_client", "kafka", "kafka_franz", "nats", "nats_jetstream", "gcp_bigquery",
    "snowflake_streaming", "mongodb", "qdrant", "pinecone", "sql_insert",
})  # fmt: skip
_KAFKA = frozenset({"kafka", "kafka_franz"})
_CDC_INPUTS = frozenset({"postgres_cdc", "mysql_cdc", "mongodb_cdc", "cockroachdb_changefeed"})
_DB_INPUTS = frozenset({"sql_select", "sql_raw", "mongodb", "postgres_cdc", "mysql_cdc"})
_DB_PROCESSORS = frozenset({"sql_select", "sql_insert", "sql_raw", "mongodb", "couchbase"})
_DB_OUTPUTS = frozenset({"sql_insert", "sql_raw", "mongodb", "couchbase", "elasticsearch_v8"})
_SENSITIVE_WORDS = ("password", "secret", "token", "key", "credential", "ssn")


def _input_batching(p: ParsedPipeline) -> dict[str, Any] | None:
    options = p.input_options
    batching = options.get("batching")
    if isinstance(batching, dict):
        return batching
    return {} if "batch_count" in options or "batching" in options else None


def _uses_sync_response(p: ParsedPipeline) -> bool:
    return p.output_type == "sync_response" or p.has_processor("sync_response")


def _mapping_texts(p: ParsedPipeline) -> list[str]:
    return [
        str(proc.config or "") for proc in p.processors if proc.type in ("mapping", "bloblang")
    ]


def _nested_types(proc: ComponentRef | None) -> list[str]:
    nested = proc.options.get("processors") if proc else None
    if not isinstance(nested, list):
        return []
    return [ref.type for ref in map(_component_ref, nested) if ref is not None]


def _db_connection_count(p: ParsedPipeline) -> int:
    count = int(p.input_type in _DB_INPUTS) + int(p.output_type in _DB_OUTPUTS)
    return count + sum(1 for proc in p.processors if proc.type in _DB_PROCESSORS)


def _kafka_batch_mismatch(p: ParsedPipeline) -> bool:
    if p.input_type not in _KAFKA or p.output_type not in _KAFKA:
        return False
    return "batching" in p.input_options and "batching" not in p.output_options


def _large_batch_small_output(p: ParsedPipeline) -> bool:
    count = (_input_batching(p) or {}).get("count")
    return (
        isinstance(count, int)
        and not isinstance(count, bool)
        and count > 1000
        and p.output_type in ("http_client", "http_server", "websocket")
    )


def _batch_without_window(p: ParsedPipeline) -> bool:
    batching = _input_batching(p) or {}
    return "count" in batching and "period" not in batching


def _csv_input_parse_json(p: ParsedPipeline) -> bool:
    if p.input_type not in ("csv", "file"):
        return False
    if p.input_type == "file" and p.input_options.get("codec") != "csv":
        return False
    return any("parse_json" in text for text in _mapping_texts(p))


def _protobuf_without_schema(p: ParsedPipeline) -> bool:
    proc = p.first_processor("protobuf")
    return proc is not None and not proc.options.get("message") and not proc.options.get(
        "import_paths"
    )


def _duplicate_cache_keys(p: ParsedPipeline) -> bool:
    operators: dict[str, set[str]] = {}
    caches = [proc for proc in p.processors if proc.type == "cache"]
    if len(caches) < 2:
        return False
    for proc in caches:
        resource = str(proc.options.get("resource", ""))
        operators.setdefault(resource, set()).add(str(proc.options.get("operator", "")))
    return any({"set", "get"} <= ops for ops in operators.values())


def _http_without_retry(p: ParsedPipeline) -> bool:
    proc = p.first_processor("http")
    return proc is not None and "retries" not in proc.options and "retry" not in proc.options


def _catch_before_try(p: ParsedPipeline) -> bool:
    types = [proc.type for proc in p.processors]
    if "try" not in types or "catch" not in types:
        return False
    return types.index("catch") < types.index("try")


def _blocking_in_parallel(p: ParsedPipeline) -> bool:
    nested = _nested_types(p.first_processor("parallel"))
    return any(t in ("http", "sleep", "subprocess") for t in nested)


def _unbounded_parallel(p: ParsedPipeline) -> bool:
    proc = p.first_processor("parallel")
    return proc is not None and "cap" not in proc.options


def _large_workflow(p: ParsedPipeline) -> bool:
    proc = p.first_processor("workflow")
    branches = proc.options.get("branches") if proc else None
    return isinstance(branches, dict) and len(branches) > 10


def _repeated_parse_json(p: ParsedPipeline) -> bool:
    return sum(text.count("parse_json()") for text in _mapping_texts(p)) > 2


def _http_without_tls(p: ParsedPipeline) -> bool:
    proc = p.first_processor("http")
    url = str(proc.options.get("url", "")) if proc else ""
    return url.startswith("http://") and "localhost" not in url and "127.0.0.1" not in url


def _sensitive_logging(p: ParsedPipeline) -> bool:
    proc = p.first_processor("log")
    message = str(proc.options.get("message", "")).lower() if proc else ""
    return any(word in message for word in _SENSITIVE_WORDS)


def _kafka_without_group(p: ParsedPipeline) -> bool:
    return p.input_type in _KAFKA and not p.input_options.get("consumer_group")


def _nats_request_timeout(p: ParsedPipeline) -> bool:
    proc = p.first_processor("nats_request_reply")
    return proc is not None and not proc.options.get("timeout")


def _switch_without_default(p: ParsedPipeline) -> bool:
    if p.output_type != "switch":
        return False
    cases = p.output_options.get("cases")
    if not isinstance(cases, list) or not cases or not isinstance(cases[-1], dict):
        return False
    return "check" in cases[-1]


def _broker_fanout_unbalanced(p: ParsedPipeline) -> bool:
    if p.output_type != "broker":
        return False
    options = p.output_options
    outputs = options.get("outputs")
    if options.get("pattern") != "fan_out" or not isinstance(outputs, list) or len(outputs) < 2:
        return False
    types = {ref.type for ref in map(_component_ref, outputs) if ref is not None}
    fast = types & {"kafka", "nats", "redis_pubsub"}
    slow = types & {"http_client", "aws_s3", "elasticsearch_v8"}
    return bool(fast and slow)


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

COMPATIBILITY_RULES: tuple[CompatibilityRule, ...] = (
    # Synchronous responses
    CompatibilityRule(
        "sync-response-without-http-server",
        "Sync response without HTTP server",
        "error",
        "sync_response output requires http_server input to work correctly",
        "Change input to http_server or use a different output type",
        lambda p: p.output_type == "sync_response" and p.input_type != "http_server",
    ),
    CompatibilityRule(
        "http-server-without-sync-response",
        "HTTP server without sync response",
        "info",
        "http_server input without sync_response will not return responses to clients",
        "Add sync_response output or processor if you need request-reply pattern",
        lambda p: p.input_type == "http_server" and not _uses_sync_response(p),
    ),
    CompatibilityRule(
        "sync-response-with-batching",
        "Sync response with batching",
        "error",
        "Batching on input is incompatible with sync_response pattern",
        "Remove batching from input when using sync_response",
        lambda p: _uses_sync_response(p) and _input_batching(p) is not None,
    ),
    # Batching
    CompatibilityRule(
        "input-batching-output-no-batching",
        "Input batching without output support",
        "warning",
        "Output type may not efficiently handle batched messages",
        "Consider adding batching to output or removing from input",
        lambda p: (
            _input_batching(p) is not None
            and p.output is not None
            and p.output_type not in _BATCHING_OUTPUTS
        ),
    ),
    CompatibilityRule(
        "kafka-batch-mismatch",
        "Kafka batch size mismatch",
        "info",
        "Kafka input has batching but output does not. Consider output batching for efficiency",
        "Add batching to kafka output: batching: { count: 100, period: 1s }",
        _kafka_batch_mismatch,
    ),
    CompatibilityRule(
        "large-batch-small-output",
        "Large batch to small output",
        "warning",
        "Large batch size (>1000) may cause issues with HTTP-based outputs",
        "Consider reducing batch size or using batching on output with byte_size limit",
        _large_batch_small_output,
    ),
    CompatibilityRule(
        "batch-without-window",
        "Batch without time window",
        "info",
        "Count-based batching without time period may cause messages to wait indefinitely",
        "Add period to batching: batching: { count: 100, period: 10s }",
        _batch_without_window,
    ),
    # Formats
    CompatibilityRule(
        "csv-input-json-processor",
        "CSV input with JSON processor",
        "warning",
        "CSV input already produces structured data, so parse_json() is unnecessary",
        "Access CSV fields directly: root.field = this.column_name",
        _csv_input_parse_json,
    ),
    CompatibilityRule(
        "binary-to-json-output",
        "Binary data to JSON output",
        "error",
        "Compressed data sent to JSON-based output will cause errors",
        "Add decompress processor before JSON output or use a binary-compatible output",
        lambda p: (
            p.output_type in ("elasticsearch_v8", "opensearch", "mongodb", "gcp_bigquery")
            and p.has_processor("compress")
            and not p.has_processor("decompress")
        ),
    ),
    CompatibilityRule(
        "avro-without-schema-registry",
        "Avro without schema registry",
        "info",
        "Using Avro processor without schema registry may cause schema evolution issues",
        "Consider using schema_registry_encode/decode for schema management",
        lambda p: (
            p.has_processor("avro")
            and not p.has_processor("schema_registry_encode")
            and not p.has_processor("schema_registry_decode")
        ),
    ),
    CompatibilityRule(
        "protobuf-without-schema",
        "Protobuf without schema definition",
        "error",
        "Protobuf processor requires message type and schema configuration",
        "Add message type and import_paths to protobuf processor config",
        _protobuf_without_schema,
    ),
    # Resources
    CompatibilityRule(
        "multiple-db-connections",
        "Multiple database connections",
        "warning",
        "Multiple database connections detected. Consider using resource pooling",
        "Define database connections in a resources section and reference them by label",
        lambda p: _db_connection_count(p) > 2,
    ),
    CompatibilityRule(
        "cache-without-resource",
        "Cache processor without resource",
        "error",
        "Cache processor used without cache_resources definition",
        "Add cache_resources section with cache configuration",
        lambda p: (
            (p.has_processor("cache") or p.has_processor("cached"))
            and not p.cache_labels
            and "cache_resources" not in p.raw
        ),
    ),
    CompatibilityRule(
        "rate-limit-without-resource",
        "Rate limit without resource",
        "error",
        "Rate limit processor used without rate_limit_resources definition",
        "Add rate_limit_resources section with rate limit configuration",
        lambda p: (
            p.has_processor("rate_limit")
            and not p.rate_limit_labels
            and "rate_limit_resources" not in p.raw
        ),
    ),
    CompatibilityRule(
        "duplicate-cache-keys",
        "Potential cache key conflicts",
        "info",
        "Multiple cache operations on same resource. Ensure key patterns do not conflict",
        "Consider using different key prefixes or separate cache resources",
        _duplicate_cache_keys,
    ),
    # Error handling
    CompatibilityRule(
        "http-without-retry",
        "HTTP processor without retry",
        "info",
        "HTTP processor without explicit retry configuration may fail on transient errors",
        "Add retries: 3 and retry_period: 1s to http processor config",
        _http_without_retry,
    ),
    CompatibilityRule(
        "try-without-catch",
        "Try without catch",
        "warning",
        "try processor without catch. Errors will propagate unhandled",
        "Add catch processor after try to handle errors gracefully",
        lambda p: p.has_processor("try") and not p.has_processor("catch"),
    ),
    CompatibilityRule(
        "catch-before-try",
        "Catch before try",
        "error",
        "catch processor appears before try. catch must come after try",
        "Reorder processors: try should come before catch",
        _catch_before_try,
    ),
    # Performance
    CompatibilityRule(
        "blocking-in-parallel",
        "Blocking operations in parallel",
        "warning",
        "Blocking operations (http, sleep, subprocess) in parallel may exhaust resources",
        "Consider limiting parallel cap or using async patterns",
        _blocking_in_parallel,
    ),
    CompatibilityRule(
        "unbounded-parallel",
        "Unbounded parallel processing",
        "warning",
        "Parallel processor without cap may spawn unlimited goroutines",
        "Add cap to parallel processor: parallel: { cap: 10, processors: [...] }",
        _unbounded_parallel,
    ),
    CompatibilityRule(
        "large-workflow-dag",
        "Large workflow DAG",
        "info",
        "Large workflow DAG (>10 branches) may be hard to debug and maintain",
        "Consider splitting into multiple pipelines or simplifying the workflow",
        _large_workflow,
    ),
    CompatibilityRule(
        "json-parse-every-message",
        "Repeated JSON parsing",
        "info",
        "Multiple parse_json() calls detected. Consider parsing once and storing in a variable",
        "Use let: let data = this.parse_json(); then access $data.field",
        _repeated_parse_json,
    ),
    # Change data capture
    CompatibilityRule(
        "cdc-without-ordering",
        "CDC without ordering guarantee",
        "warning",
        "CDC source with parallel processing may cause out-of-order updates",
        "Ensure ordering is preserved by using sequential processing or key-based partitioning",
        lambda p: p.input_type in _CDC_INPUTS and p.has_processor("parallel"),
    ),
    CompatibilityRule(
        "cdc-to-non-idempotent-output",
        "CDC to non-idempotent output",
        "warning",
        "CDC source to non-idempotent output may cause duplicates on replay",
        "Use outputs that support upsert/idempotent writes (Kafka key, ES id, MongoDB upsert)",
        lambda p: (
            p.input_type in _CDC_INPUTS and p.output_type in ("file", "stdout", "http_client")
        ),
    ),
    # Security
    CompatibilityRule(
        "http-without-tls",
        "HTTP without TLS",
        "warning",
        "HTTP processor using non-TLS connection to external host",
        "Use HTTPS for external connections to protect data in transit",
        _http_without_tls,
    ),
    CompatibilityRule(
        "sensitive-data-logging",
        "Sensitive data in logs",
        "warning",
        "Log processor may expose sensitive data. Review logged fields",
        "Redact sensitive fields before logging or use field-level masking",
        _sensitive_logging,
    ),
    # Messaging
    CompatibilityRule(
        "kafka-consumer-group-missing",
        "Kafka without consumer group",
        "info",
        "Kafka input without consumer_group will not commit offsets",
        "Add consumer_group for reliable offset tracking and scaling",
        _kafka_without_group,
    ),
    CompatibilityRule(
        "nats-request-timeout",
        "NATS request without timeout",
        "warning",
        "NATS request-reply without timeout may hang indefinitely",
        "Add timeout: 5s to nats_request_reply processor",
        _nats_request_timeout,
    ),
    # Outputs
    CompatibilityRule(
        "switch-without-default",
        "Switch output without default",
        "warning",
        "Switch output without default case. Unmatched messages will error",
        "Add a default case without check: - output: drop: {}",
        _switch_without_default,
    ),
    CompatibilityRule(
        "broker-fanout-unbalanced",
        "Broker fan-out unbalanced",
        "info",
        "Fan-out broker with mixed output speeds. Slow outputs may bottleneck fast ones",
        "Consider using broker with pattern: fan_out_sequential or separate pipelines",
        _broker_fanout_unbalanced,
    ),
)


def run_compatibility_rules(config: dict[str, Any]) -> LintReport:
    """Run every compatibility rule against a parsed document.

    Parameters
    ----------
    config : dict[str, Any]
        Parsed pipeline document

    Returns
    -------
    LintReport
        One violation per rule that fired, in table order
    """
    return run_rules(COMPATIBILITY_RULES, parse_pipeline_for_compatibility(config))


def format_compatibility_warnings(violations: list[LintViolation]) -> str:
    """Render violations grouped by severity, errors first."""
    if not violations:
        return ""
    lines = ["Compatibility Warnings:", ""]
    icons = {"error": "X", "warning": "!", "info": "i"}
    for severity in ("error", "warning", "info"):
        for violation in violations:
            if violation.severity != severity:
                continue
            lines.append(f"  [{icons[severity]}] {violation.message}")
            if violation.suggestion:
                lines.append(f"      -> {violation.suggestion}")
    return "\n".join(lines)
