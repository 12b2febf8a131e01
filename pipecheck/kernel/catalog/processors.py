"""Processor component schemas."""

from __future__ import annotations

from types import MappingProxyType

from pipecheck.kernel.catalog.common import HEADERS, docs_url
from pipecheck.kernel.catalog.models import ComponentSchema, field

_PROCESSOR_LIST = field(
    "array",
    "Child processors",
    required=True,
    items=field("object", "Processor configuration"),
)

_COMPRESSION_ALGORITHMS = ("gzip", "pgzip", "zlib", "flate", "snappy", "lz4", "zstd")

_PROCESSORS = (
    ComponentSchema(
        name="mapping",
        description="Transforms messages with a Bloblang mapping.",
        category="processor",
        docs_url=docs_url("processor", "mapping"),
        fields={
            "": field(
                "bloblang",
                "Bloblang mapping",
                required=True,
                examples=(
                    "root = this",
                    "root.uppercase_name = this.name.uppercase()",
                    "root = this.filter(item -> item.active)",
                ),
            ),
        },
        examples=("pipeline:\n  processors:\n    - mapping: root.upper = this.name.uppercase()",),
    ),
    ComponentSchema(
        name="bloblang",
        description="Legacy name of the mapping processor.",
        category="processor",
        docs_url=docs_url("processor", "bloblang"),
        fields={"": field("bloblang", "Bloblang mapping", required=True, examples=("root = this",))},
        examples=("pipeline:\n  processors:\n    - bloblang: root = this",),
    ),
    ComponentSchema(
        name="mutation",
        description="Modifies messages in place with a Bloblang mapping.",
        category="processor",
        docs_url=docs_url("processor", "mutation"),
        fields={
            "": field(
                "bloblang", "Bloblang mutation", required=True, examples=("root.id = uuid_v4()",)
            )
        },
        examples=("pipeline:\n  processors:\n    - mutation: root.id = uuid_v4()",),
    ),
    ComponentSchema(
        name="jq",
        description="Transforms messages with a jq query.",
        category="processor",
        docs_url=docs_url("processor", "jq"),
        fields={
            "query": field(
                "string", "jq query", required=True, examples=(".", ".items[]")
            ),
            "raw": field("boolean", "Output raw strings instead of JSON", default=False),
            "output_raw": field("boolean", "Write raw output", default=False),
        },
        examples=("pipeline:\n  processors:\n    - jq:\n        query: .items[]",),
    ),
    ComponentSchema(
        name="http",
        description="Sends each message to an HTTP endpoint and replaces it with the response.",
        category="processor",
        docs_url=docs_url("processor", "http"),
        fields={
            "url": field(
                "interpolated_string",
                "URL to request",
                required=True,
                examples=("http://api.example.com/enrich", "http://localhost:8080/${! this.id }"),
            ),
            "verb": field(
                "string", "HTTP method", default="POST", enum=("GET", "POST", "PUT", "PATCH", "DELETE")
            ),
            "headers": HEADERS,
            "timeout": field("duration", "Request timeout", default="5s"),
            "rate_limit": field("string", "Rate limit resource to apply"),
            "retries": field("number", "Maximum retry attempts", default=3),
            "retry_period": field("duration", "Time between retries", default="1s"),
            "max_retry_backoff": field("duration", "Maximum retry backoff", default="300s"),
            "parallel": field("boolean", "Send batch messages in parallel", default=False),
            "batch_as_multipart": field("boolean", "Send batches as multipart requests"),
            "successful_on": field("array", "Extra status codes treated as success"),
        },
        examples=(
            "pipeline:\n"
            "  processors:\n"
            "    - http:\n"
            "        url: http://api.example.com/enrich\n"
            "        verb: POST",
        ),
    ),
    ComponentSchema(
        name="branch",
        description="Runs child processors on a copy of the message and maps the result back.",
        category="processor",
        docs_url=docs_url("processor", "branch"),
        fields={
            "request_map": field("bloblang", "Mapping producing the branch input", default="root = this"),
            "processors": _PROCESSOR_LIST,
            "result_map": field("bloblang", "Mapping merging the branch result", default="root = this"),
        },
        examples=(
            "pipeline:\n"
            "  processors:\n"
            "    - branch:\n"
            "        request_map: 'root = this.user_id'\n"
            "        processors:\n"
            "          - http:\n"
            "              url: http://api.example.com/users/${! content() }\n"
            "        result_map: 'root.user = this'",
        ),
    ),
    ComponentSchema(
        name="log",
        description="Prints a log event for each message.",
        category="processor",
        docs_url=docs_url("processor", "log"),
        fields={
            "level": field(
                "string",
                "Log level",
                default="INFO",
                enum=("TRACE", "DEBUG", "INFO", "WARN", "ERROR", "FATAL", "ALL"),
            ),
            "message": field(
                "interpolated_string",
                "Log message",
                required=True,
                examples=("Processing message: ${! content() }",),
            ),
            "fields_mapping": field("bloblang", "Mapping producing structured log fields"),
        },
        examples=("pipeline:\n  processors:\n    - log:\n        message: 'id: ${! this.id }'",),
    ),
    ComponentSchema(
        name="cache",
        description="Performs operations against a cache resource.",
        category="processor",
        docs_url=docs_url("processor", "cache"),
        fields={
            "resource": field("string", "Cache resource label", required=True, examples=("my_cache",)),
            "operator": field(
                "string",
                "Cache operation",
                required=True,
                enum=("get", "set", "add", "delete", "keys"),
                examples=("get",),
            ),
            "key": field(
                "interpolated_string", "Cache key", required=True, examples=("${! this.id }",)
            ),
            "value": field("interpolated_string", "Value to store"),
            "ttl": field("duration", "Time to live"),
        },
        examples=(
            "pipeline:\n"
            "  processors:\n"
            "    - cache:\n"
            "        resource: my_cache\n"
            "        operator: get\n"
            "        key: ${! this.id }",
        ),
    ),
    ComponentSchema(
        name="rate_limit",
        description="Throttles messages using a rate limit resource.",
        category="processor",
        docs_url=docs_url("processor", "rate_limit"),
        fields={
            "resource": field("string", "Rate limit resource label", required=True, examples=("api_limit",)),
        },
    ),
    ComponentSchema(
        name="dedupe",
        description="Drops messages whose key was already seen in a cache.",
        category="processor",
        docs_url=docs_url("processor", "dedupe"),
        fields={
            "cache": field("string", "Cache resource label", required=True, examples=("dedupe_cache",)),
            "key": field(
                "interpolated_string", "Deduplication key", required=True, examples=("${! this.id }",)
            ),
            "drop_on_err": field("boolean", "Drop messages when the cache fails", default=True),
        },
    ),
    ComponentSchema(
        name="sleep",
        description="Pauses processing for a duration.",
        category="processor",
        docs_url=docs_url("processor", "sleep"),
        fields={
            "duration": field(
                "interpolated_string", "Sleep duration", required=True, examples=("1s",)
            ),
        },
    ),
    ComponentSchema(
        name="compress",
        description="Compresses message payloads.",
        category="processor",
        docs_url=docs_url("processor", "compress"),
        fields={
            "algorithm": field(
                "string",
                "Compression algorithm",
                required=True,
                enum=_COMPRESSION_ALGORITHMS,
                examples=("gzip",),
            ),
            "level": field("number", "Compression level", default=-1),
        },
    ),
    ComponentSchema(
        name="decompress",
        description="Decompresses message payloads.",
        category="processor",
        docs_url=docs_url("processor", "decompress"),
        fields={
            "algorithm": field(
                "string",
                "Compression algorithm",
                required=True,
                enum=_COMPRESSION_ALGORITHMS + ("bzip2",),
                examples=("gzip",),
            ),
        },
    ),
    ComponentSchema(
        name="switch",
        description="Routes messages through the first case whose check passes.",
        category="processor",
        docs_url=docs_url("processor", "switch"),
        fields={
            "": field(
                "array",
                "Switch cases",
                required=True,
                items=field(
                    "object",
                    "Switch case",
                    properties={
                        "check": field("bloblang", "Condition mapping"),
                        "processors": field("array", "Processors for this case"),
                        "fallthrough": field("boolean", "Continue to the next case"),
                    },
                ),
            ),
        },
    ),
    ComponentSchema(
        name="try",
        description="Runs child processors, skipping the rest after a failure.",
        category="processor",
        docs_url=docs_url("processor", "try"),
        fields={"": _PROCESSOR_LIST},
    ),
    ComponentSchema(
        name="catch",
        description="Runs child processors only on failed messages and clears the error.",
        category="processor",
        docs_url=docs_url("processor", "catch"),
        fields={"": _PROCESSOR_LIST},
    ),
)

PROCESSOR_SCHEMAS: MappingProxyType[str, ComponentSchema] = MappingProxyType(
    {schema.name: schema for schema in _PROCESSORS}
)
