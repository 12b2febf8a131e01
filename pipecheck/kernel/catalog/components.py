"""Known component names per category."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pipecheck.kernel.catalog.models import ComponentCategory

# fmt: off
VALID_INPUTS: frozenset[str] = frozenset({
    # Messaging
    "amqp_0_9", "amqp_1", "kafka", "kafka_franz", "nats", "nats_jetstream", "nats_kv",
    "nats_stream", "nsq", "pulsar", "redis_list", "redis_pubsub", "redis_scan",
    "redis_streams", "redpanda", "redpanda_common", "redpanda_migrator", "mqtt",
    "ockam_kafka", "beanstalkd",
    # Cloud storage
    "aws_s3", "aws_kinesis", "aws_sqs", "gcp_cloud_storage", "gcp_pubsub",
    "gcp_bigquery_select", "azure_blob_storage", "azure_queue_storage",
    "azure_table_storage", "azure_cosmosdb",
    # Databases
    "mongodb", "mongodb_cdc", "cassandra", "sql_raw", "sql_select",
    "mysql_cdc", "postgres_cdc", "cockroachdb_changefeed", "gcp_spanner_cdc",
    "tigerbeetle_cdc", "microsoft_sql_server_cdc",
    # Files
    "file", "csv", "parquet", "stdin", "sftp", "hdfs", "git",
    # HTTP / network
    "http_client", "http_server", "websocket", "socket", "socket_server",
    "nanomsg", "zmq4",
    # Utility
    "generate", "inproc", "resource", "broker", "dynamic",
    "batched", "read_until", "sequence", "subprocess",
    # Other
    "discord", "splunk", "twitter_search", "spicedb_watch", "timeplus",
    "schema_registry",
})

VALID_PROCESSORS: frozenset[str] = frozenset({
    # Transformation
    "mapping", "bloblang", "jq", "jmespath", "awk", "javascript", "mutation",
    "xml", "json_schema", "protobuf", "msgpack", "avro", "grok", "parse_log",
    # Encoding / compression
    "compress", "decompress", "archive", "unarchive",
    "parquet_encode", "parquet_decode",
    "schema_registry_encode", "schema_registry_decode",
    # Flow control
    "branch", "switch", "try", "catch", "retry", "while", "for_each",
    "parallel", "workflow", "processors", "group_by", "group_by_value",
    # Filtering / routing
    "bounds_check", "dedupe", "select_parts", "insert_part", "split",
    # Caching / state
    "cache", "cached", "rate_limit",
    # External services
    "http", "subprocess", "command", "aws_lambda", "redis", "redis_script",
    "sql_insert", "sql_raw", "sql_select", "couchbase", "azure_cosmosdb",
    "mongodb", "nats_kv", "nats_request_reply", "jira",
    "aws_dynamodb_partiql", "gcp_bigquery_select",
    # AI / ML
    "aws_bedrock_chat", "aws_bedrock_embeddings",
    "cohere_chat", "cohere_embeddings", "cohere_rerank",
    "gcp_vertex_ai_chat", "gcp_vertex_ai_embeddings",
    "ollama_embeddings", "ollama_chat", "ollama_moderation",
    "openai_chat_completion", "openai_embeddings", "openai_image_generation",
    "openai_speech", "openai_transcription", "openai_translation",
    "qdrant", "text_chunker",
    # Google Drive
    "google_drive_download", "google_drive_list_labels", "google_drive_search",
    # Observability / debug
    "log", "metric", "benchmark", "sleep", "crash",
    # Utility
    "resource", "sync_response", "wasm", "redpanda_data_transform",
})

VALID_OUTPUTS: frozenset[str] = frozenset({
    # Messaging
    "amqp_0_9", "amqp_1", "kafka", "kafka_franz", "nats", "nats_jetstream",
    "nats_kv", "nats_stream", "nsq", "pulsar", "redis_list", "redis_pubsub",
    "redis_streams", "redis_hash", "redpanda", "redpanda_common",
    "redpanda_migrator", "mqtt", "ockam_kafka", "beanstalkd", "pusher",
    # Cloud storage
    "aws_s3", "aws_kinesis", "aws_kinesis_firehose", "aws_sqs", "aws_sns",
    "aws_dynamodb", "gcp_cloud_storage", "gcp_pubsub", "gcp_bigquery",
    "azure_blob_storage", "azure_data_lake_gen2", "azure_queue_storage",
    "azure_table_storage", "azure_cosmosdb",
    # Databases
    "mongodb", "elasticsearch_v8", "opensearch", "sql_insert", "sql_raw",
    "couchbase", "questdb", "snowflake_put", "snowflake_streaming",
    "cyborgdb", "cypher",
    # Vector databases
    "pinecone", "qdrant",
    # Files
    "file", "stdout", "sftp", "hdfs",
    # HTTP / network
    "http_client", "http_server", "websocket", "socket", "nanomsg", "zmq4",
    # Observability
    "splunk_hec",
    # Utility
    "cache", "drop", "drop_on", "reject", "reject_errored", "inproc",
    "resource", "broker", "dynamic", "fallback", "retry", "switch",
    "sync_response",
    # Other
    "discord", "slack_reaction", "timeplus", "schema_registry",
})

VALID_BUFFERS: frozenset[str] = frozenset({"memory", "none", "system_window"})

VALID_CACHES: frozenset[str] = frozenset({
    "aws_dynamodb", "aws_s3", "couchbase", "file", "gcp_cloud_storage", "lru",
    "memcached", "memory", "mongodb", "multilevel", "nats_kv", "noop", "redis",
    "redpanda", "ristretto", "sql", "ttlru",
})

VALID_RATE_LIMITS: frozenset[str] = frozenset({"local", "redis"})
# fmt: on

COMPONENT_NAMES: MappingProxyType[ComponentCategory, frozenset[str]] = MappingProxyType({
    "input": VALID_INPUTS,
    "processor": VALID_PROCESSORS,
    "output": VALID_OUTPUTS,
    "cache": VALID_CACHES,
    "rate_limit": VALID_RATE_LIMITS,
    "buffer": VALID_BUFFERS,
})

#: Components that contain other components instead of declaring fields
WRAPPER_COMPONENTS: frozenset[str] = frozenset({
    "broker",
    "switch",
    "fallback",
    "try",
    "catch",
    "dynamic",
})

#: Keys that may sit beside the component type without being one
METADATA_KEYS: frozenset[str] = frozenset({
    "_expanso_component_id",
    "label",
    "description",
    "processors",
})


def is_metadata_key(key: str) -> bool:
    """Whether ``key`` is metadata rather than a component type."""
    return key in METADATA_KEYS or key.startswith("_")


def is_known_component(name: str, category: ComponentCategory) -> bool:
    """Whether ``name`` is a known component of ``category``."""
    return name in COMPONENT_NAMES[category]


def sorted_names(category: ComponentCategory) -> list[str]:
    """Names of ``category`` in a stable order, used as fuzzy-match candidates."""
    return sorted(COMPONENT_NAMES[category])


def component_type(component: Mapping[str, object]) -> str | None:
    """Return the component type key of a component mapping.

    The type is the first key that is not metadata. A mapping whose only
    non-underscore key is ``processors`` is the ``processors`` processor.
    """
    for key in component:
        if not is_metadata_key(key):
            return key
    if "processors" in component:
        return "processors"
    return None
