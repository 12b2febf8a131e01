"""Buffer, cache and rate limit schemas."""

from __future__ import annotations

from types import MappingProxyType

from pipecheck.kernel.catalog.common import docs_url
from pipecheck.kernel.catalog.models import ComponentSchema, field

_BUFFERS = (
    ComponentSchema(
        name="memory",
        description="Stores messages in memory between input and processors.",
        category="buffer",
        docs_url=docs_url("buffer", "memory"),
        fields={
            "limit": field("number", "Maximum buffer size in bytes", default=524288000),
            "batch_policy": field("object", "Batching applied when reading from the buffer"),
        },
    ),
    ComponentSchema(
        name="none",
        description="No buffer; back pressure flows straight to the input.",
        category="buffer",
        docs_url=docs_url("buffer", "none"),
    ),
    ComponentSchema(
        name="system_window",
        description="Groups messages into tumbling or sliding time windows.",
        category="buffer",
        docs_url=docs_url("buffer", "system_window"),
        fields={
            "timestamp_mapping": field("bloblang", "Mapping producing the message timestamp"),
            "size": field("duration", "Window size", required=True, examples=("1m",)),
            "slide": field("duration", "Window slide"),
            "offset": field("duration", "Window offset"),
            "allowed_lateness": field("duration", "Grace period for late messages"),
        },
    ),
)

_CACHES = (
    ComponentSchema(
        name="memory",
        description="In-process key/value cache.",
        category="cache",
        docs_url=docs_url("cache", "memory"),
        fields={
            "default_ttl": field("duration", "Default time to live", default="5m"),
            "compaction_interval": field("duration", "Expired key sweep interval", default="60s"),
            "init_values": field("object", "Initial contents"),
            "shards": field("number", "Number of shards", default=1),
        },
    ),
    ComponentSchema(
        name="redis",
        description="Redis backed cache.",
        category="cache",
        docs_url=docs_url("cache", "redis"),
        fields={
            "url": field("string", "Redis URL", required=True, examples=("redis://localhost:6379",)),
            "prefix": field("string", "Key prefix"),
            "default_ttl": field("duration", "Default time to live"),
            "kind": field("string", "Client kind", enum=("simple", "cluster", "failover")),
        },
    ),
)

_RATE_LIMITS = (
    ComponentSchema(
        name="local",
        description="Token bucket rate limit local to this process.",
        category="rate_limit",
        docs_url=docs_url("rate_limit", "local"),
        fields={
            "count": field("number", "Requests allowed per interval", default=1000),
            "interval": field("duration", "Interval length", default="1s"),
            "byte_size": field("number", "Bytes allowed per interval", default=0),
        },
    ),
)

BUFFER_SCHEMAS: MappingProxyType[str, ComponentSchema] = MappingProxyType(
    {schema.name: schema for schema in _BUFFERS}
)
CACHE_SCHEMAS: MappingProxyType[str, ComponentSchema] = MappingProxyType(
    {schema.name: schema for schema in _CACHES}
)
RATE_LIMIT_SCHEMAS: MappingProxyType[str, ComponentSchema] = MappingProxyType(
    {schema.name: schema for schema in _RATE_LIMITS}
)
