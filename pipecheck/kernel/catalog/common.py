"""Field schemas shared by several components."""

from __future__ import annotations

from pipecheck.kernel.catalog.models import field

DOCS_BASE_URL = "https://docs.expanso.io/components"


def docs_url(category: str, name: str) -> str:
    """Documentation URL of a component (``inputs/kafka``, ``processors/mapping``...)."""
    return f"{DOCS_BASE_URL}/{category}s/{name}"


TLS = field(
    "object",
    "TLS configuration for secure connections",
    properties={
        "enabled": field("boolean", "Enable TLS", default=False),
        "skip_cert_verify": field("boolean", "Skip certificate verification", default=False),
        "root_cas": field("string", "Inline root CA certificates"),
        "root_cas_file": field("string", "Path to root CA certificate file"),
        "client_certs": field(
            "array",
            "Client certificates for mutual TLS",
            items=field(
                "object",
                "Client certificate",
                properties={
                    "cert": field("string", "Inline certificate"),
                    "key": field("string", "Inline key"),
                    "cert_file": field("string", "Path to certificate file"),
                    "key_file": field("string", "Path to key file"),
                },
            ),
        ),
    },
)

SASL = field(
    "object",
    "SASL authentication configuration",
    properties={
        "mechanism": field(
            "string",
            "SASL mechanism",
            enum=("none", "PLAIN", "SCRAM-SHA-256", "SCRAM-SHA-512", "OAUTHBEARER", "AWS_MSK_IAM"),
        ),
        "user": field("string", "SASL username"),
        "password": field("string", "SASL password"),
        "access_token": field("string", "OAUTHBEARER static token"),
    },
)

AWS_CREDENTIALS = field(
    "object",
    "AWS credentials configuration",
    properties={
        "profile": field("string", "AWS profile name"),
        "id": field("string", "AWS access key ID"),
        "secret": field("string", "AWS secret access key"),
        "token": field("string", "AWS session token"),
        "role": field("string", "IAM role ARN to assume"),
        "role_external_id": field("string", "External ID for the assumed role"),
        "from_ec2_role": field("boolean", "Use the EC2 instance role"),
    },
)

BATCHING = field(
    "object",
    "Batching policy",
    properties={
        "count": field("number", "Messages per batch", default=0),
        "byte_size": field("number", "Bytes per batch", default=0),
        "period": field("duration", "Maximum time before flushing a partial batch", default=""),
        "check": field("bloblang", "Mapping that ends a batch when it returns true"),
        "jitter": field("number", "Random jitter applied to the period"),
        "processors": field("array", "Processors applied to each batch"),
    },
)

HEADERS = field("object", "HTTP headers", examples=({"Content-Type": "application/json"},))

CODEC_ENUM = ("lines", "all-bytes", "delim:X", "csv", "csv:X", "tar", "gzip", "chunker:N", "auto")

MAX_IN_FLIGHT = field("number", "Maximum number of messages in flight", default=64)
