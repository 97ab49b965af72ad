"""regcodec: Schema Registry Wire Codec

A Python library for encoding and decoding messages framed with schema
registry ids, so payloads never carry their schema. Compatible with the
Confluent wire format.

Key Features:
- Magic byte + schema id envelope with Protobuf nested-type index headers
- Per-client cache: one network round trip per schema id or registration
- Imported Protobuf files registered first and sent as references
- Avro schemas loaded from disk with forward references resolved
- Protobuf, Avro (fastavro) and JSON Schema (pydantic) payloads

Quick Start:
    >>> from regcodec import Client, RegistryConfig
    >>> from regcodec.formats import JsonSchemaFormat
    >>> from pydantic import BaseModel
    >>>
    >>> class StatusReport(BaseModel):
    ...     vehicle_id: int
    ...     active: bool
    >>>
    >>> client = Client(
    ...     config=RegistryConfig(url="http://localhost:8081"),
    ...     format=JsonSchemaFormat(model_class=StatusReport),
    ... )
    >>> data = client.encode(StatusReport(vehicle_id=42, active=True), subject="status-value")
    >>> decoded = client.decode(data)
"""

from __future__ import annotations

from .avro import AvroSchemaStore
from .client import Client
from .codec import decode_zigzag, encode_zigzag
from .exceptions import (
    DecodeError,
    EncodeError,
    MalformedEnvelopeError,
    RegcodecError,
    SchemaError,
    SchemaFileNotFoundError,
    SchemaMismatchError,
    SchemaNotFoundError,
    UnresolvableSchemaError,
    ValidationFailedError,
)
from .formats import AvroFormat, FormatStrategy, JsonSchemaFormat, ProtobufFormat
from .framing import read_envelope, write_envelope
from .models import Reference, SchemaType, SubjectVersion
from .registration import RegistrationEngine
from .registry import (
    CachedSchemaRegistry,
    HttpRegistryTransport,
    InMemoryRegistryTransport,
    RegistryConfig,
    RegistryTransport,
)

__version__ = "0.1.0"

__all__ = [
    # Core API
    "Client",
    "RegistrationEngine",
    # Formats
    "FormatStrategy",
    "ProtobufFormat",
    "AvroFormat",
    "JsonSchemaFormat",
    "AvroSchemaStore",
    # Registry
    "RegistryTransport",
    "HttpRegistryTransport",
    "InMemoryRegistryTransport",
    "CachedSchemaRegistry",
    "RegistryConfig",
    # Types
    "Reference",
    "SchemaType",
    "SubjectVersion",
    # Wire
    "write_envelope",
    "read_envelope",
    "encode_zigzag",
    "decode_zigzag",
    # Exceptions
    "RegcodecError",
    "EncodeError",
    "ValidationFailedError",
    "DecodeError",
    "MalformedEnvelopeError",
    "SchemaNotFoundError",
    "SchemaError",
    "SchemaFileNotFoundError",
    "SchemaMismatchError",
    "UnresolvableSchemaError",
    # Version
    "__version__",
]
