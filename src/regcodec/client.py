"""Schema registry client: encode and decode enveloped messages.

The client ties the pieces together:

- encode: format writes the payload, the registration engine obtains a schema
  id, the envelope is put in front
- decode: the envelope yields the schema id, the cached registry yields the
  writer's schema text, the format decodes the payload with it
"""

from __future__ import annotations

from typing import Any, Optional

from .formats import FormatStrategy, ProtobufFormat
from .framing import read_envelope, write_envelope
from .registration import RegistrationEngine
from .registry import CachedSchemaRegistry, HttpRegistryTransport, RegistryConfig


class Client:
    """Encodes and decodes messages framed with registry schema ids.

    Args:
        registry: Cached registry to use. Built from config when None.
        config: Registry connection settings (default: RegistryConfig.from_env())
        format: Payload format (default: ProtobufFormat())

    Examples:
        ```python
        from regcodec import Client, RegistryConfig
        from regcodec.formats import AvroFormat
        from regcodec.avro import AvroSchemaStore

        # Protobuf (default format)
        client = Client(config=RegistryConfig(url="http://localhost:8081"))
        data = client.encode(order, subject="orders-value")
        order = client.decode(data)

        # Avro, schemas read from ./schemas
        client = Client(
            config=RegistryConfig(url="http://localhost:8081"),
            format=AvroFormat(AvroSchemaStore(path="./schemas")),
        )
        data = client.encode({"name": "my name"}, subject="simple",
                             schema_name="simple.v1.SimpleMessage")
        ```
    """

    def __init__(
        self,
        registry: Optional[CachedSchemaRegistry] = None,
        config: Optional[RegistryConfig] = None,
        format: Optional[FormatStrategy] = None,
    ) -> None:
        if registry is None:
            registry = CachedSchemaRegistry(
                HttpRegistryTransport(config if config is not None else RegistryConfig.from_env())
            )
        self.registry = registry
        self.format = format if format is not None else ProtobufFormat()
        self.engine = RegistrationEngine(self.registry, self.format)

    def encode(
        self,
        message: Any,
        subject: str,
        schema_text: Optional[str] = None,
        schema_name: Optional[str] = None,
    ) -> bytes:
        """Encode message and register its schema under subject.

        The payload is produced before anything is registered, so a message
        that fails validation leaves the registry untouched.

        Args:
            message: Message to encode
            subject: Subject the schema is registered under
            schema_text: Schema text to register (derived from message if None)
            schema_name: Schema name, for formats that look schemas up by name

        Returns:
            Envelope + payload

        Raises:
            ValidationFailedError: If message does not conform to its schema
            EncodeError: If the schema or payload cannot be produced
        """
        payload = self.format.encode_payload(
            message, schema_name=schema_name, schema_text=schema_text
        )
        schema_id = self.register_schema(
            message, subject, schema_text=schema_text, schema_name=schema_name
        )
        return write_envelope(schema_id) + payload

    def decode(self, data: bytes) -> Any:
        """Decode enveloped data with the writer's schema from the registry.

        Raises:
            MalformedEnvelopeError: If data has no valid envelope (no network call is made)
            SchemaNotFoundError: If the registry has no schema for the embedded id
            DecodeError: If the payload cannot be decoded
        """
        schema_id, payload = read_envelope(data)
        schema_text = self.registry.fetch(schema_id)
        return self.format.decode_payload(payload, schema_text)

    def register_schema(
        self,
        message: Any,
        subject: str,
        schema_text: Optional[str] = None,
        schema_name: Optional[str] = None,
    ) -> int:
        """Register the schema of message (and its dependencies) and return its id."""
        return self.engine.register(
            message, subject, schema_text=schema_text, schema_name=schema_name
        )
