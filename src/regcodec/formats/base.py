"""Abstract interface for payload formats.

A format decides which schema text describes a message, which other schemas
that text depends on, and how the payload after the envelope is written and
read. The set of formats is closed:

- ProtobufFormat: compiled Protobuf messages (schema type PROTOBUF)
- AvroFormat: dicts validated against schemas from an AvroSchemaStore (AVRO)
- JsonSchemaFormat: pydantic models or mappings as JSON (JSON)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from ..models import SchemaType


class FormatStrategy(ABC):
    """Schema selection and payload encoding for one format."""

    schema_type: ClassVar[SchemaType]

    @abstractmethod
    def schema_text(self, message: Any, schema_name: Optional[str] = None) -> str:
        """Return the schema text registered for message.

        Args:
            message: Message (or schema object) to describe
            schema_name: Fully-qualified schema name, for formats that look schemas up by name

        Raises:
            EncodeError: If no schema text can be derived
        """

    def dependencies(self, message: Any) -> dict[str, Any]:
        """Return the schemas message's schema refers to, by reference name.

        Iteration order is the order references are sent to the registry.
        Formats without cross-schema references return an empty dict.
        """
        return {}

    @abstractmethod
    def encode_payload(
        self,
        message: Any,
        schema_name: Optional[str] = None,
        schema_text: Optional[str] = None,
    ) -> bytes:
        """Return the bytes written after the envelope (format header + body).

        Raises:
            ValidationFailedError: If message does not conform to its schema
        """

    @abstractmethod
    def decode_payload(self, data: bytes, schema_text: str) -> Any:
        """Decode the bytes after the envelope using the writer's schema text.

        Raises:
            DecodeError: If data cannot be decoded
        """
