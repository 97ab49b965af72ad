"""Avro payload format.

Messages are plain dicts. The schema is looked up by name in an
AvroSchemaStore and its file text is what gets registered. On decode the
registry's (writer) schema is resolved against the local schema of the same
name, if the store has one.
"""

from __future__ import annotations

import io
import json
import logging
from typing import Any, Optional

import fastavro
from fastavro.schema import SchemaParseException, UnknownType
from fastavro.validation import ValidationError, validate

from ..avro import AvroSchemaStore, named_closure
from ..exceptions import DecodeError, EncodeError, RegcodecError, ValidationFailedError
from ..models import SchemaType
from .base import FormatStrategy

logger = logging.getLogger(__name__)


class AvroFormat(FormatStrategy):
    """Avro binary payloads (no object container header).

    Args:
        store: Schema store messages are validated and decoded against

    Example:
        >>> fmt = AvroFormat(AvroSchemaStore(path="schemas"))
        >>> fmt.encode_payload({"name": "my name"}, schema_name="simple.v1.SimpleMessage")
        b'\\x0emy name'
    """

    schema_type = SchemaType.AVRO

    def __init__(self, store: AvroSchemaStore) -> None:
        self.store = store

    def schema_text(self, message: Any, schema_name: Optional[str] = None) -> str:
        if schema_name is None:
            raise EncodeError("Avro messages need a schema_name")
        self.store.find(schema_name)
        text = self.store.find_text(schema_name)
        if text is None:
            raise EncodeError(f"No schema text stored for {schema_name}")
        return text

    def encode_payload(
        self,
        message: Any,
        schema_name: Optional[str] = None,
        schema_text: Optional[str] = None,
    ) -> bytes:
        if schema_name is None:
            raise EncodeError("Avro messages need a schema_name")
        schema = self.store.find(schema_name)

        try:
            validate(message, schema, raise_errors=True, strict=True)
        except ValidationError as err:
            raise ValidationFailedError(f"{schema_name}: {err}") from err

        buffer = io.BytesIO()
        fastavro.schemaless_writer(buffer, schema, message)
        return buffer.getvalue()

    def decode_payload(self, data: bytes, schema_text: str) -> Any:
        writer_schema = self._writer_schema(schema_text)

        reader_schema = writer_schema
        writer_name = writer_schema.get("name") if isinstance(writer_schema, dict) else None
        if writer_name is not None:
            try:
                reader_schema = self.store.find(writer_name)
            except RegcodecError as err:
                logger.warning(
                    "No local reader schema; decoding with the writer schema.",
                    extra={"schema": writer_name, "error": str(err)},
                )

        try:
            return fastavro.schemaless_reader(io.BytesIO(data), writer_schema, reader_schema)
        except (EOFError, ValueError, KeyError) as err:
            raise DecodeError(f"Failed to decode Avro payload: {err}") from err

    def _writer_schema(self, schema_text: str) -> Any:
        """Parse a registry schema, taking referenced named types from the store."""
        try:
            definition = json.loads(schema_text)
        except ValueError as err:
            raise DecodeError(f"Invalid Avro writer schema: {err}") from err

        references: dict[str, Any] = {}
        while True:
            named = dict(references)
            try:
                schema = fastavro.parse_schema(definition, named_schemas=named)
            except UnknownType as err:
                if err.name in references:
                    raise DecodeError(f"Writer schema refers to unknown type {err.name}") from err
                try:
                    references[err.name] = self.store.find(err.name)
                except RegcodecError as lookup_err:
                    raise DecodeError(
                        f"Writer schema refers to {err.name}, which is not available locally"
                    ) from lookup_err
                continue
            except (ValueError, TypeError, SchemaParseException) as err:
                raise DecodeError(f"Invalid Avro writer schema: {err}") from err

            if isinstance(schema, dict) and references:
                schema["__named_schemas"] = named_closure(schema, {**named, **references})
            return schema
