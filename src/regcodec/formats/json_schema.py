"""JSON payload format described by JSON Schema.

Messages are pydantic models, compiled Protobuf messages or plain mappings. A
model's schema text is its generated JSON Schema; Protobuf messages and
mappings need the caller to pass schema_text. The payload is compact JSON with
sorted keys and no format header.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

import jsonschema
from google.protobuf import json_format
from google.protobuf.message import Message
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import DecodeError, EncodeError, ValidationFailedError
from ..models import SchemaType
from .base import FormatStrategy


class JsonSchemaFormat(FormatStrategy):
    """JSON payloads validated against JSON Schema.

    Args:
        model_class: Pydantic model decoded payloads are validated into. Without
            it, decode returns plain dicts.

    Example:
        >>> class SimpleMessage(BaseModel):
        ...     name: str
        >>> JsonSchemaFormat().encode_payload(SimpleMessage(name="my name"))
        b'{"name":"my name"}'
    """

    schema_type = SchemaType.JSON

    def __init__(self, model_class: Optional[type[BaseModel]] = None) -> None:
        self.model_class = model_class

    def schema_text(self, message: Any, schema_name: Optional[str] = None) -> str:
        model = self._model_for(message)
        if model is None:
            raise EncodeError(
                f"Cannot derive a JSON Schema for {type(message).__name__}; "
                f"pass schema_text or use a pydantic model"
            )
        return json.dumps(model.model_json_schema(), sort_keys=True)

    def encode_payload(
        self,
        message: Any,
        schema_name: Optional[str] = None,
        schema_text: Optional[str] = None,
    ) -> bytes:
        if isinstance(message, BaseModel):
            data = message.model_dump(mode="json")
            if schema_text is None:
                schema_text = self.schema_text(message)
        elif isinstance(message, Message):
            data = json_format.MessageToDict(message, preserving_proto_field_name=True)
        elif isinstance(message, Mapping):
            data = dict(message)
        else:
            raise EncodeError(
                f"Expected a pydantic model, a Protobuf message or a mapping, "
                f"got {type(message).__name__}"
            )

        if schema_text is not None:
            self._validate(data, schema_text)

        return json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def decode_payload(self, data: bytes, schema_text: str) -> Any:
        try:
            decoded = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            raise DecodeError(f"Invalid JSON payload: {err}") from err

        if self.model_class is None:
            return decoded
        try:
            return self.model_class.model_validate(decoded)
        except PydanticValidationError as err:
            raise DecodeError(f"Payload does not fit {self.model_class.__name__}: {err}") from err

    def _model_for(self, message: Any) -> Optional[type[BaseModel]]:
        if isinstance(message, Message):
            return None
        if isinstance(message, BaseModel):
            return type(message)
        if isinstance(message, type) and issubclass(message, BaseModel):
            return message
        return self.model_class

    @staticmethod
    def _validate(data: Any, schema_text: str) -> None:
        try:
            schema = json.loads(schema_text)
        except json.JSONDecodeError as err:
            raise EncodeError(f"Schema text is not valid JSON: {err}") from err

        try:
            jsonschema.validate(instance=data, schema=schema)
        except jsonschema.ValidationError as err:
            raise ValidationFailedError(err.message) from err
        except jsonschema.SchemaError as err:
            raise EncodeError(f"Invalid JSON Schema: {err.message}") from err
