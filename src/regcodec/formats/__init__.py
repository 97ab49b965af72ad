"""Payload formats for regcodec.

This module provides the closed set of formats a Client can encode with.
"""

from __future__ import annotations

from .avro import AvroFormat
from .base import FormatStrategy
from .json_schema import JsonSchemaFormat
from .protobuf import ProtobufFormat, find_message_indexes, find_message_path

__all__ = [
    "FormatStrategy",
    "ProtobufFormat",
    "AvroFormat",
    "JsonSchemaFormat",
    "find_message_indexes",
    "find_message_path",
]
