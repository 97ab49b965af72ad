"""Varint codec for regcodec.

This module provides the zig-zag varint encoding and the Protobuf nested-type
index header that sit between the wire envelope and a Protobuf payload.
"""

from __future__ import annotations

from .message_index import encode_message_indexes, read_message_indexes, write_message_indexes
from .varint import VarintReader, VarintWriter, decode_zigzag, encode_zigzag

__all__ = [
    "VarintWriter",
    "VarintReader",
    "encode_zigzag",
    "decode_zigzag",
    "write_message_indexes",
    "read_message_indexes",
    "encode_message_indexes",
]
