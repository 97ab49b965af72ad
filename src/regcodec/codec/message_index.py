"""Protobuf nested-type index header.

A compiled message type is identified inside its file by a path of indices:
the position in the file's top-level message list, then the position in each
ancestor's nested-type list. The path is written between the envelope and the
Protobuf body:

- [0] (first top-level message) is written as the single varint 0
- any other path is written as its length followed by each index
"""

from __future__ import annotations

from typing import Sequence

from ..exceptions import DecodeError
from .varint import VarintReader, VarintWriter


def write_message_indexes(writer: VarintWriter, indexes: Sequence[int]) -> None:
    """Write a nested-type index path.

    Args:
        writer: VarintWriter to write to
        indexes: Index path, outermost first (must not be empty)

    Raises:
        ValueError: If indexes is empty or holds a negative index
    """
    if not indexes:
        raise ValueError("Message index path must not be empty")
    if any(i < 0 for i in indexes):
        raise ValueError(f"Message indexes must be non-negative, got {list(indexes)}")

    if list(indexes) == [0]:
        writer.write_int(0)
        return

    writer.write_int(len(indexes))
    for index in indexes:
        writer.write_int(index)


def read_message_indexes(reader: VarintReader) -> list[int]:
    """Read a nested-type index path.

    Returns:
        Index path, outermost first

    Raises:
        DecodeError: If the header is truncated or holds negative values
    """
    count = reader.read_int()
    if count == 0:
        return [0]
    if count < 0:
        raise DecodeError(f"Invalid message index count: {count}")

    indexes = [reader.read_int() for _ in range(count)]
    if any(i < 0 for i in indexes):
        raise DecodeError(f"Invalid message index path: {indexes}")
    return indexes


def encode_message_indexes(indexes: Sequence[int]) -> bytes:
    """Return the header bytes for an index path."""
    writer = VarintWriter()
    write_message_indexes(writer, indexes)
    return writer.to_bytes()
