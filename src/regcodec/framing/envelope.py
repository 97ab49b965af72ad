"""Schema registry wire envelope.

The envelope is the fixed prefix that lets a decoder find the writer schema
of a payload without the schema travelling with it:

- [Magic byte 0x00 (1 byte)] [Schema ID (4 bytes, big-endian)] [Format header] [Payload]

The format header is empty for Avro and JSON and holds the nested-type index
path for Protobuf. This layout is the Confluent wire format.
"""

from __future__ import annotations

import struct

from ..exceptions import MalformedEnvelopeError

MAGIC_BYTE = 0
ENVELOPE_PREFIX_SIZE = 5
MAX_SCHEMA_ID = 0xFFFFFFFF


def write_envelope(schema_id: int, format_header: bytes = b"") -> bytes:
    """Build the envelope prefix for a schema id.

    Args:
        schema_id: Registry schema id (0 to 2**32 - 1)
        format_header: Format-specific header bytes appended after the id

    Returns:
        Magic byte + big-endian schema id + format header

    Raises:
        ValueError: If schema_id is out of range

    Example:
        >>> write_envelope(15)
        b'\\x00\\x00\\x00\\x00\\x0f'
    """
    if not 0 <= schema_id <= MAX_SCHEMA_ID:
        raise ValueError(f"Schema ID must be 0-{MAX_SCHEMA_ID}, got {schema_id}")

    result = bytearray()
    result.append(MAGIC_BYTE)
    result.extend(struct.pack(">I", schema_id))
    result.extend(format_header)
    return bytes(result)


def read_envelope(data: bytes) -> tuple[int, bytes]:
    """Split enveloped data into its schema id and the bytes after it.

    Args:
        data: Enveloped message

    Returns:
        Tuple of (schema_id, remaining bytes)

    Raises:
        MalformedEnvelopeError: If data is shorter than 5 bytes or the magic byte is wrong

    Example:
        >>> read_envelope(b"\\x00\\x00\\x00\\x00\\x0f\\x0emy name")
        (15, b'\\x0emy name')
    """
    if len(data) < ENVELOPE_PREFIX_SIZE:
        raise MalformedEnvelopeError(
            f"Envelope too short: need at least {ENVELOPE_PREFIX_SIZE} bytes, "
            f"got {len(data)} bytes"
        )

    if data[0] != MAGIC_BYTE:
        raise MalformedEnvelopeError(
            f"Expected data to begin with magic byte 0x00, got {data[0]:#04x}"
        )

    schema_id = struct.unpack(">I", data[1:ENVELOPE_PREFIX_SIZE])[0]
    return schema_id, bytes(data[ENVELOPE_PREFIX_SIZE:])
