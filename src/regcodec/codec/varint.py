"""Zig-zag varint writing and reading.

This module provides the variable-length integer encoding shared by the Avro
and Protobuf wire formats. Values are zig-zag mapped so small negative numbers
stay short, then written 7 bits per byte, low-order group first, with the
continuation bit (0x80) set on every byte except the last.
"""

from __future__ import annotations

from ..exceptions import DecodeError

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def _zigzag(value: int) -> int:
    if value < INT64_MIN or value > INT64_MAX:
        raise ValueError(f"Value {value} is outside the signed 64-bit range")
    return (value << 1) ^ (value >> 63)


def _unzigzag(value: int) -> int:
    return (value >> 1) ^ -(value & 1)


class VarintWriter:
    """Writes zig-zag varints and raw bytes into a byte buffer.

    Example:
        >>> writer = VarintWriter()
        >>> writer.write_int(2)
        >>> writer.write_int(-1)
        >>> writer.to_bytes()
        b'\\x04\\x01'
    """

    def __init__(self) -> None:
        """Initialize an empty writer."""
        self._buffer = bytearray()

    def write_int(self, value: int) -> None:
        """Write a signed integer as a zig-zag varint.

        Args:
            value: Signed integer in the 64-bit range

        Raises:
            ValueError: If value doesn't fit in a signed 64-bit integer
        """
        num = _zigzag(value)
        while num & ~0x7F:
            self._buffer.append((num & 0x7F) | 0x80)
            num >>= 7
        self._buffer.append(num)

    def write_bytes(self, data: bytes) -> None:
        """Write raw bytes.

        Args:
            data: Bytes to append
        """
        self._buffer.extend(data)

    def byte_length(self) -> int:
        """Return the number of bytes written so far."""
        return len(self._buffer)

    def to_bytes(self) -> bytes:
        """Return the written bytes."""
        return bytes(self._buffer)


class VarintReader:
    """Reads zig-zag varints and raw bytes from a byte buffer.

    Example:
        >>> reader = VarintReader(b"\\x04\\x02\\x00rest")
        >>> [reader.read_int() for _ in range(3)]
        [2, 1, 0]
        >>> reader.read_remaining()
        b'rest'
    """

    def __init__(self, data: bytes, offset: int = 0) -> None:
        """Initialize a reader over data.

        Args:
            data: Byte buffer to read
            offset: Position of the first byte to read
        """
        self._data = bytes(data)
        self._position = offset

    def read_int(self) -> int:
        """Read one zig-zag varint.

        Returns:
            Decoded signed integer

        Raises:
            DecodeError: If the buffer ends before the last varint byte
        """
        result = 0
        shift = 0
        while True:
            if self._position >= len(self._data):
                raise DecodeError(
                    f"Truncated varint at byte {self._position} "
                    f"(buffer is {len(self._data)} bytes)"
                )
            byte = self._data[self._position]
            self._position += 1
            result |= (byte & 0x7F) << shift
            shift += 7
            if not byte & 0x80:
                break
            if shift >= 70:
                raise DecodeError("Varint is longer than 10 bytes")
        return _unzigzag(result)

    def read_bytes(self, num_bytes: int) -> bytes:
        """Read exactly num_bytes raw bytes.

        Raises:
            DecodeError: If not enough bytes are available
        """
        if self._position + num_bytes > len(self._data):
            raise DecodeError(
                f"Not enough bytes: need {num_bytes}, have {self.bytes_remaining()}"
            )
        chunk = self._data[self._position : self._position + num_bytes]
        self._position += num_bytes
        return chunk

    def read_remaining(self) -> bytes:
        """Read every byte left in the buffer."""
        chunk = self._data[self._position :]
        self._position = len(self._data)
        return chunk

    def bytes_remaining(self) -> int:
        """Return the number of unread bytes."""
        return len(self._data) - self._position

    def position(self) -> int:
        """Return the current read position in bytes."""
        return self._position


def encode_zigzag(value: int) -> bytes:
    """Encode a single signed integer as a zig-zag varint."""
    writer = VarintWriter()
    writer.write_int(value)
    return writer.to_bytes()


def decode_zigzag(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode one zig-zag varint starting at offset.

    Returns:
        Tuple of (value, offset of the next unread byte)
    """
    reader = VarintReader(data, offset)
    value = reader.read_int()
    return value, reader.position()
