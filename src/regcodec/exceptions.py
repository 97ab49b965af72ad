"""Exception hierarchy for regcodec.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from RegcodecError for easy catching of any regcodec-specific error.

Transport failures (network errors, HTTP status errors other than a missing
schema) are not wrapped and reach the caller as raised by httpx.
"""

from __future__ import annotations


class RegcodecError(Exception):
    """Base exception for all regcodec errors."""

    pass


class EncodeError(RegcodecError):
    """Raised when encoding a message fails.

    Examples:
        - Message type cannot be located in its file descriptor
        - Schema text cannot be derived for the message
        - Schema id out of the u32 range
    """

    pass


class ValidationFailedError(EncodeError):
    """Raised when a message does not conform to its schema.

    Raised before any bytes are written and before the schema of the current
    call is registered.
    """

    pass


class DecodeError(RegcodecError):
    """Raised when decoding binary data fails.

    Examples:
        - Truncated varint in a format header
        - Nested-type index path outside the file descriptor
        - Payload that the format runtime cannot parse
    """

    pass


class MalformedEnvelopeError(DecodeError):
    """Raised when data does not start with a valid wire envelope.

    Examples:
        - First byte is not the magic byte 0x00
        - Fewer than 5 bytes (magic byte + 4-byte schema id)
    """

    pass


class SchemaNotFoundError(RegcodecError):
    """Raised when the registry has no schema for a schema id."""

    def __init__(self, schema_id: int) -> None:
        super().__init__(f"Schema with id {schema_id} is not found on registry")
        self.schema_id = schema_id


class SchemaError(RegcodecError):
    """Raised when a local schema definition cannot be loaded.

    Examples:
        - Schema file missing from the store directory
        - File declares a different name than its path implies
        - References that can never be resolved
    """

    pass


class SchemaFileNotFoundError(SchemaError):
    """Raised when no schema file exists for a fully-qualified name."""

    def __init__(self, name: str, path: object) -> None:
        super().__init__(f"Could not find Avro schema for {name} at {path}")
        self.name = name
        self.path = path


class SchemaMismatchError(SchemaError):
    """Raised when a schema file defines a different type than its path implies."""

    def __init__(self, expected: str, actual: str, path: object) -> None:
        super().__init__(f"Expected schema {path} to define type {expected}, got {actual}")
        self.expected = expected
        self.actual = actual
        self.path = path


class UnresolvableSchemaError(SchemaError):
    """Raised when forward references cannot be resolved.

    Examples:
        - Two files that reference each other by name
        - A dependency still reported missing after it was loaded
        - Reference chains deeper than the resolution bound
    """

    pass
