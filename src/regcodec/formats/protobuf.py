"""Protobuf payload format.

Schema text for a message is its whole .proto file, sent to the registry as
the base64-encoded serialized FileDescriptorProto (the form the Confluent
serializers send). Imported files are registered first and referenced by
their import path; files under google/protobuf/ are built into every registry
and never registered.

The payload is the nested-type index header followed by the serialized
message. On decode the header's index path is walked through the writer's
file descriptor to find the message type.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any, Optional, Sequence

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.descriptor import Descriptor, FileDescriptor
from google.protobuf.message import DecodeError as ProtobufDecodeError
from google.protobuf.message import EncodeError as ProtobufEncodeError
from google.protobuf.message import Message

from ..codec import VarintReader, VarintWriter, read_message_indexes, write_message_indexes
from ..exceptions import DecodeError, EncodeError, ValidationFailedError
from ..models import SchemaType
from .base import FormatStrategy

BUILTIN_PREFIX = "google/protobuf/"

_PACKAGE_RE = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.MULTILINE)
_MESSAGE_RE = re.compile(r"^\s*message\s+(\w+)\s*\{", re.MULTILINE)


def _file_proto(file_descriptor: FileDescriptor) -> descriptor_pb2.FileDescriptorProto:
    return descriptor_pb2.FileDescriptorProto.FromString(file_descriptor.serialized_pb)


def find_message_indexes(descriptor: Descriptor) -> list[int]:
    """Return the nested-type index path of a message type inside its file.

    Raises:
        EncodeError: If the type is not declared in its file descriptor
    """
    names = []
    current: Optional[Descriptor] = descriptor
    while current is not None:
        names.append(current.name)
        current = current.containing_type
    names.reverse()

    messages: Sequence[descriptor_pb2.DescriptorProto] = _file_proto(descriptor.file).message_type
    indexes = []
    for name in names:
        index = next((i for i, m in enumerate(messages) if m.name == name), None)
        if index is None:
            raise EncodeError(f"{descriptor.full_name} is not declared in {descriptor.file.name}")
        indexes.append(index)
        messages = messages[index].nested_type
    return indexes


def find_message_path(
    file_proto: descriptor_pb2.FileDescriptorProto, indexes: Sequence[int]
) -> list[str]:
    """Return the message names along an index path, outermost first.

    Raises:
        DecodeError: If an index is outside the file's message lists
    """
    messages: Sequence[descriptor_pb2.DescriptorProto] = file_proto.message_type
    names = []
    for index in indexes:
        if index >= len(messages):
            raise DecodeError(
                f"Message index path {list(indexes)} does not exist in {file_proto.name}"
            )
        names.append(messages[index].name)
        messages = messages[index].nested_type
    return names


class ProtobufFormat(FormatStrategy):
    """Compiled Protobuf messages.

    Writer files fetched from the registry that the pool does not know yet are
    added to it. With the default pool, a generated _pb2 module imported later
    for such a file can clash with the added copy; pass a separate pool to keep
    registry files apart from generated code.

    Args:
        pool: Descriptor pool decoded types are looked up in (default: the
            pool generated _pb2 modules register into)

    Example:
        >>> fmt = ProtobufFormat()
        >>> fmt.encode_payload(SimpleMessage(name="my name"))
        b'\\x00\\n\\x07my name'
    """

    schema_type = SchemaType.PROTOBUF

    def __init__(self, pool: Optional[descriptor_pool.DescriptorPool] = None) -> None:
        self.pool = pool if pool is not None else descriptor_pool.Default()

    def schema_text(self, message: Any, schema_name: Optional[str] = None) -> str:
        file_descriptor = self._file_descriptor(message)
        return base64.b64encode(file_descriptor.serialized_pb).decode("ascii")

    def dependencies(self, message: Any) -> dict[str, Any]:
        if message is None:
            return {}
        file_descriptor = self._file_descriptor(message)
        return {
            dependency.name: dependency
            for dependency in file_descriptor.dependencies
            if not dependency.name.startswith(BUILTIN_PREFIX)
        }

    def encode_payload(
        self,
        message: Any,
        schema_name: Optional[str] = None,
        schema_text: Optional[str] = None,
    ) -> bytes:
        if not isinstance(message, Message):
            raise EncodeError(f"Expected a Protobuf message, got {type(message).__name__}")

        writer = VarintWriter()
        write_message_indexes(writer, find_message_indexes(message.DESCRIPTOR))
        try:
            writer.write_bytes(message.SerializeToString())
        except ProtobufEncodeError as err:
            raise ValidationFailedError(f"{message.DESCRIPTOR.full_name}: {err}") from err
        return writer.to_bytes()

    def decode_payload(self, data: bytes, schema_text: str) -> Any:
        reader = VarintReader(data)
        indexes = read_message_indexes(reader)

        file_proto = self._writer_file(schema_text)
        names = find_message_path(file_proto, indexes)
        full_name = ".".join(([file_proto.package] if file_proto.package else []) + names)
        try:
            descriptor = self.pool.FindMessageTypeByName(full_name)
        except KeyError as err:
            raise DecodeError(
                f"Could not find schema for {full_name}. "
                f"Make sure the corresponding .proto file has been compiled and loaded."
            ) from err

        message_class = message_factory.GetMessageClass(descriptor)
        try:
            return message_class.FromString(reader.read_remaining())
        except ProtobufDecodeError as err:
            raise DecodeError(f"Failed to decode {full_name}: {err}") from err

    def _file_descriptor(self, message: Any) -> FileDescriptor:
        if isinstance(message, FileDescriptor):
            return message
        if isinstance(message, Message):
            return message.DESCRIPTOR.file
        raise EncodeError(
            f"Expected a Protobuf message or FileDescriptor, got {type(message).__name__}"
        )

    def _writer_file(self, schema_text: str) -> descriptor_pb2.FileDescriptorProto:
        serialized = self._serialized_descriptor(schema_text)
        if serialized is not None:
            file_proto = descriptor_pb2.FileDescriptorProto.FromString(serialized)
            try:
                self.pool.FindFileByName(file_proto.name)
            except KeyError:
                try:
                    self.pool.AddSerializedFile(serialized)
                except (KeyError, TypeError) as err:
                    raise DecodeError(
                        f"Cannot load writer schema {file_proto.name}: {err}"
                    ) from err
            return file_proto

        # .proto text: the first package and message declarations only
        # identify the file; the index path is walked on its descriptor.
        package = _PACKAGE_RE.search(schema_text)
        message = _MESSAGE_RE.search(schema_text)
        if message is None:
            raise DecodeError("Schema text declares no message")
        full_name = f"{package.group(1)}.{message.group(1)}" if package else message.group(1)
        try:
            descriptor = self.pool.FindMessageTypeByName(full_name)
        except KeyError as err:
            raise DecodeError(
                f"Could not find schema for {full_name}. "
                f"Make sure the corresponding .proto file has been compiled and loaded."
            ) from err
        return _file_proto(descriptor.file)

    @staticmethod
    def _serialized_descriptor(schema_text: str) -> Optional[bytes]:
        try:
            serialized = base64.b64decode(schema_text, validate=True)
        except (binascii.Error, ValueError):
            return None
        if not serialized:
            return None
        try:
            descriptor_pb2.FileDescriptorProto.FromString(serialized)
        except ProtobufDecodeError:
            return None
        return serialized
