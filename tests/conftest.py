"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Optional
from urllib.parse import unquote

import httpx
import pytest
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf import timestamp_pb2  # noqa: F401  (registers google/protobuf/timestamp.proto)

from regcodec.avro import AvroSchemaStore
from regcodec.registry import (
    CachedSchemaRegistry,
    HttpRegistryTransport,
    InMemoryRegistryTransport,
    RegistryConfig,
)

REGISTRY_URL = "http://localhost:8081"

FieldProto = descriptor_pb2.FieldDescriptorProto

SIMPLE_PROTO_TEXT = """syntax = "proto3";

package simple.v1;

message SimpleMessage {
  string name = 1;
}
"""

REFERER_PROTO_TEXT = """syntax = "proto3";

package referenced.v1;

import "simple/simple.proto";

message MessageA {
  string id = 1;
}

message MessageB {
  message MessageBA {
    simple.v1.SimpleMessage simple = 1;
  }
}
"""


def _string_field(message: descriptor_pb2.DescriptorProto, name: str, number: int) -> None:
    message.field.add(
        name=name, number=number, type=FieldProto.TYPE_STRING, label=FieldProto.LABEL_OPTIONAL
    )


def _message_field(
    message: descriptor_pb2.DescriptorProto, name: str, number: int, type_name: str
) -> None:
    message.field.add(
        name=name,
        number=number,
        type=FieldProto.TYPE_MESSAGE,
        label=FieldProto.LABEL_OPTIONAL,
        type_name=type_name,
    )


def _simple_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="simple/simple.proto", package="simple.v1", syntax="proto3"
    )
    _string_field(file_proto.message_type.add(name="SimpleMessage"), "name", 1)
    return file_proto


def _referer_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="referenced/referer.proto",
        package="referenced.v1",
        syntax="proto3",
        dependency=["simple/simple.proto"],
    )
    _string_field(file_proto.message_type.add(name="MessageA"), "id", 1)
    message_b = file_proto.message_type.add(name="MessageB")
    _message_field(
        message_b.nested_type.add(name="MessageBA"), "simple", 1, ".simple.v1.SimpleMessage"
    )
    return file_proto


def _event_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="events/event.proto",
        package="events.v1",
        syntax="proto3",
        dependency=["google/protobuf/timestamp.proto", "simple/simple.proto"],
    )
    event = file_proto.message_type.add(name="Event")
    _message_field(event, "at", 1, ".google.protobuf.Timestamp")
    _message_field(event, "who", 2, ".simple.v1.SimpleMessage")
    return file_proto


def _required_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="required/required.proto", package="required.v1", syntax="proto2"
    )
    file_proto.message_type.add(name="Needs").field.add(
        name="id", number=1, type=FieldProto.TYPE_STRING, label=FieldProto.LABEL_REQUIRED
    )
    return file_proto


def _build_proto_types() -> SimpleNamespace:
    pool = descriptor_pool.Default()
    files = [_simple_file(), _referer_file(), _event_file(), _required_file()]
    for file_proto in files:
        try:
            pool.FindFileByName(file_proto.name)
        except KeyError:
            pool.AddSerializedFile(file_proto.SerializeToString())

    def message_class(full_name: str) -> Any:
        return message_factory.GetMessageClass(pool.FindMessageTypeByName(full_name))

    return SimpleNamespace(
        SimpleMessage=message_class("simple.v1.SimpleMessage"),
        MessageA=message_class("referenced.v1.MessageA"),
        MessageB=message_class("referenced.v1.MessageB"),
        MessageBA=message_class("referenced.v1.MessageB.MessageBA"),
        Event=message_class("events.v1.Event"),
        Needs=message_class("required.v1.Needs"),
    )


PROTO_TYPES = _build_proto_types()


AVRO_SCHEMAS = {
    "simple/v1/SimpleMessage.avsc": {
        "type": "record",
        "name": "SimpleMessage",
        "namespace": "simple.v1",
        "fields": [{"name": "name", "type": "string"}],
    },
    "referenced/v1/MessageBA.avsc": {
        "type": "record",
        "name": "MessageBA",
        "namespace": "referenced.v1",
        "fields": [{"name": "simple", "type": "simple.v1.SimpleMessage"}],
    },
    "x/First.avsc": {
        "type": "record",
        "name": "First",
        "namespace": "x",
        "fields": [
            {
                "name": "inner",
                "type": {"type": "record", "name": "Inner", "fields": [{"name": "a", "type": "int"}]},
            }
        ],
    },
    "x/Second.avsc": {
        "type": "record",
        "name": "Second",
        "namespace": "x",
        "fields": [{"name": "first", "type": "First"}],
    },
    "x/Third.avsc": {
        "type": "record",
        "name": "Third",
        "namespace": "x",
        "fields": [
            {
                "name": "inner",
                "type": {
                    "type": "record",
                    "name": "Inner",
                    "fields": [{"name": "b", "type": "string"}],
                },
            }
        ],
    },
}


def write_avro_schemas(root: Path, schemas: dict[str, Any]) -> Path:
    """Write schema definitions (dicts or raw text) under root."""
    for relative, definition in schemas.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        text = definition if isinstance(definition, str) else json.dumps(definition, indent=2)
        path.write_text(text, encoding="utf-8")
    return root


class RegistryServer:
    """Stateful stand-in for the registry REST API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.schemas: dict[int, str] = {}
        self.subjects: dict[str, list[int]] = {}
        self.registrations: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.assigned_ids: dict[str, int] = {}

    def add_schema(self, schema_id: int, schema_text: str) -> None:
        self.schemas[schema_id] = schema_text

    def count(self, method: str, path: str) -> int:
        return sum(
            1 for r in self.requests if r.method == method and unquote(r.url.path) == path
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        parts = [unquote(part) for part in raw_path.strip("/").split("/")]

        if request.method == "GET" and parts[:2] == ["schemas", "ids"]:
            schema_id = int(parts[2])
            if schema_id not in self.schemas:
                return httpx.Response(404, json={"error_code": 40403, "message": "Schema not found"})
            if parts[3:] == ["versions"]:
                return httpx.Response(200, json=self._versions_for_id(schema_id))
            return httpx.Response(200, json={"schema": self.schemas[schema_id]})

        if parts[0] == "subjects" and parts[2:] == ["versions"]:
            subject = parts[1]
            if request.method == "POST":
                return httpx.Response(200, json={"id": self._register(subject, request)})
            return httpx.Response(
                200, json=list(range(1, len(self.subjects.get(subject, [])) + 1))
            )

        return httpx.Response(404, json={"error_code": 404, "message": "Not found"})

    def _register(self, subject: str, request: httpx.Request) -> int:
        body = json.loads(request.content)
        self.registrations.append({"subject": subject, **body})
        schema_id: Optional[int] = self.assigned_ids.get(subject)
        if schema_id is None:
            schema_id = next(
                (i for i, text in self.schemas.items() if text == body["schema"]), None
            )
        if schema_id is None:
            schema_id = max(self.schemas, default=0) + 1
        self.schemas[schema_id] = body["schema"]
        versions = self.subjects.setdefault(subject, [])
        if schema_id not in versions:
            versions.append(schema_id)
        return schema_id

    def _versions_for_id(self, schema_id: int) -> list[dict[str, Any]]:
        return [
            {"subject": subject, "version": index + 1}
            for subject, ids in self.subjects.items()
            for index, registered_id in enumerate(ids)
            if registered_id == schema_id
        ]


@pytest.fixture
def proto() -> SimpleNamespace:
    """Runtime-built Protobuf message classes."""
    return PROTO_TYPES


@pytest.fixture
def avro_schema_dir(tmp_path: Path) -> Path:
    """Directory of .avsc files laid out by namespace."""
    return write_avro_schemas(tmp_path / "schemas", AVRO_SCHEMAS)


@pytest.fixture
def avro_store(avro_schema_dir: Path) -> AvroSchemaStore:
    """Avro schema store over avro_schema_dir."""
    return AvroSchemaStore(path=avro_schema_dir)


@pytest.fixture
def memory_transport() -> InMemoryRegistryTransport:
    """Empty in-memory registry transport."""
    return InMemoryRegistryTransport()


@pytest.fixture
def cached_registry(memory_transport: InMemoryRegistryTransport) -> CachedSchemaRegistry:
    """Cached registry over memory_transport."""
    return CachedSchemaRegistry(memory_transport)


@pytest.fixture
def registry_server() -> RegistryServer:
    """Fake registry REST API."""
    return RegistryServer()


@pytest.fixture
def http_transport(registry_server: RegistryServer) -> HttpRegistryTransport:
    """HTTP transport talking to registry_server."""
    client = httpx.Client(
        base_url=REGISTRY_URL, transport=httpx.MockTransport(registry_server.handle)
    )
    return HttpRegistryTransport(RegistryConfig(url=REGISTRY_URL), client=client)


@pytest.fixture
def simple_proto_text() -> str:
    """.proto source of simple/simple.proto."""
    return SIMPLE_PROTO_TEXT


@pytest.fixture
def referer_proto_text() -> str:
    """.proto source of referenced/referer.proto."""
    return REFERER_PROTO_TEXT
