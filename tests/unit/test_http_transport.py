"""Unit tests for the REST registry transport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from regcodec.exceptions import SchemaNotFoundError
from regcodec.models import Reference, SchemaType, SubjectVersion
from regcodec.registry import HttpRegistryTransport, RegistryConfig, build_http_client

REGISTRY_URL = "http://localhost:8081"


def _transport(handler: Any, **config: Any) -> HttpRegistryTransport:
    client = httpx.Client(base_url=REGISTRY_URL, transport=httpx.MockTransport(handler))
    return HttpRegistryTransport(RegistryConfig(url=REGISTRY_URL, **config), client=client)


class TestFetchSchema:
    """Test GET /schemas/ids/{id}."""

    def test_fetch(self, registry_server: Any, http_transport: HttpRegistryTransport) -> None:
        """Test the schema field of the response is returned."""
        registry_server.add_schema(15, '{"type": "string"}')

        assert http_transport.fetch_schema(15) == '{"type": "string"}'
        assert registry_server.count("GET", "/schemas/ids/15") == 1

    def test_not_found(self, http_transport: HttpRegistryTransport) -> None:
        """Test a 404 becomes SchemaNotFoundError."""
        with pytest.raises(SchemaNotFoundError) as exc_info:
            http_transport.fetch_schema(999)
        assert exc_info.value.schema_id == 999

    def test_server_error_propagates(self) -> None:
        """Test other HTTP errors reach the caller unchanged."""
        transport = _transport(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(httpx.HTTPStatusError):
            transport.fetch_schema(15)

    def test_context_query_parameter(self) -> None:
        """Test fetches inside a context name the context."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"schema": "text"})

        transport = _transport(handler, schema_context="payments")
        transport.fetch_schema(15)

        assert seen[0].url.params["subject"] == ":.payments:"

    def test_path_prefix(self) -> None:
        """Test the path prefix is placed in front of request paths."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"schema": "text"})

        transport = _transport(handler, path_prefix="/registry/")
        transport.fetch_schema(15)

        assert seen[0].url.path == "/registry/schemas/ids/15"


class TestRegisterSchema:
    """Test POST /subjects/{subject}/versions."""

    def test_request_body(self, registry_server: Any, http_transport: HttpRegistryTransport) -> None:
        """Test the body carries type, references and schema text."""
        reference = Reference(name="simple/simple.proto", subject="simple/simple.proto", version=1)

        schema_id = http_transport.register_schema(
            "referenced", "schema text", [reference], SchemaType.PROTOBUF
        )

        assert schema_id == 1
        assert registry_server.registrations == [
            {
                "subject": "referenced",
                "schemaType": "PROTOBUF",
                "references": [
                    {"name": "simple/simple.proto", "subject": "simple/simple.proto", "version": 1}
                ],
                "schema": "schema text",
            }
        ]

    def test_unversioned_reference(self, registry_server: Any, http_transport: HttpRegistryTransport) -> None:
        """Test a reference without a version is sent as null."""
        reference = Reference(name="dep", subject="dep", version=None)
        http_transport.register_schema("parent", "text", [reference], SchemaType.PROTOBUF)

        assert registry_server.registrations[0]["references"][0]["version"] is None

    def test_subject_is_quoted(self) -> None:
        """Test slashes in subjects are escaped in the path."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": 7})

        transport = _transport(handler)
        transport.register_schema("simple/simple.proto", "text", [], SchemaType.PROTOBUF)

        assert seen[0].url.raw_path == b"/subjects/simple%2Fsimple.proto/versions"
        assert seen[0].headers["content-type"] == "application/vnd.schemaregistry.v1+json"

    def test_context_prefixes_subject(self) -> None:
        """Test subjects are registered inside the configured context."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": 7})

        transport = _transport(handler, schema_context="payments")
        assert transport.register_schema("orders", "text", [], SchemaType.AVRO) == 7

        assert seen[0].url.path == "/subjects/:.payments:orders/versions"
        assert json.loads(seen[0].content)["schemaType"] == "AVRO"

    def test_conflict_propagates(self) -> None:
        """Test an incompatible schema error reaches the caller."""
        transport = _transport(
            lambda request: httpx.Response(409, json={"error_code": 409, "message": "incompatible"})
        )

        with pytest.raises(httpx.HTTPStatusError):
            transport.register_schema("orders", "text", [], SchemaType.JSON)


class TestVersions:
    """Test version listings."""

    def test_versions_for_id(self, registry_server: Any, http_transport: HttpRegistryTransport) -> None:
        """Test (subject, version) pairs for an id."""
        http_transport.register_schema("a", "text", [], SchemaType.AVRO)
        http_transport.register_schema("b", "text", [], SchemaType.AVRO)

        assert http_transport.list_versions_for_id(1) == [
            SubjectVersion(subject="a", version=1),
            SubjectVersion(subject="b", version=1),
        ]

    def test_versions_for_subject(self, http_transport: HttpRegistryTransport) -> None:
        """Test the version numbers of a subject."""
        http_transport.register_schema("orders", "v1", [], SchemaType.AVRO)
        http_transport.register_schema("orders", "v2", [], SchemaType.AVRO)

        assert http_transport.list_versions_for_subject("orders") == [1, 2]


class TestBuildHttpClient:
    """Test httpx client construction."""

    def test_base_url_and_headers(self) -> None:
        """Test the registry URL and content type are set."""
        with build_http_client(RegistryConfig(url=REGISTRY_URL)) as client:
            assert str(client.base_url).rstrip("/") == REGISTRY_URL
            assert client.headers["accept"] == "application/vnd.schemaregistry.v1+json"
            assert client.auth is None

    def test_basic_auth(self) -> None:
        """Test credentials become basic auth."""
        config = RegistryConfig(url=REGISTRY_URL, user="svc", password="secret")
        with build_http_client(config) as client:
            assert isinstance(client.auth, httpx.BasicAuth)

    def test_timeouts(self) -> None:
        """Test connect timeout falls back to the general timeout."""
        with build_http_client(RegistryConfig(url=REGISTRY_URL, timeout=5.0)) as client:
            assert client.timeout.read == 5.0
            assert client.timeout.connect == 5.0

        config = RegistryConfig(url=REGISTRY_URL, timeout=5.0, connect_timeout=1.0)
        with build_http_client(config) as client:
            assert client.timeout.connect == 1.0

    def test_owned_client_closed(self) -> None:
        """Test the transport closes a client it built itself."""
        transport = HttpRegistryTransport(RegistryConfig(url=REGISTRY_URL))
        with transport:
            pass
        assert transport._client.is_closed
