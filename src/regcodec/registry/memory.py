"""In-memory schema registry transport.

This module provides InMemoryRegistryTransport, a process-local registry that
behaves like the REST API without a server. It is useful for tests, local
development and pipelines that never leave one process:

- Stable ids: the same (schema text, references, type) always gets the same id
- Per-subject versions: a new version only when a subject sees a new schema
- Call log: every transport call is recorded in `calls` in order
"""

from __future__ import annotations

import threading
from typing import Sequence

from ..exceptions import SchemaNotFoundError
from ..models import Reference, SchemaType, SubjectVersion
from .transport import RegistryTransport

_SchemaKey = tuple[str, tuple[Reference, ...], SchemaType]


class InMemoryRegistryTransport(RegistryTransport):
    """Process-local RegistryTransport.

    Attributes:
        calls: Ordered log of (operation, argument) tuples, one per call
        first_id: Id handed to the first registered schema

    Examples:
        ```python
        from regcodec import Client
        from regcodec.registry import CachedSchemaRegistry, InMemoryRegistryTransport

        transport = InMemoryRegistryTransport()
        client = Client(registry=CachedSchemaRegistry(transport))
        data = client.encode(message, subject="orders-value")
        assert transport.calls == [("register_schema", "orders-value")]
        assert client.decode(data) == message
        ```
    """

    def __init__(self, first_id: int = 1) -> None:
        self.first_id = first_id
        self.calls: list[tuple[str, object]] = []
        self._lock = threading.Lock()
        self._ids: dict[_SchemaKey, int] = {}
        self._texts: dict[int, str] = {}
        self._subjects: dict[str, list[int]] = {}

    def fetch_schema(self, schema_id: int) -> str:
        with self._lock:
            self.calls.append(("fetch_schema", schema_id))
            if schema_id not in self._texts:
                raise SchemaNotFoundError(schema_id)
            return self._texts[schema_id]

    def list_versions_for_id(self, schema_id: int) -> list[SubjectVersion]:
        with self._lock:
            self.calls.append(("list_versions_for_id", schema_id))
            return [
                SubjectVersion(subject=subject, version=index + 1)
                for subject, ids in self._subjects.items()
                for index, registered_id in enumerate(ids)
                if registered_id == schema_id
            ]

    def register_schema(
        self,
        subject: str,
        schema_text: str,
        references: Sequence[Reference],
        schema_type: SchemaType,
    ) -> int:
        key = (schema_text, tuple(references), SchemaType(schema_type))
        with self._lock:
            self.calls.append(("register_schema", subject))
            schema_id = self._ids.get(key)
            if schema_id is None:
                schema_id = max(self._texts, default=self.first_id - 1) + 1
                self._ids[key] = schema_id
                self._texts[schema_id] = schema_text

            versions = self._subjects.setdefault(subject, [])
            if schema_id not in versions:
                versions.append(schema_id)
            return schema_id

    def list_versions_for_subject(self, subject: str) -> list[int]:
        with self._lock:
            self.calls.append(("list_versions_for_subject", subject))
            return list(range(1, len(self._subjects.get(subject, [])) + 1))

    def add_schema(self, schema_id: int, schema_text: str) -> None:
        """Seed a schema under a fixed id, as if registered by another producer."""
        with self._lock:
            self._texts[schema_id] = schema_text
