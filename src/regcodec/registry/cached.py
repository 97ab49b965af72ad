"""Memoizing wrapper around a registry transport.

Schemas are immutable once the registry has issued an id, so every successful
answer is kept for the lifetime of the CachedSchemaRegistry instance and never
refreshed. Failures are never cached.

Each memo table is filled under a per-key lock: concurrent callers asking for
the same key wait for the first caller's network round trip instead of
starting their own.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Hashable, Optional, Sequence, TypeVar

from ..models import Reference, SchemaType, SubjectVersion
from .transport import RegistryTransport

logger = logging.getLogger(__name__)

V = TypeVar("V")


class CachedSchemaRegistry:
    """Per-instance cache over a RegistryTransport.

    Guarantees, for the lifetime of the instance:

    - at most one fetch_schema call per schema id
    - at most one list_versions_for_id call per (subject, schema id)
    - at most one register_schema call per (subject, exact schema text)

    Args:
        upstream: Transport that performs the network calls

    Example:
        >>> registry = CachedSchemaRegistry(InMemoryRegistryTransport())
        >>> first = registry.register("orders-value", '{"type": "string"}', schema_type=SchemaType.AVRO)
        >>> registry.register("orders-value", '{"type": "string"}', schema_type=SchemaType.AVRO) == first
        True
    """

    def __init__(self, upstream: RegistryTransport) -> None:
        self.upstream = upstream
        self._schemas_by_id: dict[int, str] = {}
        self._ids_by_schema: dict[tuple[str, str], int] = {}
        self._versions_by_subject_and_id: dict[tuple[str, int], Optional[int]] = {}
        self._locks: dict[tuple[str, Hashable], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def fetch(self, schema_id: int) -> str:
        """Return the schema text for schema_id.

        Raises:
            SchemaNotFoundError: If the registry has no such schema (not cached)
        """
        return self._memoize(
            "schema", self._schemas_by_id, schema_id, lambda: self.upstream.fetch_schema(schema_id)
        )

    def fetch_version(self, schema_id: int, subject: str) -> Optional[int]:
        """Return the version schema_id is registered as under subject.

        Returns:
            The version, or None if schema_id is not registered under subject.
            An absent version is cached like any other answer.
        """

        def load() -> Optional[int]:
            results = self.upstream.list_versions_for_id(schema_id)
            return next((r.version for r in results if r.subject == subject), None)

        return self._memoize(
            "version", self._versions_by_subject_and_id, (subject, schema_id), load
        )

    def registered(self, subject: str, schema_text: str) -> bool:
        """Return True if schema_text is known to be registered under subject."""
        return (subject, schema_text) in self._ids_by_schema

    def lookup(self, subject: str, schema_text: str) -> Optional[int]:
        """Return the cached id of schema_text under subject, if any."""
        return self._ids_by_schema.get((subject, schema_text))

    def register(
        self,
        subject: str,
        schema_text: str,
        references: Sequence[Reference] = (),
        schema_type: SchemaType = SchemaType.PROTOBUF,
    ) -> int:
        """Register schema_text under subject, once.

        Repeated or concurrent calls with the same (subject, schema_text) return
        the id from the first successful registration. References and type of
        later calls are not sent.
        """
        return self._memoize(
            "register",
            self._ids_by_schema,
            (subject, schema_text),
            lambda: self.upstream.register_schema(
                subject, schema_text, list(references), schema_type
            ),
        )

    def subject_versions(self, subject: str) -> list[int]:
        """Return the versions registered under subject (not cached)."""
        return self.upstream.list_versions_for_subject(subject)

    def schema_subject_versions(self, schema_id: int) -> list[SubjectVersion]:
        """Return the (subject, version) pairs of schema_id (not cached)."""
        return self.upstream.list_versions_for_id(schema_id)

    def _memoize(
        self, table_name: str, table: dict, key: Hashable, load: Callable[[], V]
    ) -> V:
        if key in table:
            return table[key]

        with self._lock_for(table_name, key):
            if key in table:
                return table[key]
            logger.debug("Registry cache miss.", extra={"table": table_name, "key": key})
            value = load()
            table[key] = value
            return value

    def _lock_for(self, table_name: str, key: Hashable) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault((table_name, key), threading.Lock())
