"""Abstract interface for schema registry transports.

This module defines the network operations the cached registry consumes.
Implementations:

- HttpRegistryTransport: Confluent REST API over httpx
- InMemoryRegistryTransport: process-local registry for tests and offline use

Retry and timeout policy belong to the implementation; callers only see the
final result or the raised error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ..models import Reference, SchemaType, SubjectVersion


class RegistryTransport(ABC):
    """Network operations against a schema registry.

    All methods are blocking. Failures are raised to the caller unchanged;
    a missing schema id is reported as SchemaNotFoundError.
    """

    @abstractmethod
    def fetch_schema(self, schema_id: int) -> str:
        """Return the schema text registered under schema_id.

        Raises:
            SchemaNotFoundError: If the registry has no schema with that id
        """

    @abstractmethod
    def list_versions_for_id(self, schema_id: int) -> list[SubjectVersion]:
        """Return every (subject, version) pair schema_id is registered under."""

    @abstractmethod
    def register_schema(
        self,
        subject: str,
        schema_text: str,
        references: Sequence[Reference],
        schema_type: SchemaType,
    ) -> int:
        """Register schema_text under subject and return its schema id."""

    @abstractmethod
    def list_versions_for_subject(self, subject: str) -> list[int]:
        """Return the versions registered under subject."""
