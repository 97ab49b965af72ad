"""Dependency-aware schema registration.

Registering a schema that imports other schemas registers the imports first,
depth first, each under a subject equal to its reference name. The parent is
then registered with one reference per import, pointing at the version the
import is registered as.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .formats import FormatStrategy
from .models import Reference
from .registry import CachedSchemaRegistry

logger = logging.getLogger(__name__)


class RegistrationEngine:
    """Registers schemas and their dependencies through a cached registry.

    Args:
        registry: Cache in front of the registry transport
        format: Format that derives schema texts and dependencies

    Example:
        >>> engine = RegistrationEngine(CachedSchemaRegistry(InMemoryRegistryTransport()), ProtobufFormat())
        >>> schema_id = engine.register(order_message, subject="orders-value")
    """

    def __init__(self, registry: CachedSchemaRegistry, format: FormatStrategy) -> None:
        self.registry = registry
        self.format = format

    def register(
        self,
        message: Any,
        subject: str,
        schema_text: Optional[str] = None,
        schema_name: Optional[str] = None,
    ) -> int:
        """Ensure the schema of message and everything it depends on is registered.

        Args:
            message: Message (or schema object) whose schema is registered
            subject: Subject to register the top-level schema under
            schema_text: Schema text to register (derived from message if None)
            schema_name: Schema name, for formats that look schemas up by name

        Returns:
            Schema id of the top-level schema

        Raises:
            EncodeError: If the format cannot derive a schema text
        """
        if schema_text is None:
            schema_text = self.format.schema_text(message, schema_name=schema_name)

        known_id = self.registry.lookup(subject, schema_text)
        if known_id is not None:
            return known_id

        references = []
        for name, dependency in self.format.dependencies(message).items():
            logger.debug("Registering dependency.", extra={"subject": subject, "dependency": name})
            dependency_id = self.register(dependency, name)
            version = self.registry.fetch_version(dependency_id, name)
            references.append(Reference(name=name, subject=name, version=version))

        return self.registry.register(
            subject,
            schema_text,
            references=references,
            schema_type=self.format.schema_type,
        )
