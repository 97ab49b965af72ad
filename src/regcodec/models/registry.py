"""Value types exchanged with the schema registry."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional


class SchemaType(str, enum.Enum):
    """Registry schema type tag sent with every registration."""

    PROTOBUF = "PROTOBUF"
    AVRO = "AVRO"
    JSON = "JSON"


@dataclass(frozen=True)
class Reference:
    """Pointer from a registered schema to a dependency's registered version.

    Attributes:
        name: Name the parent schema uses for the dependency (e.g. import path)
        subject: Subject the dependency is registered under
        version: Registered version of the dependency, None if not yet visible
    """

    name: str
    subject: str
    version: Optional[int]

    def to_dict(self) -> dict[str, Any]:
        """Return the registry JSON form of this reference."""
        return {"name": self.name, "subject": self.subject, "version": self.version}


@dataclass(frozen=True)
class SubjectVersion:
    """One (subject, version) pair a schema id is registered under."""

    subject: str
    version: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubjectVersion:
        return cls(subject=str(data["subject"]), version=int(data["version"]))
