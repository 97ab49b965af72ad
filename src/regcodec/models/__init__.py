"""Registry value types for regcodec."""

from __future__ import annotations

from .registry import Reference, SchemaType, SubjectVersion

__all__ = ["Reference", "SchemaType", "SubjectVersion"]
