"""Avro schema storage for regcodec.

This module provides the on-disk schema store the Avro format reads its
schemas from.
"""

from __future__ import annotations

from .store import AvroSchemaStore, NeedsDependency, Resolved, named_closure

__all__ = [
    "AvroSchemaStore",
    "Resolved",
    "NeedsDependency",
    "named_closure",
]
