#!/usr/bin/env python3
"""Avro schema store example for regcodec.

This example demonstrates:
1. Laying out .avsc files by namespace
2. A schema that refers to a type defined in another file
3. Encoding and decoding Avro records through a registry

Schemas are written to a temporary directory so the example is self-contained.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

from regcodec import Client
from regcodec.avro import AvroSchemaStore
from regcodec.formats import AvroFormat
from regcodec.registry import CachedSchemaRegistry, InMemoryRegistryTransport

SCHEMAS = {
    "simple/v1/SimpleMessage.avsc": {
        "type": "record",
        "name": "SimpleMessage",
        "namespace": "simple.v1",
        "fields": [{"name": "name", "type": "string"}],
    },
    # Refers to simple.v1.SimpleMessage, which lives in its own file
    "referenced/v1/MessageBA.avsc": {
        "type": "record",
        "name": "MessageBA",
        "namespace": "referenced.v1",
        "fields": [{"name": "simple", "type": "simple.v1.SimpleMessage"}],
    },
}


def main() -> None:
    """Run the Avro example."""
    with tempfile.TemporaryDirectory() as root:
        for relative, definition in SCHEMAS.items():
            path = Path(root) / relative
            path.parent.mkdir(parents=True)
            path.write_text(json.dumps(definition, indent=2), encoding="utf-8")

        store = AvroSchemaStore(path=root)
        client = Client(
            registry=CachedSchemaRegistry(InMemoryRegistryTransport()),
            format=AvroFormat(store),
        )

        record = {"simple": {"name": "my name"}}
        data = client.encode(record, subject="referenced", schema_name="referenced.v1.MessageBA")

        print(f"Loaded schemas: {sorted(store.schemas)}")
        print(f"Encoded: {data.hex()}")
        print(f"Decoded: {client.decode(data)}")


if __name__ == "__main__":
    main()
