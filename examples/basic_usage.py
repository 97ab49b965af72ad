#!/usr/bin/env python3
"""Basic usage example for regcodec.

This example demonstrates:
1. Defining a JSON message with Pydantic
2. Encoding it behind a schema registry envelope
3. Inspecting the envelope
4. Decoding back to a Pydantic model

The in-memory registry stands in for a schema registry server. Swap it for
`Client(config=RegistryConfig(url=...))` to talk to a real one.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from regcodec import Client, read_envelope
from regcodec.formats import JsonSchemaFormat
from regcodec.registry import CachedSchemaRegistry, InMemoryRegistryTransport


class StatusReport(BaseModel):
    """Vehicle status report."""

    vehicle_id: int = Field(ge=0, le=255, description="Vehicle ID (0-255)")
    battery_pct: int = Field(ge=0, le=100, description="Battery percentage (0-100)")
    active: bool = Field(description="Vehicle active flag")


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("regcodec Basic Usage Example")
    print("=" * 60)
    print()

    transport = InMemoryRegistryTransport(first_id=15)
    client = Client(
        registry=CachedSchemaRegistry(transport),
        format=JsonSchemaFormat(model_class=StatusReport),
    )

    print("1. Encoding a status report...")
    msg = StatusReport(vehicle_id=42, battery_pct=87, active=True)
    data = client.encode(msg, subject="status-value")
    print(f"   Encoded size: {len(data)} bytes")
    print(f"   Hex: {data.hex()}")
    print()

    print("2. Inspecting the envelope...")
    schema_id, payload = read_envelope(data)
    print(f"   Schema ID: {schema_id}")
    print(f"   Payload: {payload.decode('utf-8')}")
    print()

    print("3. Encoding again (schema already registered)...")
    client.encode(msg, subject="status-value")
    print(f"   Registry calls so far: {transport.calls}")
    print()

    print("4. Decoding...")
    decoded = client.decode(data)
    print(f"   Decoded: {decoded!r}")
    print(f"   Round-trip OK: {decoded == msg}")
    print()


if __name__ == "__main__":
    main()
