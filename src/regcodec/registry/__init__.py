"""Schema registry access for regcodec.

This module provides the transport interface to a schema registry and the
cache that sits in front of it.

## Available Transports

### HttpRegistryTransport
Confluent REST API over httpx. Configured with RegistryConfig (URL, context,
basic auth, TLS material, proxy, timeouts, connection retries).

### InMemoryRegistryTransport
Process-local registry for tests and offline pipelines. Records every call.

## Quick Start

```python
from regcodec.registry import CachedSchemaRegistry, HttpRegistryTransport, RegistryConfig

config = RegistryConfig.from_env()
registry = CachedSchemaRegistry(HttpRegistryTransport(config))
schema_text = registry.fetch(15)   # network
schema_text = registry.fetch(15)   # cached
```
"""

from __future__ import annotations

from .cached import CachedSchemaRegistry
from .config import RegistryConfig
from .http import HttpRegistryTransport, build_http_client
from .memory import InMemoryRegistryTransport
from .transport import RegistryTransport

__all__ = [
    "RegistryTransport",
    "HttpRegistryTransport",
    "InMemoryRegistryTransport",
    "CachedSchemaRegistry",
    "RegistryConfig",
    "build_http_client",
]
