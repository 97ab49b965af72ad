"""Configuration for the schema registry HTTP transport.

This module provides the connection settings consumed by HttpRegistryTransport.
Everything here is passed through to httpx; regcodec itself only reads the
schema context and path prefix to build request paths.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class RegistryConfig:
    """Connection settings for a Confluent-compatible schema registry.

    Attributes:
        url: Base URL of the registry (e.g. "http://localhost:8081")
        schema_context: Registry context name; subjects become ":.<context>:<subject>"
        path_prefix: URL path prefix placed in front of every request path
        user: Basic auth user
        password: Basic auth password
        proxy: Proxy URL requests are forwarded through
        ssl_ca_file: File with the CA certificate(s) used to verify the registry
        client_cert: File with the client certificate for mutual TLS
        client_key: File with the private key for client_cert
        client_key_pass: Password for client_key
        connect_timeout: Connect timeout in seconds (defaults to timeout)
        timeout: Read/write/pool timeout in seconds (default 30.0)
        retries: Connection retries performed by the httpx transport (default 0)

    Examples:
        ```python
        from regcodec.registry import RegistryConfig

        # Local registry
        config = RegistryConfig(url="http://localhost:8081")

        # Registry behind TLS with basic auth, inside a context
        config = RegistryConfig(
            url="https://registry.internal:8081",
            schema_context="payments",
            user="svc-payments",
            password="...",
            ssl_ca_file="/etc/ssl/registry-ca.pem",
            connect_timeout=2.0,
        )
        ```
    """

    url: str
    schema_context: Optional[str] = None
    path_prefix: Optional[str] = None

    # Authentication
    user: Optional[str] = None
    password: Optional[str] = None

    # Network
    proxy: Optional[str] = None
    ssl_ca_file: Optional[str] = None
    client_cert: Optional[str] = None
    client_key: Optional[str] = None
    client_key_pass: Optional[str] = None
    connect_timeout: Optional[float] = None
    timeout: float = 30.0
    retries: int = 0

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.url:
            raise ValueError("url must be a non-empty registry URL")

        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")

        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise ValueError(f"connect_timeout must be > 0, got {self.connect_timeout}")

        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")

        if self.client_key is not None and self.client_cert is None:
            raise ValueError("client_key requires client_cert")

        if self.password is not None and self.user is None:
            raise ValueError("password requires user")

    @property
    def subject_prefix(self) -> str:
        """Prefix placed in front of subject names for the configured context."""
        if self.schema_context is None:
            return ""
        return f":.{self.schema_context}:"

    @classmethod
    def from_env(cls, prefix: str = "SCHEMA_REGISTRY_") -> RegistryConfig:
        """Build a configuration from environment variables.

        Reads <prefix>URL, CONTEXT, PATH_PREFIX, USER, PASSWORD, PROXY,
        SSL_CA_FILE, CLIENT_CERT, CLIENT_KEY, CLIENT_KEY_PASS, CONNECT_TIMEOUT,
        TIMEOUT and RETRIES. Unset variables keep their defaults.
        """

        def env(name: str) -> Optional[str]:
            value = os.getenv(prefix + name)
            return value if value else None

        connect_timeout = env("CONNECT_TIMEOUT")
        timeout = env("TIMEOUT")
        retries = env("RETRIES")
        return cls(
            url=env("URL") or "http://localhost:8081",
            schema_context=env("CONTEXT"),
            path_prefix=env("PATH_PREFIX"),
            user=env("USER"),
            password=env("PASSWORD"),
            proxy=env("PROXY"),
            ssl_ca_file=env("SSL_CA_FILE"),
            client_cert=env("CLIENT_CERT"),
            client_key=env("CLIENT_KEY"),
            client_key_pass=env("CLIENT_KEY_PASS"),
            connect_timeout=float(connect_timeout) if connect_timeout else None,
            timeout=float(timeout) if timeout else cls.timeout,
            retries=int(retries) if retries else cls.retries,
        )
