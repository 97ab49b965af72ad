"""Confluent schema registry REST transport.

This module implements RegistryTransport over httpx. It speaks the subset of
the Confluent REST API regcodec needs:

- GET  /schemas/ids/{id}
- GET  /schemas/ids/{id}/versions
- POST /subjects/{subject}/versions
- GET  /subjects/{subject}/versions
"""

from __future__ import annotations

import logging
import ssl
from typing import Any, Optional, Sequence
from urllib.parse import quote

import httpx

from ..exceptions import SchemaNotFoundError
from ..models import Reference, SchemaType, SubjectVersion
from .config import RegistryConfig
from .transport import RegistryTransport

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/vnd.schemaregistry.v1+json"


def build_http_client(config: RegistryConfig) -> httpx.Client:
    """Create the httpx client described by a RegistryConfig.

    TLS material is loaded into an ssl.SSLContext, basic auth credentials
    become httpx.BasicAuth and connection retries are handled by the
    underlying httpx.HTTPTransport.
    """
    verify: ssl.SSLContext | bool = True
    if config.ssl_ca_file is not None or config.client_cert is not None:
        context = ssl.create_default_context(cafile=config.ssl_ca_file)
        if config.client_cert is not None:
            context.load_cert_chain(
                config.client_cert, config.client_key, config.client_key_pass
            )
        verify = context

    auth = None
    if config.user is not None:
        auth = httpx.BasicAuth(config.user, config.password or "")

    timeout = httpx.Timeout(config.timeout, connect=config.connect_timeout or config.timeout)
    transport = httpx.HTTPTransport(verify=verify, retries=config.retries, proxy=config.proxy)

    return httpx.Client(
        base_url=config.url,
        auth=auth,
        timeout=timeout,
        headers={"Content-Type": CONTENT_TYPE, "Accept": CONTENT_TYPE},
        transport=transport,
    )


class HttpRegistryTransport(RegistryTransport):
    """RegistryTransport backed by a Confluent-compatible REST API.

    Args:
        config: Registry connection settings
        client: Preconfigured httpx.Client (optional). When given, it is used as-is
            and not closed by this transport.

    Examples:
        ```python
        from regcodec.registry import HttpRegistryTransport, RegistryConfig

        with HttpRegistryTransport(RegistryConfig(url="http://localhost:8081")) as transport:
            schema_text = transport.fetch_schema(15)
        ```
    """

    def __init__(self, config: RegistryConfig, client: Optional[httpx.Client] = None) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client if client is not None else build_http_client(config)

    def fetch_schema(self, schema_id: int) -> str:
        logger.info("Fetching schema.", extra={"schema_id": schema_id})
        try:
            data = self._get(f"/schemas/ids/{schema_id}", params=self._context_params())
        except httpx.HTTPStatusError as err:
            if err.response.status_code == 404:
                raise SchemaNotFoundError(schema_id) from err
            raise
        return str(data["schema"])

    def list_versions_for_id(self, schema_id: int) -> list[SubjectVersion]:
        data = self._get(f"/schemas/ids/{schema_id}/versions", params=self._context_params())
        return [SubjectVersion.from_dict(item) for item in data or []]

    def register_schema(
        self,
        subject: str,
        schema_text: str,
        references: Sequence[Reference],
        schema_type: SchemaType,
    ) -> int:
        body = {
            "schemaType": SchemaType(schema_type).value,
            "references": [reference.to_dict() for reference in references],
            "schema": schema_text,
        }
        data = self._request("POST", f"{self._subject_path(subject)}/versions", json=body)
        schema_id = int(data["id"])
        logger.info(
            "Registered schema.",
            extra={"subject": self.config.subject_prefix + subject, "schema_id": schema_id},
        )
        return schema_id

    def list_versions_for_subject(self, subject: str) -> list[int]:
        data = self._get(f"{self._subject_path(subject)}/versions")
        return [int(version) for version in data or []]

    def close(self) -> None:
        """Close the underlying httpx client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpRegistryTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _subject_path(self, subject: str) -> str:
        return f"/subjects/{self.config.subject_prefix}{quote(subject, safe='')}"

    def _context_params(self) -> dict[str, str]:
        if self.config.schema_context is None:
            return {}
        return {"subject": self.config.subject_prefix}

    def _get(self, path: str, **kwargs: Any) -> Any:
        return self._request("GET", path, **kwargs)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        if self.config.path_prefix:
            path = f"{self.config.path_prefix.rstrip('/')}/{path.lstrip('/')}"

        response = self._client.request(method, path, **kwargs)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            logger.error(
                "Error while requesting %s: %s",
                path,
                response.text,
                extra={"method": method, "status_code": response.status_code},
            )
            raise
        return response.json()
