"""Unit tests for registry configuration."""

from __future__ import annotations

import pytest

from regcodec.registry import RegistryConfig


class TestRegistryConfig:
    """Test RegistryConfig validation."""

    def test_defaults(self) -> None:
        """Test a URL alone is a complete configuration."""
        config = RegistryConfig(url="http://localhost:8081")

        assert config.timeout == 30.0
        assert config.retries == 0
        assert config.schema_context is None
        assert config.subject_prefix == ""

    def test_subject_prefix(self) -> None:
        """Test a context turns into the subject prefix."""
        config = RegistryConfig(url="http://localhost:8081", schema_context="payments")
        assert config.subject_prefix == ":.payments:"

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"url": ""}, "url"),
            ({"url": "http://r", "timeout": 0}, "timeout"),
            ({"url": "http://r", "connect_timeout": -1.0}, "connect_timeout"),
            ({"url": "http://r", "retries": -1}, "retries"),
            ({"url": "http://r", "client_key": "key.pem"}, "client_cert"),
            ({"url": "http://r", "password": "secret"}, "user"),
        ],
    )
    def test_invalid(self, kwargs: dict, message: str) -> None:
        """Test invalid combinations are rejected."""
        with pytest.raises(ValueError, match=message):
            RegistryConfig(**kwargs)


class TestFromEnv:
    """Test building configuration from the environment."""

    def test_defaults_without_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the local registry URL is used when nothing is set."""
        for name in ("URL", "CONTEXT", "TIMEOUT", "RETRIES", "USER", "PASSWORD"):
            monkeypatch.delenv(f"SCHEMA_REGISTRY_{name}", raising=False)

        config = RegistryConfig.from_env()

        assert config.url == "http://localhost:8081"
        assert config.timeout == 30.0
        assert config.user is None

    def test_reads_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test variables override defaults."""
        monkeypatch.setenv("SCHEMA_REGISTRY_URL", "https://registry:8081")
        monkeypatch.setenv("SCHEMA_REGISTRY_CONTEXT", "orders")
        monkeypatch.setenv("SCHEMA_REGISTRY_USER", "svc")
        monkeypatch.setenv("SCHEMA_REGISTRY_PASSWORD", "secret")
        monkeypatch.setenv("SCHEMA_REGISTRY_TIMEOUT", "5")
        monkeypatch.setenv("SCHEMA_REGISTRY_CONNECT_TIMEOUT", "1.5")
        monkeypatch.setenv("SCHEMA_REGISTRY_RETRIES", "3")

        config = RegistryConfig.from_env()

        assert config.url == "https://registry:8081"
        assert config.subject_prefix == ":.orders:"
        assert (config.user, config.password) == ("svc", "secret")
        assert config.timeout == 5.0
        assert config.connect_timeout == 1.5
        assert config.retries == 3

    def test_custom_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a different variable prefix."""
        monkeypatch.setenv("ORDERS_REGISTRY_URL", "http://orders:8081")
        assert RegistryConfig.from_env(prefix="ORDERS_REGISTRY_").url == "http://orders:8081"
