"""Tests for the per-environment storage registry."""

from unittest.mock import Mock

import pytest

from intake_seed.adapters.storage import StorageRegistry
from intake_seed.domain.models import Environment
from intake_seed.domain.ports import ConfigurationError
from intake_seed.infrastructure.config_manager import ConfigManager


@pytest.fixture
def config_manager():
    return ConfigManager({
        "database": {
            "username": "seed_user",
            "password": "s3cret",
            "environments": {
                "Q1": {"dsn": "q1-db:1521/INTAKE"},
                "Q2": {"dsn": "q2-db:1521/INTAKE"},
            },
        }
    })


@pytest.fixture
def factory():
    return Mock(side_effect=lambda db_config: Mock(db_config=db_config))


class TestStorageRegistry:
    def test_one_adapter_per_environment(self, config_manager, factory):
        registry = StorageRegistry(config_manager, adapter_factory=factory)

        first = registry.get(Environment.Q1)
        again = registry.get(Environment.Q1)
        other = registry.get(Environment.Q2)

        assert first is again
        assert other is not first
        assert factory.call_count == 2
        assert first.db_config.dsn == "q1-db:1521/INTAKE"

    def test_unconfigured_environment(self, config_manager, factory):
        registry = StorageRegistry(config_manager, adapter_factory=factory)
        with pytest.raises(ConfigurationError):
            registry.get(Environment.PROD)
        factory.assert_not_called()

    def test_close_all_closes_created_adapters(self, config_manager, factory):
        registry = StorageRegistry(config_manager, adapter_factory=factory)
        q1 = registry.get(Environment.Q1)
        q1.close.side_effect = RuntimeError("already closed")
        q2 = registry.get(Environment.Q2)

        registry.close_all()

        q1.close.assert_called_once()
        q2.close.assert_called_once()
        assert registry.get(Environment.Q1) is not q1

    def test_configured_environments(self, config_manager, factory):
        registry = StorageRegistry(config_manager, adapter_factory=factory)
        assert registry.configured_environments() == [Environment.Q1, Environment.Q2]
