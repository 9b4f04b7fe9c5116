"""Per-environment storage adapter registry.

Holds at most one OracleAdapter (and therefore one connection pool) per
environment. Adapters are created on first use and closed together at
application shutdown.
"""

import logging
import threading
from typing import Callable, Dict

from intake_seed.domain.models import Environment
from intake_seed.domain.ports import StoragePort
from intake_seed.infrastructure.config_manager import ConfigManager, DatabaseConfig
from intake_seed.adapters.storage.oracle_adapter import OracleAdapter

logger = logging.getLogger(__name__)


class StorageRegistry:
    """Lazily builds and owns one storage adapter per environment.

    Parameters:
        config_manager: Source of per-environment DatabaseConfig
        adapter_factory: Builds an adapter from a DatabaseConfig (OracleAdapter by default)
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        adapter_factory: Callable[[DatabaseConfig], StoragePort] = OracleAdapter
    ):
        self.config_manager = config_manager
        self._adapter_factory = adapter_factory
        self._adapters: Dict[Environment, StoragePort] = {}
        self._lock = threading.Lock()

    def get(self, environment: Environment) -> StoragePort:
        """Return the adapter for an environment, creating it on first use.

        Raises:
            ConfigurationError: If the environment has no database configured
        """
        with self._lock:
            adapter = self._adapters.get(environment)
            if adapter is None:
                db_config = self.config_manager.get_database_config(environment)
                adapter = self._adapter_factory(db_config)
                self._adapters[environment] = adapter
                logger.debug(f"Registered storage adapter for {environment.value}")
            return adapter

    def configured_environments(self) -> list[Environment]:
        return self.config_manager.configured_environments()

    def close_all(self) -> None:
        """Close every adapter that was created."""
        with self._lock:
            adapters = list(self._adapters.items())
            self._adapters.clear()

        for environment, adapter in adapters:
            try:
                adapter.close()
            except Exception as e:
                logger.warning(f"Error closing storage adapter for {environment.value}: {str(e)}")
