"""Storage adapters for intake-seed.

This module contains the Oracle adapter implementing the StoragePort
interface and the registry that owns one adapter per environment.
"""

from intake_seed.adapters.storage.oracle_adapter import OracleAdapter, OracleSession
from intake_seed.adapters.storage.registry import StorageRegistry

__all__ = ["OracleAdapter", "OracleSession", "StorageRegistry"]
