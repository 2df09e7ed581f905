# ============================================================================
# PageVital - Storage Package
#
# Purpose: Key-value JSON blob stores backing baselines and alert history
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PageVital.storage import MemoryStore, create_store
#
# Changelog:
#   2026-09-02: Initial storage package (MemoryStore, LocalFileStore)
#   2026-09-20: SQLiteStore and create_store() factory
# ============================================================================

from PageVital.config import StorageConfig
from PageVital.errors import ConfigurationError
from PageVital.storage.base import KeyValueStore
from PageVital.storage.local_file import LocalFileStore
from PageVital.storage.memory import MemoryStore
from PageVital.storage.sqlite_store import SQLiteStore


def create_store(config: StorageConfig) -> KeyValueStore:
    """Build the store named by the storage config."""
    if config.type == "memory":
        return MemoryStore()
    if config.type == "local_file":
        return LocalFileStore(config.path)
    if config.type == "sqlite":
        return SQLiteStore(config.path if config.path.endswith(".db") else f"{config.path}/pagevital.db")
    raise ConfigurationError(f"Unknown storage type: {config.type}")


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "LocalFileStore",
    "SQLiteStore",
    "create_store",
]
