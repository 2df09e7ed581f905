# ============================================================================
# PageVital - Base Store Interface
#
# Purpose: Abstract key-value store for JSON blobs
# Inputs: String keys and string values
# Outputs: Stored strings
# Dependencies: abc
# Usage: class MyStore(KeyValueStore): ...
#
# Changelog:
#   2026-09-02: Initial KeyValueStore interface
# ============================================================================

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract base class for the persistence boundary.

    Values are opaque strings (JSON documents written by the baseline manager
    and the alert history channel). Writes are last-writer-wins.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            Stored string, or None when the key has never been written

        Raises:
            PersistenceError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            PersistenceError: If the backend cannot be written
        """
        pass

    def delete(self, key: str) -> None:
        """Remove a key. Default: overwrite with an empty JSON array."""
        self.set(key, "[]")
