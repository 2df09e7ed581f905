# ============================================================================
# PageVital - In-Memory Store
#
# Purpose: Process-local KeyValueStore (default; tests and short-lived runs)
# Dependencies: threading, base
# ============================================================================

import threading
from typing import Dict, Optional

from PageVital.storage.base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Dict-backed store. Safe to share between threads."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)
