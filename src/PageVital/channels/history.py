# ============================================================================
# PageVital - Alert History Channel
#
# Purpose: Keep a bounded, FIFO-evicting ring of recent alerts and mirror it
#          to a key-value store so history survives restarts
# Inputs: Alert objects
# Outputs: In-memory history, JSON array under the alert-history key
# Dependencies: collections, threading, storage, utils.serialization
# Usage: channel = HistoryChannel(store, limit=100); channel.deliver(alert)
#
# Changelog:
#   2026-09-14: Initial history channel
#   2026-09-20: Existing stored history loaded at construction; store failures
#               degrade to in-memory only
#   2026-10-19: Any store failure on load degrades the same way
# ============================================================================

import threading
from collections import deque
from typing import Deque, List, Optional

from PageVital.channels.base import AlertChannel
from PageVital.errors import PersistenceError
from PageVital.logging_utils import get_logger
from PageVital.reporting.schema import Alert
from PageVital.storage.base import KeyValueStore
from PageVital.utils.serialization import dump_models, load_models

logger = get_logger(__name__)


class HistoryChannel(AlertChannel):
    """
    Bounded alert history.

    The ring holds at most ``limit`` alerts; appending beyond that evicts the
    oldest. Every change is written through to ``store`` when one is given.
    """

    name = "storage"

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        limit: int = 100,
        storage_key: str = "performance-alert-history",
    ):
        self.store = store
        self.limit = limit
        self.storage_key = storage_key
        self._lock = threading.Lock()
        self._ring: Deque[Alert] = deque(self._load(), maxlen=limit)

    def _load(self) -> List[Alert]:
        if self.store is None:
            return []
        try:
            raw = self.store.get(self.storage_key)
        except PersistenceError as e:
            logger.warning(f"Failed to read alert history: {e}")
            return []
        except Exception as e:
            logger.warning(f"Unexpected store failure reading alert history: {e}")
            return []
        alerts, skipped = load_models(raw, Alert)
        if skipped:
            logger.debug(f"Skipped {skipped} malformed stored alert(s)")
        return alerts[-self.limit :]

    def _persist(self, alerts: List[Alert]) -> None:
        if self.store is None:
            return
        try:
            self.store.set(self.storage_key, dump_models(alerts))
        except PersistenceError as e:
            logger.warning(f"Failed to persist alert history: {e}")
        except Exception as e:
            logger.warning(f"Unexpected store failure persisting alert history: {e}")

    def deliver(self, alert: Alert) -> None:
        with self._lock:
            self._ring.append(alert)
            snapshot = list(self._ring)
        self._persist(snapshot)

    def entries(self) -> List[Alert]:
        """Copy of the history, oldest first."""
        with self._lock:
            return list(self._ring)

    def resize(self, limit: int) -> None:
        """Change the capacity, keeping the newest entries."""
        with self._lock:
            self.limit = limit
            self._ring = deque(self._ring, maxlen=limit)
            snapshot = list(self._ring)
        self._persist(snapshot)

    def clear(self) -> None:
        with self._lock:
            self._ring.clear()
        self._persist([])

    def __len__(self) -> int:
        with self._lock:
            return len(self._ring)
