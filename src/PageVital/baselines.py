# ============================================================================
# PageVital - Baseline Manager
#
# Purpose: Persist snapshots as timestamped baselines and look up the most
#          recent baseline for a page path and locale
# Inputs: MetricsSnapshot, optional BuildInfo, KeyValueStore
# Outputs: Baseline records (JSON array under a single key)
# Dependencies: uuid, config, diagnostics, storage, utils.serialization
# Usage: manager = BaselineManager(store); manager.save_baseline(snapshot)
#
# Changelog:
#   2026-09-02: Initial baseline manager
#   2026-09-09: Retention cap applied before every write (most recent by timestamp)
#   2026-09-21: get_baselines() skips malformed entries instead of dropping the list
# ============================================================================

import uuid
from typing import List, Optional

from PageVital.config import BaselineConfig
from PageVital.diagnostics import compute_score
from PageVital.errors import PersistenceError
from PageVital.logging_utils import get_logger
from PageVital.reporting.schema import (
    Baseline,
    BaselineMetrics,
    BuildInfo,
    EnvironmentInfo,
    MetricsSnapshot,
)
from PageVital.storage.base import KeyValueStore
from PageVital.storage.memory import MemoryStore
from PageVital.utils.serialization import dump_models, load_models
from PageVital.utils.time import now_ms

logger = get_logger(__name__)


def _locale_matches(url: str, locale: str) -> bool:
    segment = f"/{locale.strip('/')}"
    return f"{segment}/" in url or url.endswith(segment)


class BaselineManager:
    """
    Stores baselines in a key-value store as one JSON array.

    All storage failures are logged and degrade to empty results or no-ops.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, config: Optional[BaselineConfig] = None):
        self.store = store if store is not None else MemoryStore()
        self.config = config or BaselineConfig()

    def create_baseline(self, snapshot: MetricsSnapshot, build_info: Optional[BuildInfo] = None) -> Baseline:
        """Derive a Baseline from a snapshot without storing it."""
        timestamp = snapshot.page.timestamp or now_ms()
        return Baseline(
            id=f"baseline-{timestamp}-{uuid.uuid4().hex[:9]}",
            timestamp=timestamp,
            url=snapshot.page.url,
            user_agent=snapshot.device.user_agent,
            metrics=BaselineMetrics(
                cls=snapshot.cls,
                lcp=snapshot.lcp,
                fid=snapshot.fid,
                fcp=snapshot.fcp,
                ttfb=snapshot.ttfb,
                dom_content_loaded=snapshot.dom_content_loaded,
                load_complete=snapshot.load_complete,
                first_paint=snapshot.first_paint,
            ),
            score=compute_score(snapshot),
            environment=EnvironmentInfo(
                viewport=snapshot.device.viewport,
                memory=snapshot.device.memory,
                cores=snapshot.device.cores,
            ),
            connection=snapshot.connection,
            build_info=build_info or BuildInfo(timestamp=timestamp),
        )

    def save_baseline(self, snapshot: MetricsSnapshot, build_info: Optional[BuildInfo] = None) -> Optional[Baseline]:
        """
        Store a snapshot as a new baseline.

        The stored list is trimmed to the ``max_baselines`` most recent entries
        by timestamp before it is written.

        Returns:
            The stored Baseline, or None if it could not be created or persisted
        """
        try:
            baseline = self.create_baseline(snapshot, build_info)
        except Exception as e:
            logger.warning(f"Could not derive baseline from snapshot: {e}")
            return None

        baselines = self.get_baselines()
        baselines.append(baseline)
        baselines.sort(key=lambda b: b.timestamp, reverse=True)
        retained = baselines[: self.config.max_baselines]

        try:
            self.store.set(self.config.storage_key, dump_models(retained))
        except PersistenceError as e:
            logger.warning(f"Failed to persist baseline {baseline.id}: {e}")
            return None
        except Exception as e:
            logger.warning(f"Unexpected store failure persisting baseline {baseline.id}: {e}")
            return None

        evicted = len(baselines) - len(retained)
        logger.info(
            f"Saved baseline {baseline.id} for {baseline.url} "
            f"({len(retained)} stored" + (f", {evicted} evicted)" if evicted else ")")
        )
        return baseline

    def get_baselines(self) -> List[Baseline]:
        """
        Read all stored baselines.

        Returns:
            Stored baselines; [] when the key is missing, unreadable, not JSON,
            or not a JSON array
        """
        try:
            raw = self.store.get(self.config.storage_key)
        except PersistenceError as e:
            logger.warning(f"Failed to read baselines: {e}")
            return []
        except Exception as e:
            logger.warning(f"Unexpected store failure reading baselines: {e}")
            return []

        baselines, skipped = load_models(raw, Baseline)
        if skipped:
            logger.debug(f"Skipped {skipped} malformed stored baseline(s)")
        return baselines

    def get_recent_baseline(self, path_suffix: str, locale: str) -> Optional[Baseline]:
        """
        Most recent baseline whose URL contains both the path and the locale segment.

        Args:
            path_suffix: Page path, e.g. "/products"
            locale: Locale code, e.g. "en"; matched as a "/en/" URL segment

        Returns:
            The matching baseline with the greatest timestamp, or None
        """
        matches = [
            b for b in self.get_baselines() if path_suffix in b.url and _locale_matches(b.url, locale)
        ]
        if not matches:
            return None
        return max(matches, key=lambda b: b.timestamp)

    def clear_baselines(self) -> None:
        """Remove every stored baseline."""
        try:
            self.store.set(self.config.storage_key, "[]")
        except Exception as e:
            logger.warning(f"Failed to clear baselines: {e}")
