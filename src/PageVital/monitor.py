"""
PageVital - Library API: PageVitalMonitor

Wires the collector, baseline manager, regression detector and alert system
together and runs the full pipeline in one call:

    collect -> diagnose -> find baseline -> detect regressions -> alert
    -> optionally save the snapshot as a new baseline
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from PageVital.alerts import AlertSystem
from PageVital.baselines import BaselineManager
from PageVital.config import Config
from PageVital.instrumentation.collector import WebVitalsCollector
from PageVital.logging_utils import get_logger
from PageVital.metrics import REGRESSION_METRICS
from PageVital.regression import RegressionDetector
from PageVital.reporting.schema import (
    Alert,
    Baseline,
    BuildInfo,
    DiagnosticReport,
    MetricsSnapshot,
    RegressionResult,
)
from PageVital.storage import create_store
from PageVital.storage.base import KeyValueStore

logger = get_logger(__name__)

# "en", "zh", "pt-BR", "en_US"
LOCALE_SEGMENT = re.compile(r"^[a-z]{2}(?:[-_][A-Za-z]{2})?$")


@dataclass
class MonitoringResult:
    """Everything produced by one full monitoring pass."""

    snapshot: MetricsSnapshot
    diagnostics: Optional[DiagnosticReport] = None
    baseline: Optional[Baseline] = None
    regression: Optional[RegressionResult] = None
    alerts: List[Alert] = field(default_factory=list)
    saved_baseline: Optional[Baseline] = None


def split_page_url(url: str) -> Tuple[str, Optional[str]]:
    """
    Path and leading locale segment of a page URL.

    "https://example.com/en/products" -> ("/products", "en")
    "https://example.com/products" -> ("/products", None)
    """
    path = urlparse(url).path or "/"
    segments = [s for s in path.split("/") if s]
    if not segments:
        return "/", None
    if not LOCALE_SEGMENT.match(segments[0]):
        return "/" + "/".join(segments), None
    return "/" + "/".join(segments[1:]), segments[0]


class PageVitalMonitor:
    """
    Embeddable monitor running the whole telemetry pipeline for a page.

    Build with ``from_config`` so every service shares one store.
    """

    def __init__(
        self,
        collector: WebVitalsCollector,
        baseline_manager: BaselineManager,
        detector: RegressionDetector,
        alert_system: AlertSystem,
    ):
        self.collector = collector
        self.baseline_manager = baseline_manager
        self.detector = detector
        self.alert_system = alert_system

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        host: Any = None,
        store: Optional[KeyValueStore] = None,
    ) -> "PageVitalMonitor":
        """
        Build all services from configuration.

        Args:
            config: Root configuration (defaults when omitted)
            host: Instrumentation host for the collector
            store: Shared key-value store; built from ``config.storage`` when omitted
        """
        config = config or Config()
        if store is None:
            store = create_store(config.storage)
        return cls(
            collector=WebVitalsCollector(host, config.collector),
            baseline_manager=BaselineManager(store, config.baselines),
            detector=RegressionDetector(config.regression),
            alert_system=AlertSystem(config.alerts, store),
        )

    def perform_full_monitoring(
        self,
        page_path: Optional[str] = None,
        locale: Optional[str] = None,
        build_info: Optional[BuildInfo] = None,
        save_baseline: bool = False,
        snapshot: Optional[MetricsSnapshot] = None,
    ) -> MonitoringResult:
        """
        Run collect -> diagnose -> compare -> alert for one page.

        Args:
            page_path: Path used to find the baseline; derived from the page URL when omitted
            locale: Locale segment; derived from the page URL when omitted
            build_info: Build metadata recorded on a saved baseline
            save_baseline: Store this snapshot as a new baseline afterwards
            snapshot: Use this snapshot instead of collecting one

        Returns:
            MonitoringResult; stages that failed are left empty. Never raises.
        """
        if snapshot is None:
            snapshot = self.collector.get_detailed_metrics()
        result = MonitoringResult(snapshot=snapshot)

        try:
            result.diagnostics = self.collector.generate_diagnostic_report(snapshot)
        except Exception as e:
            logger.warning(f"Diagnostics failed: {e}", exc_info=True)

        url_path, url_locale = split_page_url(snapshot.page.url)
        page_path = page_path or url_path
        locale = locale or url_locale

        if locale:
            result.baseline = self.baseline_manager.get_recent_baseline(page_path, locale)
        if result.baseline is not None:
            try:
                result.regression = self.detector.detect_regression(snapshot, result.baseline)
            except Exception as e:
                logger.warning(f"Regression detection failed: {e}", exc_info=True)
        else:
            logger.debug(f"No baseline for path={page_path!r} locale={locale!r}")

        metrics: Dict[str, float] = {m.value: snapshot.value_of(m) for m in REGRESSION_METRICS}
        if result.diagnostics is not None:
            metrics["score"] = result.diagnostics.analysis.score
        try:
            result.alerts = self.alert_system.check_and_alert(metrics, result.regression)
        except Exception as e:
            logger.warning(f"Alerting failed: {e}", exc_info=True)

        if save_baseline:
            result.saved_baseline = self.baseline_manager.save_baseline(snapshot, build_info)

        logger.info(
            f"Monitoring pass for {snapshot.page.url or 'unknown page'}: "
            f"{len(result.alerts)} alert(s), "
            f"regression={'yes' if result.regression and result.regression.has_regression else 'no'}"
        )
        return result

    def close(self) -> None:
        self.collector.stop()
        self.alert_system.close()
