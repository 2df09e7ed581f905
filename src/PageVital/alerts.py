# ============================================================================
# PageVital - Alert System
#
# Purpose: Turn metric values and regression results into alerts and
#          dispatch them to the enabled channels
# Inputs: Metric mappings or MetricsSnapshot, optional RegressionResult
# Outputs: Alerts (console log, bounded history, webhook POST)
# Dependencies: config, channels, reporting.schema
# Usage: alerts = AlertSystem(store=store)
#        alerts.check_and_alert(snapshot, regression_result)
#
# Changelog:
#   2026-09-14: Initial alert system (threshold checks, console/history/webhook)
#   2026-09-20: configure() deep-merges partial updates; wait_for_delivery()
#               for pending webhook POSTs
#   2026-09-23: filter_history() by severity, metric and time window
#   2026-10-19: Malformed alerts and unknown severity filters are dropped,
#               not raised
# ============================================================================

import math
import threading
from concurrent.futures import Future, wait
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from pydantic import ValidationError

from PageVital.channels import ConsoleChannel, HistoryChannel, WebhookChannel
from PageVital.config import AlertConfig
from PageVital.logging_utils import get_logger
from PageVital.metrics import Severity, ThresholdMetric
from PageVital.reporting.schema import Alert, MetricsSnapshot, Regression, RegressionResult
from PageVital.storage.base import KeyValueStore
from PageVital.utils.time import now_ms

logger = get_logger(__name__)

MetricValues = Union[Mapping[str, Any], MetricsSnapshot]


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _metric_values(metrics: MetricValues) -> Dict[str, Any]:
    if isinstance(metrics, MetricsSnapshot):
        return {m.value: getattr(metrics, m.value) for m in ThresholdMetric if m is not ThresholdMetric.SCORE}
    if isinstance(metrics, Mapping):
        return dict(metrics)
    logger.debug(f"Ignoring unsupported metrics value: {type(metrics).__name__}")
    return {}


class AlertSystem:
    """
    Threshold and regression alerting.

    When ``config.enabled`` is False every check returns [] and no channel is
    touched.
    """

    def __init__(self, config: Optional[AlertConfig] = None, store: Optional[KeyValueStore] = None):
        self.config = config or AlertConfig()
        self.console = ConsoleChannel()
        self.history = HistoryChannel(store, limit=self.config.history_limit, storage_key=self.config.storage_key)
        self.webhook: Optional[WebhookChannel] = None
        self._pending: Set[Future] = set()
        self._pending_lock = threading.Lock()
        self._sync_webhook()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, partial: Any) -> AlertConfig:
        """
        Apply a partial configuration update.

        Invalid fields are dropped individually (see ``AlertConfig.merged``);
        the current configuration is never left half-updated.

        Returns:
            The configuration now in effect
        """
        previous = self.config
        self.config = previous.merged(partial)
        if self.config.history_limit != previous.history_limit:
            self.history.resize(self.config.history_limit)
        self._sync_webhook()
        return self.config

    def _sync_webhook(self) -> None:
        url = self.config.channels.webhook
        current = self.webhook
        if current is not None and (
            current.url == url
            and current.timeout == self.config.webhook_timeout_s
            and current.retries == self.config.webhook_retries
        ):
            return
        self.webhook = None
        if current is not None:
            current.close()
        if url:
            self.webhook = WebhookChannel(
                url,
                timeout=self.config.webhook_timeout_s,
                retries=self.config.webhook_retries,
            )

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def check_metrics(self, metrics: MetricValues) -> List[Alert]:
        """
        Compare metric values with the configured warning/critical thresholds.

        Keys are ``cls``, ``lcp``, ``fid``, ``fcp``, ``ttfb`` and ``score``;
        unknown keys and non-numeric values are ignored. For ``score`` lower is
        worse.

        Returns:
            Alerts that were dispatched, at most one per metric
        """
        if not self.config.enabled:
            return []

        values = _metric_values(metrics)
        alerts: List[Alert] = []
        for metric in ThresholdMetric:
            value = _as_number(values.get(metric.value))
            if value is None:
                continue
            severity, bound = self._classify(metric, value)
            if severity is None:
                continue
            alert = self.send_alert(
                severity,
                f"{metric.value.upper()} is {value:g} ({severity.value} threshold: {bound:g})",
                {"metric": metric.value, "value": value, "threshold": bound, "type": "threshold"},
            )
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _classify(self, metric: ThresholdMetric, value: float):
        threshold = self.config.thresholds.for_metric(metric)
        if metric.inverted:
            if value <= threshold.critical:
                return Severity.CRITICAL, threshold.critical
            if value <= threshold.warning:
                return Severity.WARNING, threshold.warning
            return None, None
        if value >= threshold.critical:
            return Severity.CRITICAL, threshold.critical
        if value >= threshold.warning:
            return Severity.WARNING, threshold.warning
        return None, None

    def check_and_alert(
        self,
        metrics: MetricValues,
        regression_result: Optional[RegressionResult] = None,
    ) -> List[Alert]:
        """Threshold checks plus one alert per reported regression."""
        if not self.config.enabled:
            return []

        alerts = self.check_metrics(metrics)
        if regression_result is not None and regression_result.has_regression:
            for regression in regression_result.regressions:
                alert = self._alert_regression(regression, regression_result)
                if alert is not None:
                    alerts.append(alert)
        return alerts

    def _alert_regression(self, regression: Regression, result: RegressionResult) -> Optional[Alert]:
        metric = regression.metric.value
        if math.isfinite(regression.change_percent):
            percent: Optional[float] = round(regression.change_percent, 1)
            message = f"{metric.upper()} regressed by {percent:g}% vs baseline"
        else:
            percent = None
            message = f"{metric.upper()} regressed from a zero baseline"
        return self.send_alert(
            regression.severity,
            message,
            {
                "metric": metric,
                "value": regression.current,
                "baseline": regression.baseline,
                "change": regression.change,
                "change_percent": percent,
                "baseline_id": result.baseline.id,
                "url": result.current.page.url,
                "type": "regression",
            },
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def send_alert(
        self,
        severity: Union[Severity, str],
        message: str,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Alert]:
        """
        Build an alert and hand it to every enabled channel.

        Args:
            severity: "warning" or "critical"
            message: Human-readable message
            data: Free-form context; ``metric`` and ``value`` keys are lifted
                onto the alert

        Returns:
            The dispatched Alert, or None when alerting is disabled, the
            severity is unknown or the alert cannot be built
        """
        if not self.config.enabled:
            return None
        try:
            level = Severity(severity)
        except ValueError:
            logger.debug(f"Dropping alert with unknown severity {severity!r}: {message}")
            return None

        context = dict(data or {})
        metric = context.get("metric")
        try:
            alert = Alert(
                severity=level,
                message=message,
                metric=str(metric) if metric is not None else None,
                value=_as_number(context.get("value")),
                timestamp=now_ms(),
                data=context,
            )
        except ValidationError as e:
            logger.debug(f"Dropping malformed alert {message!r}: {e}")
            return None

        channels = self.config.channels
        if channels.console:
            self._deliver(self.console, alert)
        if channels.storage:
            self._deliver(self.history, alert)
        if self.webhook is not None:
            future = self._deliver(self.webhook, alert)
            if isinstance(future, Future):
                self._track(future)
        return alert

    def _deliver(self, channel: Any, alert: Alert) -> Any:
        try:
            return channel.deliver(alert)
        except Exception as e:
            logger.warning(f"Alert channel {channel.name!r} failed: {e}")
            return None

    def _track(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._untrack)

    def _untrack(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def wait_for_delivery(self, timeout: Optional[float] = None) -> bool:
        """
        Block until pending webhook deliveries finish.

        Returns:
            True if nothing is still pending
        """
        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Wait for pending deliveries and stop the webhook worker."""
        self.wait_for_delivery()
        if self.webhook is not None:
            self.webhook.close()
            self.webhook = None

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_alert_history(self) -> List[Alert]:
        """Stored alerts, oldest first."""
        return self.history.entries()

    def clear_alert_history(self) -> None:
        self.history.clear()

    def filter_history(
        self,
        severity: Optional[Union[Severity, str]] = None,
        metric: Optional[str] = None,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
    ) -> List[Alert]:
        """
        History entries matching every given criterion.

        start_time and end_time are inclusive epoch-ms bounds. An unknown
        severity matches nothing.
        """
        wanted: Optional[Severity] = None
        if severity is not None:
            try:
                wanted = Severity(severity)
            except ValueError:
                logger.debug(f"Unknown severity filter {severity!r}")
                return []
        return [
            alert
            for alert in self.history.entries()
            if (wanted is None or alert.severity is wanted)
            and (metric is None or alert.metric == metric)
            and (start_time is None or alert.timestamp >= start_time)
            and (end_time is None or alert.timestamp <= end_time)
        ]
