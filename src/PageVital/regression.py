# ============================================================================
# PageVital - Regression Detection
#
# Purpose: Compare a current snapshot with a stored baseline and classify
#          every metric that got significantly worse.
# Inputs: MetricsSnapshot (current), Baseline
# Outputs: RegressionResult with per-metric deltas and severities
#
# Severity order per metric:
#   1. metric's own absolute delta bounds (critical, then warning)
#   2. global percent-change bounds (critical, then warning)
#   3. warning
# A candidate must first reach min_change_percent to be reported at all.
# ============================================================================

import math
from typing import List, Optional, Tuple

from PageVital.config import MetricThreshold, RegressionConfig
from PageVital.logging_utils import get_logger
from PageVital.metrics import REGRESSION_METRICS, Metric, OverallSeverity, Severity
from PageVital.reporting.schema import (
    Baseline,
    MetricsSnapshot,
    Regression,
    RegressionResult,
    RegressionSummary,
)

logger = get_logger(__name__)

# Relative tolerance for bound comparisons: 0.15 - 0.1 evaluates to
# 0.049999999999999996 and must still meet a 0.05 bound.
_REL_TOL = 1e-9


def _meets(value: float, bound: float) -> bool:
    """value >= bound, tolerating float representation error."""
    return value >= bound or math.isclose(value, bound, rel_tol=_REL_TOL)


def change_percent(current: float, baseline: float) -> float:
    """|change / baseline| * 100; a zero baseline with any increase is infinite."""
    change = current - baseline
    if baseline == 0:
        return math.inf if change > 0 else 0.0
    return abs(change / baseline) * 100.0


def classify_severity(
    change: float,
    percent: float,
    delta: Optional[MetricThreshold],
    config: RegressionConfig,
) -> Tuple[Severity, float]:
    """
    Severity of a reported regression and the bound that decided it.

    Metrics without absolute delta bounds go straight to the percent table.
    """
    if delta is not None:
        if _meets(change, delta.critical):
            return Severity.CRITICAL, delta.critical
        if _meets(change, delta.warning):
            return Severity.WARNING, delta.warning

    if _meets(percent, config.percent_critical):
        return Severity.CRITICAL, config.percent_critical
    if _meets(percent, config.percent_warning):
        return Severity.WARNING, config.percent_warning

    return Severity.WARNING, config.min_change_percent


def summarize(regressions: List[Regression]) -> RegressionSummary:
    critical = sum(1 for r in regressions if r.severity is Severity.CRITICAL)
    warning = len(regressions) - critical
    if critical:
        overall = OverallSeverity.CRITICAL
    elif warning:
        overall = OverallSeverity.WARNING
    else:
        overall = OverallSeverity.NONE
    return RegressionSummary(
        total_regressions=len(regressions),
        critical_regressions=critical,
        warning_regressions=warning,
        overall_severity=overall,
    )


class RegressionDetector:
    """Detects metric regressions of a snapshot relative to a baseline."""

    def __init__(self, config: Optional[RegressionConfig] = None):
        self.config = config or RegressionConfig()

    def detect_regression(self, current: MetricsSnapshot, baseline: Baseline) -> RegressionResult:
        """
        Compare every regression metric present in both current and baseline.

        Only increases (all metrics are lower-is-better) whose percent change
        reaches ``min_change_percent`` are reported. Metrics missing from the
        baseline are skipped.
        """
        regressions: List[Regression] = []

        for metric in REGRESSION_METRICS:
            regression = self._compare(metric, current, baseline)
            if regression is not None:
                regressions.append(regression)

        summary = summarize(regressions)
        if regressions:
            logger.info(
                f"{summary.total_regressions} regression(s) vs baseline {baseline.id} "
                f"(overall {summary.overall_severity.value})"
            )
        return RegressionResult(
            has_regression=bool(regressions),
            regressions=tuple(regressions),
            summary=summary,
            baseline=baseline,
            current=current,
        )

    def _compare(self, metric: Metric, current: MetricsSnapshot, baseline: Baseline) -> Optional[Regression]:
        baseline_value = baseline.metrics.value_of(metric)
        if baseline_value is None or not math.isfinite(baseline_value):
            return None
        current_value = current.value_of(metric)

        change = current_value - baseline_value
        if change <= 0:
            return None

        percent = change_percent(current_value, baseline_value)
        if not _meets(percent, self.config.min_change_percent):
            return None

        severity, threshold = classify_severity(change, percent, self.config.deltas.get(metric), self.config)
        return Regression(
            metric=metric,
            current=current_value,
            baseline=baseline_value,
            change=change,
            change_percent=percent,
            severity=severity,
            threshold=threshold,
        )
