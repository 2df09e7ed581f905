# ============================================================================
# PageVital - Metric Definitions
#
# Purpose: Closed set of Web Vitals metric names, severities, and the
#          good / needs-improvement / poor rating thresholds
# Inputs: Metric values
# Outputs: Ratings
# Dependencies: enum
# Usage: rate_metric(Metric.LCP, 3100.0) -> Rating.NEEDS_IMPROVEMENT
#
# Changelog:
#   2026-09-02: Initial metric enum and Web Vitals thresholds
#   2026-09-14: Added INP thresholds; ThresholdMetric for alert configuration
# ============================================================================

from enum import Enum
from typing import Dict, NamedTuple, Tuple


class Metric(str, Enum):
    """Web Vitals tracked by the collector. All are lower-is-better."""

    CLS = "cls"
    FID = "fid"
    LCP = "lcp"
    FCP = "fcp"
    TTFB = "ttfb"
    INP = "inp"


class ThresholdMetric(str, Enum):
    """Metrics the alert system has configurable thresholds for."""

    CLS = "cls"
    LCP = "lcp"
    FID = "fid"
    FCP = "fcp"
    TTFB = "ttfb"
    SCORE = "score"

    @property
    def inverted(self) -> bool:
        """True when a lower value is worse (diagnostic score)."""
        return self is ThresholdMetric.SCORE


class Severity(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


class OverallSeverity(str, Enum):
    NONE = "none"
    WARNING = "warning"
    CRITICAL = "critical"


class Rating(str, Enum):
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"


class VitalThreshold(NamedTuple):
    good: float
    poor: float
    unit: str


# Metrics compared by the regression detector, in report order
REGRESSION_METRICS: Tuple[Metric, ...] = (
    Metric.CLS,
    Metric.FID,
    Metric.LCP,
    Metric.FCP,
    Metric.TTFB,
)

# Core metrics that feed the diagnostic score
SCORED_METRICS: Tuple[Metric, ...] = (
    Metric.CLS,
    Metric.LCP,
    Metric.FID,
    Metric.FCP,
    Metric.TTFB,
)

VITAL_THRESHOLDS: Dict[Metric, VitalThreshold] = {
    Metric.CLS: VitalThreshold(good=0.1, poor=0.25, unit=""),
    Metric.FID: VitalThreshold(good=100.0, poor=300.0, unit="ms"),
    Metric.LCP: VitalThreshold(good=2500.0, poor=4000.0, unit="ms"),
    Metric.FCP: VitalThreshold(good=1800.0, poor=3000.0, unit="ms"),
    Metric.TTFB: VitalThreshold(good=800.0, poor=1800.0, unit="ms"),
    Metric.INP: VitalThreshold(good=200.0, poor=500.0, unit="ms"),
}


def rate_metric(metric: Metric, value: float) -> Rating:
    """Classify a value against the Web Vitals thresholds (inclusive bounds)."""
    threshold = VITAL_THRESHOLDS[metric]
    if value <= threshold.good:
        return Rating.GOOD
    if value <= threshold.poor:
        return Rating.NEEDS_IMPROVEMENT
    return Rating.POOR


def format_metric_value(metric: Metric, value: float) -> str:
    """Human-readable value with unit (CLS is unitless, 3 decimals)."""
    if metric is Metric.CLS:
        return f"{value:.3f}"
    return f"{value:.0f}ms"
