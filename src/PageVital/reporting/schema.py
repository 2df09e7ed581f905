# ============================================================================
# PageVital - Data Schema
#
# Purpose: Pydantic models for snapshots, baselines, regressions and alerts
# Inputs: None (schema definitions)
# Outputs: Type-safe, immutable models
# Dependencies: pydantic
# Usage: snapshot = MetricsSnapshot(cls=0.05, lcp=1500.0, page=PageInfo(...))
#
# Changelog:
#   2026-09-02: Initial schema (MetricsSnapshot, Baseline, RegressionResult)
#   2026-09-09: camelCase aliases so stored JSON matches the browser wire format;
#               populate_by_name keeps snake_case construction working
#   2026-09-14: Alert model; DiagnosticReport carries per-metric ratings
#   2026-09-21: BaselineMetrics fields made optional so partially populated
#               stored baselines still load (missing metrics are skipped)
# ============================================================================

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from PageVital.metrics import Metric, OverallSeverity, Rating, Severity


class _FrozenModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ============================================================================
# Snapshot
# ============================================================================


class SlowResource(_FrozenModel):
    """A resource entry whose duration exceeded the slow-resource threshold."""

    name: str
    duration: float = Field(default=0.0, ge=0)
    size: float = Field(default=0.0, ge=0)
    type: str = "other"


class ResourceTiming(_FrozenModel):
    """Aggregate resource-timing data for the page."""

    total_resources: int = Field(default=0, ge=0)
    slow_resources: Tuple[SlowResource, ...] = ()
    total_size: float = Field(default=0.0, ge=0)
    total_duration: float = Field(default=0.0, ge=0)


class Viewport(_FrozenModel):
    width: int = 1920
    height: int = 1080


class DeviceInfo(_FrozenModel):
    """Device capabilities. memory (GB) and cores are None when not reported."""

    memory: Optional[float] = None
    cores: Optional[int] = None
    user_agent: str = "unknown"
    viewport: Viewport = Field(default_factory=Viewport)


class ConnectionInfo(_FrozenModel):
    """Network Information API data."""

    effective_type: str = "unknown"
    downlink: float = 0.0
    rtt: float = 0.0
    save_data: bool = False


class PageInfo(_FrozenModel):
    url: str = ""
    referrer: str = ""
    title: str = ""
    timestamp: int = 0  # epoch ms


class MetricsSnapshot(_FrozenModel):
    """
    One measurement of a page.

    All timing metrics are milliseconds; cls is unitless. Missing instrumentation
    is represented as 0, never None.
    """

    cls: float = Field(default=0.0, ge=0)
    fid: float = Field(default=0.0, ge=0)
    inp: float = Field(default=0.0, ge=0)
    lcp: float = Field(default=0.0, ge=0)
    fcp: float = Field(default=0.0, ge=0)
    ttfb: float = Field(default=0.0, ge=0)
    dom_content_loaded: float = Field(default=0.0, ge=0)
    load_complete: float = Field(default=0.0, ge=0)
    first_paint: float = Field(default=0.0, ge=0)
    resource_timing: ResourceTiming = Field(default_factory=ResourceTiming)
    device: DeviceInfo = Field(default_factory=DeviceInfo)
    connection: Optional[ConnectionInfo] = None
    page: PageInfo = Field(default_factory=PageInfo)

    def value_of(self, metric: Metric) -> float:
        """Value of a Web Vital on this snapshot."""
        return float(getattr(self, metric.value))


# ============================================================================
# Baseline
# ============================================================================


class BaselineMetrics(_FrozenModel):
    """Metric values captured in a baseline. None means "not recorded"."""

    cls: Optional[float] = None
    lcp: Optional[float] = None
    fid: Optional[float] = None
    fcp: Optional[float] = None
    ttfb: Optional[float] = None
    dom_content_loaded: Optional[float] = None
    load_complete: Optional[float] = None
    first_paint: Optional[float] = None

    def value_of(self, metric: Metric) -> Optional[float]:
        """Baseline value for a metric, or None when absent (INP is never baselined)."""
        if metric is Metric.INP:
            return None
        return getattr(self, metric.value)


class EnvironmentInfo(_FrozenModel):
    viewport: Viewport = Field(default_factory=Viewport)
    memory: Optional[float] = None
    cores: Optional[int] = None


class BuildInfo(_FrozenModel):
    """Build the baseline was measured against."""

    version: str = "unknown"
    commit: str = "unknown"
    branch: str = "unknown"
    timestamp: int = 0


class Baseline(_FrozenModel):
    """A stored historical snapshot used as a regression comparison point."""

    id: str
    timestamp: int
    url: str
    user_agent: str = "unknown"
    metrics: BaselineMetrics = Field(default_factory=BaselineMetrics)
    score: float = 0.0
    environment: EnvironmentInfo = Field(default_factory=EnvironmentInfo)
    connection: Optional[ConnectionInfo] = None
    build_info: BuildInfo = Field(default_factory=BuildInfo)


# ============================================================================
# Regression
# ============================================================================


class Regression(_FrozenModel):
    """
    One metric that worsened relative to its baseline.

    threshold is the bound that decided the severity: an absolute delta when
    the metric's own thresholds matched, otherwise a percent-change bound.
    """

    metric: Metric
    current: float
    baseline: float
    change: float
    change_percent: float
    severity: Severity
    threshold: float


class RegressionSummary(_FrozenModel):
    total_regressions: int = 0
    critical_regressions: int = 0
    warning_regressions: int = 0
    overall_severity: OverallSeverity = OverallSeverity.NONE


class RegressionResult(_FrozenModel):
    """Outcome of comparing a snapshot against a baseline. Never persisted."""

    has_regression: bool
    regressions: Tuple[Regression, ...] = ()
    summary: RegressionSummary = Field(default_factory=RegressionSummary)
    baseline: Baseline
    current: MetricsSnapshot


# ============================================================================
# Diagnostics
# ============================================================================


class DiagnosticAnalysis(_FrozenModel):
    issues: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    score: float = Field(default=100.0, ge=0, le=100)
    ratings: Dict[Metric, Rating] = Field(default_factory=dict)


class DiagnosticReport(_FrozenModel):
    metrics: MetricsSnapshot
    analysis: DiagnosticAnalysis


# ============================================================================
# Alerts
# ============================================================================


class Alert(_FrozenModel):
    """An alert as dispatched to channels and kept in history."""

    severity: Severity
    message: str
    metric: Optional[str] = None
    value: Optional[float] = None
    timestamp: int  # epoch ms
    data: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """Webhook body: {severity, message, data, timestamp}."""
        return {
            "severity": self.severity.value,
            "message": self.message,
            "data": self.data,
            "timestamp": self.timestamp,
        }


# History entries are stored alerts
AlertHistoryEntry = Alert
