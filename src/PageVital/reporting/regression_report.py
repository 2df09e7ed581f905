# ============================================================================
# PageVital - Regression Report
#
# Purpose: Render a RegressionResult as a plain-text, multi-line report for
#          logs, CLI output and CI comments. Pure formatting, no I/O.
# ============================================================================

from typing import List

from PageVital.metrics import OverallSeverity, format_metric_value
from PageVital.reporting.schema import Regression, RegressionResult
from PageVital.utils.time import format_ms_timestamp

_SEVERITY_MARKERS = {
    "critical": "[CRITICAL]",
    "warning": "[WARNING]",
}


def _format_regression(regression: Regression) -> str:
    metric = regression.metric
    percent = "inf" if regression.change_percent == float("inf") else f"{regression.change_percent:.1f}"
    return (
        f"  {_SEVERITY_MARKERS[regression.severity.value]} {metric.value.upper()}: "
        f"{format_metric_value(metric, regression.baseline)} -> "
        f"{format_metric_value(metric, regression.current)} "
        f"(+{format_metric_value(metric, regression.change)}, +{percent}%)"
    )


def generate_regression_report(result: RegressionResult) -> str:
    """Build a human-readable regression report."""
    baseline = result.baseline
    summary = result.summary
    lines: List[str] = [
        "Performance Regression Report",
        "=" * 29,
        f"Page: {result.current.page.url or 'unknown'}",
        f"Baseline: {baseline.id} ({format_ms_timestamp(baseline.timestamp)})",
        f"Build: {baseline.build_info.version} @ {baseline.build_info.commit} ({baseline.build_info.branch})",
        "",
    ]

    if not result.has_regression:
        lines.append("No regressions detected.")
        return "\n".join(lines)

    lines.append(
        f"Overall severity: {summary.overall_severity.value.upper()} "
        f"({summary.total_regressions} regression(s): "
        f"{summary.critical_regressions} critical, {summary.warning_regressions} warning)"
    )
    lines.append("")
    lines.append("Regressions:")
    lines.extend(_format_regression(r) for r in result.regressions)

    if summary.overall_severity is OverallSeverity.CRITICAL:
        lines.append("")
        lines.append("Action required: critical regressions should block this release.")

    return "\n".join(lines)
