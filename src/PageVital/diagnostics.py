# ============================================================================
# PageVital - Diagnostic Score
#
# Purpose: Grade each core Web Vital and combine the grades into a single
#          page score with human-readable issues and recommendations.
# Inputs: MetricsSnapshot
# Outputs: DiagnosticAnalysis (score in [0, 100], issues, recommendations)
# ============================================================================

from typing import Dict, List, Tuple

from PageVital.metrics import (
    SCORED_METRICS,
    VITAL_THRESHOLDS,
    Metric,
    Rating,
    format_metric_value,
    rate_metric,
)
from PageVital.reporting.schema import DiagnosticAnalysis, MetricsSnapshot

# Relative weight of each metric in the score; sums to 1.0
SCORE_WEIGHTS: Dict[Metric, float] = {
    Metric.CLS: 0.25,
    Metric.LCP: 0.25,
    Metric.FID: 0.20,
    Metric.FCP: 0.15,
    Metric.TTFB: 0.15,
}

# Points per grade; the best grade maps to a full score of 100
GRADE_POINTS: Dict[Rating, float] = {
    Rating.GOOD: 30.0,
    Rating.NEEDS_IMPROVEMENT: 15.0,
    Rating.POOR: 5.0,
}

SLOW_RESOURCE_PENALTY = 5.0
MAX_SLOW_RESOURCES_PENALTY = 10.0

_LABELS: Dict[Metric, str] = {
    Metric.CLS: "Cumulative Layout Shift (CLS)",
    Metric.LCP: "Largest Contentful Paint (LCP)",
    Metric.FID: "First Input Delay (FID)",
    Metric.FCP: "First Contentful Paint (FCP)",
    Metric.TTFB: "Time To First Byte (TTFB)",
    Metric.INP: "Interaction to Next Paint (INP)",
}

_RECOMMENDATIONS: Dict[Metric, str] = {
    Metric.CLS: "Reserve space for images, embeds and ads; avoid inserting content above existing content.",
    Metric.LCP: "Optimize the largest above-the-fold image or text block: preload it, compress it, cut server time.",
    Metric.FID: "Break up long JavaScript tasks and defer or trim third-party scripts.",
    Metric.FCP: "Remove render-blocking resources and inline critical CSS.",
    Metric.TTFB: "Improve server response time: cache at the edge, use a CDN, avoid redirects.",
    Metric.INP: "Reduce main-thread work in event handlers and yield to the browser between updates.",
}


def grade_metrics(snapshot: MetricsSnapshot) -> Dict[Metric, Rating]:
    """Rate every tracked Web Vital on the snapshot."""
    return {metric: rate_metric(metric, snapshot.value_of(metric)) for metric in VITAL_THRESHOLDS}


def compute_score(snapshot: MetricsSnapshot) -> float:
    """
    Weighted page score in [0, 100].

    Each scored metric contributes weight * grade points; the sum is normalized
    so an all-good page scores 100. Slow resources subtract a capped penalty.
    """
    full_points = GRADE_POINTS[Rating.GOOD]
    weighted = 0.0
    for metric in SCORED_METRICS:
        rating = rate_metric(metric, snapshot.value_of(metric))
        weighted += SCORE_WEIGHTS[metric] * GRADE_POINTS[rating]
    score = weighted / full_points * 100.0

    slow_count = len(snapshot.resource_timing.slow_resources)
    score -= min(MAX_SLOW_RESOURCES_PENALTY, slow_count * SLOW_RESOURCE_PENALTY)

    return round(max(0.0, min(100.0, score)), 1)


def _describe_issues(snapshot: MetricsSnapshot) -> Tuple[List[str], List[str]]:
    issues: List[str] = []
    recommendations: List[str] = []

    for metric in SCORED_METRICS:
        value = snapshot.value_of(metric)
        rating = rate_metric(metric, value)
        if rating is Rating.GOOD:
            continue
        threshold = VITAL_THRESHOLDS[metric]
        level = "poor" if rating is Rating.POOR else "needs improvement"
        issues.append(
            f"{_LABELS[metric]} {level}: {format_metric_value(metric, value)} "
            f"(good <= {format_metric_value(metric, threshold.good)})"
        )
        recommendations.append(_RECOMMENDATIONS[metric])

    slow = snapshot.resource_timing.slow_resources
    if slow:
        slowest = max(slow, key=lambda r: r.duration)
        issues.append(f"{len(slow)} slow resource(s); slowest {slowest.name} took {slowest.duration:.0f}ms")
        recommendations.append("Compress, lazy-load or split slow resources and serve them from a CDN.")

    return issues, recommendations


def analyze_snapshot(snapshot: MetricsSnapshot) -> DiagnosticAnalysis:
    """Score a snapshot and list what is out of range and how to fix it."""
    issues, recommendations = _describe_issues(snapshot)
    return DiagnosticAnalysis(
        issues=tuple(issues),
        recommendations=tuple(recommendations),
        score=compute_score(snapshot),
        ratings=grade_metrics(snapshot),
    )
