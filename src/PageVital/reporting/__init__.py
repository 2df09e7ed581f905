# ============================================================================
# PageVital - Reporting Package
#
# Purpose: Data models and human-readable report formatting
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PageVital.reporting import MetricsSnapshot, generate_regression_report
# ============================================================================

from PageVital.reporting.regression_report import generate_regression_report
from PageVital.reporting.schema import (
    Alert,
    Baseline,
    DiagnosticReport,
    MetricsSnapshot,
    RegressionResult,
)

__all__ = [
    "Alert",
    "Baseline",
    "DiagnosticReport",
    "MetricsSnapshot",
    "RegressionResult",
    "generate_regression_report",
]
