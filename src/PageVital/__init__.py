# ============================================================================
# PageVital - Package Initialization
#
# Purpose: Package-level exports and version information
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PageVital import PageVitalMonitor
#
# Changelog:
#   2026-09-02: Initial package setup
#   2026-09-14: Export AlertSystem and PageVitalMonitor
# ============================================================================

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from PageVital.alerts import AlertSystem
from PageVital.baselines import BaselineManager
from PageVital.config import Config
from PageVital.instrumentation.collector import WebVitalsCollector
from PageVital.monitor import MonitoringResult, PageVitalMonitor
from PageVital.regression import RegressionDetector
from PageVital.reporting.schema import Alert, Baseline, MetricsSnapshot, RegressionResult

__all__ = [
    "__version__",
    "Alert",
    "AlertSystem",
    "Baseline",
    "BaselineManager",
    "Config",
    "MetricsSnapshot",
    "MonitoringResult",
    "PageVitalMonitor",
    "RegressionDetector",
    "RegressionResult",
    "WebVitalsCollector",
]
