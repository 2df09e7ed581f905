# ============================================================================
# PageVital - Instrumentation Package
#
# Purpose: Collect Web Vitals from a host page adapter
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PageVital.instrumentation import WebVitalsCollector
# ============================================================================

from PageVital.instrumentation.collector import WebVitalsCollector
from PageVital.instrumentation.host import read_field, read_number

__all__ = ["WebVitalsCollector", "read_field", "read_number"]
