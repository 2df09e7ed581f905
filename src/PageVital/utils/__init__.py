# ============================================================================
# PageVital - Utilities Package
#
# Purpose: Shared helpers (time, serialization)
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PageVital.utils import now_ms
# ============================================================================

from PageVital.utils.time import get_utc_timestamp, now_ms

__all__ = ["get_utc_timestamp", "now_ms"]
