# ============================================================================
# PageVital - Time Utilities
#
# Purpose: Time-related utility functions
# Inputs: None
# Outputs: Timestamps
# Dependencies: datetime, time
# Usage: ts = now_ms()
#
# Changelog:
#   2026-09-02: Initial time utilities; epoch milliseconds for snapshot/alert stamps
# ============================================================================

import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current wall-clock time in integer milliseconds since the epoch."""
    return int(time.time() * 1000)


def get_utc_timestamp() -> str:
    """
    Get current UTC timestamp in ISO-8601 format.

    Returns:
        ISO-8601 formatted timestamp string (e.g., "2026-09-02T15:22:08Z")
    """
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_ms_timestamp(ts_ms: float) -> str:
    """Render an epoch-ms timestamp as ISO-8601 UTC."""
    return datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
