# ============================================================================
# PageVital - Alert Channels Package
#
# Purpose: Delivery targets for alerts (console log, bounded history, webhook)
# Inputs: None
# Outputs: Public API exports
# Dependencies: None
# Usage: from PageVital.channels import ConsoleChannel, HistoryChannel, WebhookChannel
#
# Changelog:
#   2026-09-14: Initial channels (console, history, webhook)
# ============================================================================

from PageVital.channels.base import AlertChannel
from PageVital.channels.console import ConsoleChannel
from PageVital.channels.history import HistoryChannel
from PageVital.channels.webhook import WebhookChannel

__all__ = [
    "AlertChannel",
    "ConsoleChannel",
    "HistoryChannel",
    "WebhookChannel",
]
