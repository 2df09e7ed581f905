# ============================================================================
# PageVital - Console Alert Channel
#
# Purpose: Log alerts through the standard logging pipeline
# Inputs: Alert objects
# Outputs: Log records (ERROR for critical, WARNING for warning)
# Dependencies: base, logging_utils
# ============================================================================

import logging
from typing import Optional

from PageVital.channels.base import AlertChannel
from PageVital.logging_utils import get_logger
from PageVital.metrics import Severity
from PageVital.reporting.schema import Alert

_LEVELS = {
    Severity.CRITICAL: logging.ERROR,
    Severity.WARNING: logging.WARNING,
}


class ConsoleChannel(AlertChannel):
    """Writes each alert as a single log line."""

    name = "console"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("PageVital.alerts.console")

    def deliver(self, alert: Alert) -> None:
        detail = f" ({alert.metric}={alert.value})" if alert.metric is not None else ""
        self.logger.log(
            _LEVELS[alert.severity],
            f"[{alert.severity.value.upper()}] {alert.message}{detail}",
        )
